import math

import pytest

from geocoin.sim.board import Board, Cell, LatLng


def test_point_quantizes_to_floor_of_tile_ratio() -> None:
    board = Board(tile_width=1e-4)

    cell = board.cell_for_point(LatLng(36.9895, -122.0628))

    assert (cell.i, cell.j) == (369895, -1220628)


def test_negative_coordinates_round_toward_negative_infinity() -> None:
    board = Board(tile_width=1.0)

    assert board.cell_for_point(LatLng(-0.5, -1.5)).key() == (-1, -2)
    assert board.cell_for_point(LatLng(0.0, 0.0)).key() == (0, 0)


def test_same_coordinates_resolve_to_identical_cell_instance() -> None:
    board = Board(tile_width=1e-4)

    first = board.cell_for_point(LatLng(36.98949, -122.06277))
    second = board.cell_for_point(LatLng(36.98949, -122.06277))
    by_value = board.canonical_cell(first.i, first.j)

    assert first is second
    assert first is by_value
    assert first == Cell(first.i, first.j)


def test_canonical_table_only_grows() -> None:
    board = Board(tile_width=1.0)
    board.cells_near(LatLng(0.5, 0.5), 1)
    size_after_first = len(board)

    board.cells_near(LatLng(0.5, 0.5), 1)
    board.cells_near(LatLng(3.5, 0.5), 1)

    assert size_after_first == 9
    assert len(board) == 18


def test_radius_one_returns_nine_cells_in_row_major_order() -> None:
    board = Board(tile_width=1e-4)

    cells = board.cells_near(LatLng(36.9895, -122.0628), 1)

    assert len(cells) == 9
    assert [cell.key() for cell in cells] == [
        (369895 + di, -1220628 + dj) for di in (-1, 0, 1) for dj in (-1, 0, 1)
    ]


def test_radius_defaults_to_board_visibility_radius() -> None:
    board = Board(tile_width=1.0, tile_visibility_radius=2)

    assert len(board.cells_near(LatLng(0.5, 0.5))) == 25
    assert len(board.cells_near(LatLng(0.5, 0.5), 0)) == 1


def test_neighborhood_cells_are_canonical() -> None:
    board = Board(tile_width=1.0)

    near = board.cells_near(LatLng(0.5, 0.5), 1)
    center = board.cell_for_point(LatLng(0.5, 0.5))

    assert near[4] is center


def test_cell_bounds_span_one_tile() -> None:
    board = Board(tile_width=0.5)
    cell = board.canonical_cell(2, -3)

    bounds = board.cell_bounds(cell)

    assert bounds.south_west == LatLng(1.0, -1.5)
    assert bounds.north_east == LatLng(1.5, -1.0)
    assert bounds.contains(LatLng(1.25, -1.25))
    assert not bounds.contains(LatLng(1.5, -1.25))


def test_negative_radius_is_rejected() -> None:
    board = Board(tile_width=1.0)

    with pytest.raises(ValueError, match="radius must be >= 0"):
        board.cells_near(LatLng(0.0, 0.0), -1)


@pytest.mark.parametrize("lat", [math.nan, math.inf, -math.inf])
def test_non_finite_points_are_rejected(lat: float) -> None:
    with pytest.raises(ValueError, match="lat must be finite"):
        LatLng(lat, 0.0)


def test_board_rejects_non_positive_tile_width() -> None:
    with pytest.raises(ValueError, match="tile_width must be > 0"):
        Board(tile_width=0.0)


def test_point_beyond_quantizable_range_is_rejected() -> None:
    board = Board(tile_width=1e-4)

    with pytest.raises(ValueError, match="too far out to quantize"):
        board.cell_for_point(LatLng(1e308, 0.0))
