from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


def _require_finite(value: Any, *, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be numeric")
    if not math.isfinite(value):
        raise ValueError(f"{field_name} must be finite")
    return float(value)


@dataclass(frozen=True)
class LatLng:
    """Geographic point in degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "lat", _require_finite(self.lat, field_name="lat"))
        object.__setattr__(self, "lng", _require_finite(self.lng, field_name="lng"))

    def offset(self, d_lat: float, d_lng: float) -> "LatLng":
        return LatLng(self.lat + d_lat, self.lng + d_lng)

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LatLng":
        if not isinstance(data, dict):
            raise ValueError("point must be an object")
        if "lat" not in data or "lng" not in data:
            raise ValueError("point requires lat and lng")
        return cls(lat=data["lat"], lng=data["lng"])


@dataclass(frozen=True, order=True)
class Cell:
    """Quantized grid tile (i, j).

    Obtain cells through ``Board`` so that equal coordinates share one instance.
    """

    i: int
    j: int

    def key(self) -> tuple[int, int]:
        return (self.i, self.j)

    def label(self) -> str:
        return f"{self.i},{self.j}"

    def to_dict(self) -> dict[str, int]:
        return {"i": self.i, "j": self.j}


@dataclass(frozen=True)
class CellBounds:
    south_west: LatLng
    north_east: LatLng

    def contains(self, point: LatLng) -> bool:
        return (
            self.south_west.lat <= point.lat < self.north_east.lat
            and self.south_west.lng <= point.lng < self.north_east.lng
        )


class Board:
    """Flyweight grid of cells keyed by (i, j).

    The canonical cell table only ever grows, so two lookups of the same
    coordinates always return the same ``Cell`` object.
    """

    def __init__(self, tile_width: float, tile_visibility_radius: int = 0) -> None:
        tile_width = _require_finite(tile_width, field_name="tile_width")
        if tile_width <= 0:
            raise ValueError("tile_width must be > 0")
        if isinstance(tile_visibility_radius, bool) or not isinstance(tile_visibility_radius, int):
            raise ValueError("tile_visibility_radius must be an integer")
        if tile_visibility_radius < 0:
            raise ValueError("tile_visibility_radius must be >= 0")
        self.tile_width = tile_width
        self.tile_visibility_radius = tile_visibility_radius
        self._known_cells: dict[tuple[int, int], Cell] = {}

    def __len__(self) -> int:
        return len(self._known_cells)

    def canonical_cell(self, i: int, j: int) -> Cell:
        if isinstance(i, bool) or isinstance(j, bool) or not isinstance(i, int) or not isinstance(j, int):
            raise ValueError("cell coordinates must be integers")
        key = (i, j)
        cell = self._known_cells.get(key)
        if cell is None:
            cell = Cell(i, j)
            self._known_cells[key] = cell
        return cell

    def cell_for_point(self, point: LatLng) -> Cell:
        i = point.lat / self.tile_width
        j = point.lng / self.tile_width
        if not math.isfinite(i) or not math.isfinite(j):
            raise ValueError("point is too far out to quantize at this tile_width")
        return self.canonical_cell(math.floor(i), math.floor(j))

    def cell_bounds(self, cell: Cell) -> CellBounds:
        return CellBounds(
            south_west=LatLng(cell.i * self.tile_width, cell.j * self.tile_width),
            north_east=LatLng((cell.i + 1) * self.tile_width, (cell.j + 1) * self.tile_width),
        )

    def cells_near(self, point: LatLng, radius: int | None = None) -> list[Cell]:
        """Return the (2r+1)^2 cells around ``point`` in row-major order."""
        if radius is None:
            radius = self.tile_visibility_radius
        if isinstance(radius, bool) or not isinstance(radius, int):
            raise ValueError("radius must be an integer")
        if radius < 0:
            raise ValueError("radius must be >= 0")

        origin = self.cell_for_point(point)
        cells: list[Cell] = []
        for di in range(-radius, radius + 1):
            for dj in range(-radius, radius + 1):
                cells.append(self.canonical_cell(origin.i + di, origin.j + dj))
        return cells
