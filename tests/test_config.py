import json
from pathlib import Path

import pytest

from geocoin.content.io import load_config_json
from geocoin.sim.board import LatLng
from geocoin.sim.config import DEFAULT_ORIGIN, GameConfig


def test_defaults_match_classroom_gameplay() -> None:
    config = GameConfig()

    assert config.tile_width == 1e-4
    assert config.visibility_radius == 8
    assert config.spawn_probability == 0.1
    assert config.max_initial_coins == 100
    assert config.origin == DEFAULT_ORIGIN


def test_config_round_trips_through_dict() -> None:
    config = GameConfig(tile_width=0.5, visibility_radius=2, origin=LatLng(1.0, 2.0))

    assert GameConfig.from_dict(config.to_dict()) == config


def test_overrides_skip_unset_values() -> None:
    config = GameConfig().with_overrides(visibility_radius=3, spawn_probability=None)

    assert config.visibility_radius == 3
    assert config.spawn_probability == 0.1


def test_load_config_json_fills_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"visibility_radius": 1, "origin": {"lat": 0.5, "lng": -0.5}}), encoding="utf-8")

    config = load_config_json(path)

    assert config.visibility_radius == 1
    assert config.origin == LatLng(0.5, -0.5)
    assert config.tile_width == 1e-4


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"tile_width": 0}, "tile_width must be a finite number > 0"),
        ({"visibility_radius": -1}, "visibility_radius must be >= 0"),
        ({"spawn_probability": 1.5}, r"spawn_probability must be within \[0.0, 1.0\]"),
        ({"max_initial_coins": -3}, "max_initial_coins must be >= 0"),
        ({"move_step": 0}, "move_step must be an integer >= 1"),
        ({"zoom": 19}, "unknown config fields: zoom"),
    ],
)
def test_invalid_config_is_rejected(payload: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        GameConfig.from_dict(payload)
