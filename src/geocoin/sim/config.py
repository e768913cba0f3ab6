from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from geocoin.sim.board import LatLng

# Location of the classroom the game world is centered on.
DEFAULT_ORIGIN = LatLng(36.98949379578401, -122.06277128548504)
DEFAULT_TILE_WIDTH = 1e-4
DEFAULT_VISIBILITY_RADIUS = 8
DEFAULT_SPAWN_PROBABILITY = 0.1
DEFAULT_MAX_INITIAL_COINS = 100
DEFAULT_MOVE_STEP = 1

CONFIG_FIELDS = {
    "tile_width",
    "visibility_radius",
    "spawn_probability",
    "max_initial_coins",
    "origin",
    "move_step",
}


@dataclass(frozen=True)
class GameConfig:
    """Tunable gameplay parameters."""

    tile_width: float = DEFAULT_TILE_WIDTH
    visibility_radius: int = DEFAULT_VISIBILITY_RADIUS
    spawn_probability: float = DEFAULT_SPAWN_PROBABILITY
    max_initial_coins: int = DEFAULT_MAX_INITIAL_COINS
    origin: LatLng = field(default=DEFAULT_ORIGIN)
    move_step: int = DEFAULT_MOVE_STEP

    def __post_init__(self) -> None:
        if isinstance(self.tile_width, bool) or not isinstance(self.tile_width, (int, float)):
            raise ValueError("tile_width must be numeric")
        if not math.isfinite(self.tile_width) or self.tile_width <= 0:
            raise ValueError("tile_width must be a finite number > 0")
        if isinstance(self.visibility_radius, bool) or not isinstance(self.visibility_radius, int):
            raise ValueError("visibility_radius must be an integer")
        if self.visibility_radius < 0:
            raise ValueError("visibility_radius must be >= 0")
        if isinstance(self.spawn_probability, bool) or not isinstance(self.spawn_probability, (int, float)):
            raise ValueError("spawn_probability must be numeric")
        if not 0.0 <= self.spawn_probability <= 1.0:
            raise ValueError("spawn_probability must be within [0.0, 1.0]")
        if isinstance(self.max_initial_coins, bool) or not isinstance(self.max_initial_coins, int):
            raise ValueError("max_initial_coins must be an integer")
        if self.max_initial_coins < 0:
            raise ValueError("max_initial_coins must be >= 0")
        if not isinstance(self.origin, LatLng):
            raise ValueError("origin must be a LatLng")
        if isinstance(self.move_step, bool) or not isinstance(self.move_step, int) or self.move_step < 1:
            raise ValueError("move_step must be an integer >= 1")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tile_width": self.tile_width,
            "visibility_radius": self.visibility_radius,
            "spawn_probability": self.spawn_probability,
            "max_initial_coins": self.max_initial_coins,
            "origin": self.origin.to_dict(),
            "move_step": self.move_step,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameConfig":
        if not isinstance(data, dict):
            raise ValueError("config payload must be an object")
        unknown = sorted(set(data) - CONFIG_FIELDS)
        if unknown:
            raise ValueError(f"unknown config fields: {', '.join(unknown)}")
        kwargs: dict[str, Any] = {key: value for key, value in data.items() if key != "origin"}
        if "origin" in data:
            kwargs["origin"] = LatLng.from_dict(data["origin"])
        return cls(**kwargs)

    def with_overrides(self, **overrides: Any) -> "GameConfig":
        values = self.to_dict()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return GameConfig.from_dict(values)
