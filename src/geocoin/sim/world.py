from __future__ import annotations

from dataclasses import dataclass, field

from geocoin.sim.board import Board, LatLng
from geocoin.sim.cache import PlayerInventory
from geocoin.sim.config import GameConfig
from geocoin.sim.memento import SnapshotStore


@dataclass
class GameState:
    """Process-wide mutable state: cell table, cache snapshots, player."""

    config: GameConfig
    board: Board
    player_position: LatLng
    inventory: PlayerInventory = field(default_factory=PlayerInventory)
    snapshots: SnapshotStore = field(default_factory=SnapshotStore)

    @classmethod
    def create(cls, config: GameConfig | None = None) -> "GameState":
        config = config if config is not None else GameConfig()
        return cls(
            config=config,
            board=Board(config.tile_width, config.visibility_radius),
            player_position=config.origin,
        )

    def reset(self) -> None:
        # The board keeps its cells so existing references stay canonical.
        self.player_position = self.config.origin
        self.inventory.coins.clear()
        self.snapshots.clear()
