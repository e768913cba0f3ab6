from __future__ import annotations

import logging
from typing import Callable, Protocol

from geocoin.content.io import save_game
from geocoin.content.storage import Storage
from geocoin.sim.board import Cell, LatLng
from geocoin.sim.cache import CoinHolder, Geocache, TransferOutcome, instantiate_cache, transfer_coins
from geocoin.sim.luck import luck, presence_key
from geocoin.sim.world import GameState

logger = logging.getLogger(__name__)

MOVE_DIRECTIONS: dict[str, tuple[int, int]] = {
    "north": (1, 0),
    "south": (-1, 0),
    "east": (0, 1),
    "west": (0, -1),
}

TRANSFER_STALE_CACHE = "stale_cache"

TransferCallback = Callable[[], TransferOutcome]


class Renderer(Protocol):
    def display(self, cache: Geocache, on_collect: TransferCallback, on_deposit: TransferCallback) -> None: ...

    def clear_all(self) -> None: ...


class PopulationDriver:
    """Keeps the caches around the player populated and persisted.

    Every repopulation and every successful transfer is written straight to
    ``storage`` when one is attached.
    """

    def __init__(self, state: GameState, renderer: Renderer, storage: Storage | None = None) -> None:
        self.state = state
        self.renderer = renderer
        self.storage = storage
        self._displayed: dict[tuple[int, int], Geocache] = {}

    @property
    def displayed_caches(self) -> list[Geocache]:
        return [self._displayed[key] for key in sorted(self._displayed)]

    def cache_at(self, cell: Cell) -> Geocache | None:
        return self._displayed.get(cell.key())

    def has_cache(self, cell: Cell) -> bool:
        return luck(presence_key(cell.i, cell.j)) < self.state.config.spawn_probability

    def load_cache(self, cell: Cell) -> Geocache:
        cache = self.state.snapshots.restore(cell, board=self.state.board)
        if cache is None:
            cache = instantiate_cache(cell, self.state.config.max_initial_coins)
            self.state.snapshots.put(cache)
        return cache

    def on_player_moved(self, point: LatLng) -> list[Geocache]:
        """Redraw every cache within the visibility radius of ``point``."""
        self.state.player_position = point
        self.renderer.clear_all()
        self._displayed.clear()

        for cell in self.state.board.cells_near(point, self.state.config.visibility_radius):
            if not self.has_cache(cell):
                continue
            cache = self.load_cache(cell)
            self._displayed[cell.key()] = cache
            self.renderer.display(
                cache,
                self._bind(self.collect, cache),
                self._bind(self.deposit, cache),
            )

        logger.debug(
            "repopulated around %s: %d caches displayed",
            self.state.board.cell_for_point(point).label(),
            len(self._displayed),
        )
        if self.storage is not None:
            save_game(self.storage, self.state)
        return self.displayed_caches

    def refresh(self) -> list[Geocache]:
        return self.on_player_moved(self.state.player_position)

    def move_player(self, direction: str) -> list[Geocache]:
        if direction not in MOVE_DIRECTIONS:
            raise ValueError(f"unknown direction: {direction}")
        d_i, d_j = MOVE_DIRECTIONS[direction]
        step = self.state.config.move_step * self.state.config.tile_width
        return self.on_player_moved(self.state.player_position.offset(d_i * step, d_j * step))

    @staticmethod
    def _bind(action: Callable[[Geocache], TransferOutcome], cache: Geocache) -> TransferCallback:
        return lambda: action(cache)

    def collect(self, cache: Geocache) -> TransferOutcome:
        return self._transfer(cache, self.state.inventory, cache)

    def deposit(self, cache: Geocache) -> TransferOutcome:
        return self._transfer(self.state.inventory, cache, cache)

    def _transfer(self, source: CoinHolder, destination: CoinHolder, cache: Geocache) -> TransferOutcome:
        # Only the instance currently displayed for a cell may be mutated.
        if self._displayed.get(cache.cell.key()) is not cache:
            logger.info("transfer at %s refused: cache is no longer displayed", cache.cell.label())
            return TransferOutcome(outcome=TRANSFER_STALE_CACHE, requested=1, available=len(source.coins))
        outcome = transfer_coins(source, destination, 1)
        if not outcome.ok:
            logger.info("transfer at %s refused: %s", cache.cell.label(), outcome.outcome)
            return outcome
        self.state.snapshots.put(cache)
        if self.storage is not None:
            save_game(self.storage, self.state)
        return outcome

    def reset(self) -> list[Geocache]:
        """Forget every cache and coin in hand and return to the origin."""
        if self.storage is not None:
            self.storage.clear()
        self.state.reset()
        return self.refresh()
