from __future__ import annotations

from dataclasses import dataclass

from geocoin.sim.cache import TRANSFER_INSUFFICIENT_TOKENS, Geocache, TransferOutcome, describe_inventory
from geocoin.sim.population import MOVE_DIRECTIONS, PopulationDriver, TransferCallback

DIRECTION_ALIASES = {"n": "north", "s": "south", "e": "east", "w": "west"}
EMPTY_CACHE_NOTICE = "you sucked it dry"
EMPTY_INVENTORY_NOTICE = "you are too broke"


@dataclass
class DisplayedCache:
    cache: Geocache
    on_collect: TransferCallback
    on_deposit: TransferCallback


class AsciiRenderer:
    """Terminal stand-in for the map: remembers what is on screen."""

    def __init__(self) -> None:
        self.displayed: dict[tuple[int, int], DisplayedCache] = {}

    def display(self, cache: Geocache, on_collect: TransferCallback, on_deposit: TransferCallback) -> None:
        self.displayed[cache.cell.key()] = DisplayedCache(cache=cache, on_collect=on_collect, on_deposit=on_deposit)

    def clear_all(self) -> None:
        self.displayed.clear()

    def render(self, driver: PopulationDriver) -> str:
        state = driver.state
        player_cell = state.board.cell_for_point(state.player_position)
        lines = [
            f"player=({state.player_position.lat:.6f},{state.player_position.lng:.6f}) cell={player_cell.label()}",
            describe_inventory(state.inventory),
        ]
        if not self.displayed:
            return "\n".join(lines + ["<no caches nearby>"])
        for key in sorted(self.displayed):
            cache = self.displayed[key].cache
            here = " (here)" if state.board.cell_bounds(cache.cell).contains(state.player_position) else ""
            lines.append(f'cache at "{cache.cell.label()}" has value {cache.count}{here}')
        return "\n".join(lines)


class GameController:
    """Turns typed commands into driver calls; owns no state."""

    def __init__(self, driver: PopulationDriver, renderer: AsciiRenderer) -> None:
        self.driver = driver
        self.renderer = renderer

    def move(self, direction: str) -> str:
        direction = DIRECTION_ALIASES.get(direction, direction)
        if direction not in MOVE_DIRECTIONS:
            return f"unknown direction: {direction}"
        self.driver.move_player(direction)
        return self.renderer.render(self.driver)

    def _displayed(self, i: int, j: int) -> DisplayedCache | None:
        return self.renderer.displayed.get((i, j))

    def collect(self, i: int, j: int) -> str:
        displayed = self._displayed(i, j)
        if displayed is None:
            return f"no cache at {i},{j}"
        return self._describe(displayed.on_collect(), displayed.cache, EMPTY_CACHE_NOTICE)

    def deposit(self, i: int, j: int) -> str:
        displayed = self._displayed(i, j)
        if displayed is None:
            return f"no cache at {i},{j}"
        return self._describe(displayed.on_deposit(), displayed.cache, EMPTY_INVENTORY_NOTICE)

    def _describe(self, outcome: TransferOutcome, cache: Geocache, refused_notice: str) -> str:
        if outcome.outcome == TRANSFER_INSUFFICIENT_TOKENS:
            return refused_notice
        if not outcome.ok:
            return f"transfer refused: {outcome.outcome}"
        coins = ", ".join(coin.label() for coin in outcome.moved)
        return f"moved {coins}; cache {cache.cell.label()} has value {cache.count}; {describe_inventory(self.driver.state.inventory)}"

    def inventory(self) -> str:
        coins = self.driver.state.inventory.coins
        if not coins:
            return describe_inventory(self.driver.state.inventory)
        return " ".join(coin.label() for coin in coins)

    def reset(self) -> str:
        self.driver.reset()
        return self.renderer.render(self.driver)

    def handle(self, raw: str) -> str | None:
        """Run one command line; returns None when the session should end."""
        parts = raw.strip().split()
        if not parts:
            return ""
        command = parts[0]
        if command in {"quit", "exit"}:
            return None
        if command == "show" and len(parts) == 1:
            return self.renderer.render(self.driver)
        if command == "inventory" and len(parts) == 1:
            return self.inventory()
        if command == "reset" and len(parts) == 1:
            return self.reset()
        if len(parts) == 1 and (command in DIRECTION_ALIASES or command in MOVE_DIRECTIONS):
            return self.move(command)
        if command in {"collect", "deposit"} and len(parts) == 3:
            try:
                i, j = int(parts[1]), int(parts[2])
            except ValueError:
                return "cell coordinates must be integers"
            return self.collect(i, j) if command == "collect" else self.deposit(i, j)
        return "unknown command"
