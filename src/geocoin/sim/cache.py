from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from geocoin.sim.board import Cell
from geocoin.sim.config import DEFAULT_MAX_INITIAL_COINS
from geocoin.sim.luck import initial_value_key, luck

if TYPE_CHECKING:
    from geocoin.sim.board import Board

logger = logging.getLogger(__name__)

TRANSFER_OK = "ok"
TRANSFER_INSUFFICIENT_TOKENS = "insufficient_tokens"


def _require_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


def cell_from_dict(data: Any, *, field_name: str, board: Board | None = None) -> Cell:
    if not isinstance(data, dict):
        raise ValueError(f"{field_name} must be an object")
    i = _require_int(data.get("i"), field_name=f"{field_name}.i")
    j = _require_int(data.get("j"), field_name=f"{field_name}.j")
    if board is not None:
        return board.canonical_cell(i, j)
    return Cell(i, j)


@dataclass(frozen=True)
class Coin:
    """A single coin, tagged with the cell that minted it."""

    cell: Cell
    serial: int

    def label(self) -> str:
        return f"{self.cell.i}:{self.cell.j}#{self.serial}"

    def to_dict(self) -> dict[str, int]:
        return {"i": self.cell.i, "j": self.cell.j, "serial": self.serial}

    @classmethod
    def from_dict(cls, data: Any, *, field_name: str = "coin", board: Board | None = None) -> "Coin":
        cell = cell_from_dict(data, field_name=field_name, board=board)
        serial = _require_int(data.get("serial"), field_name=f"{field_name}.serial")
        if serial < 0:
            raise ValueError(f"{field_name}.serial must be >= 0")
        return cls(cell=cell, serial=serial)


class CoinHolder(Protocol):
    coins: list[Coin]


@dataclass
class Geocache:
    cell: Cell
    coins: list[Coin] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.coins)


@dataclass
class PlayerInventory:
    coins: list[Coin] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.coins)

    def to_list(self) -> list[dict[str, int]]:
        return [coin.to_dict() for coin in self.coins]

    @classmethod
    def from_list(cls, rows: Any, *, board: Board | None = None) -> "PlayerInventory":
        if not isinstance(rows, list):
            raise ValueError("player_coins must be a list")
        return cls(coins=[Coin.from_dict(row, field_name=f"player_coins[{index}]", board=board) for index, row in enumerate(rows)])


def describe_inventory(inventory: PlayerInventory) -> str:
    if not inventory.coins:
        return "No coins yet..."
    return f"{inventory.count} coins accumulated"


def initial_coin_count(cell: Cell, max_initial_coins: int = DEFAULT_MAX_INITIAL_COINS) -> int:
    return math.floor(luck(initial_value_key(cell.i, cell.j)) * max_initial_coins)


def instantiate_cache(cell: Cell, max_initial_coins: int = DEFAULT_MAX_INITIAL_COINS) -> Geocache:
    """Mint a fresh cache for ``cell`` with its procedurally chosen coin count."""
    count = initial_coin_count(cell, max_initial_coins)
    logger.debug("instantiated cache at %s with %d coins", cell.label(), count)
    return Geocache(cell=cell, coins=[Coin(cell=cell, serial=serial) for serial in range(count)])


class InsufficientTokens(Exception):
    """The source of a transfer holds fewer coins than requested."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(f"requested {requested} coins but only {available} available")
        self.requested = requested
        self.available = available


@dataclass(frozen=True)
class TransferOutcome:
    outcome: str
    requested: int
    available: int
    moved: tuple[Coin, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome == TRANSFER_OK

    def raise_for_outcome(self) -> None:
        if self.outcome == TRANSFER_INSUFFICIENT_TOKENS:
            raise InsufficientTokens(self.requested, self.available)


def transfer_coins(source: CoinHolder, destination: CoinHolder, amount: int = 1) -> TransferOutcome:
    """Move ``amount`` coins from the end of ``source`` onto ``destination``.

    The move is all-or-nothing: when ``source`` holds fewer than ``amount``
    coins neither side is touched and an ``insufficient_tokens`` outcome is
    returned.
    """
    amount = _require_int(amount, field_name="amount")
    if amount < 1:
        raise ValueError("amount must be >= 1")

    available = len(source.coins)
    if available < amount:
        return TransferOutcome(outcome=TRANSFER_INSUFFICIENT_TOKENS, requested=amount, available=available)

    moved: list[Coin] = []
    for _ in range(amount):
        moved.append(source.coins.pop())
    destination.coins.extend(moved)
    return TransferOutcome(outcome=TRANSFER_OK, requested=amount, available=available, moved=tuple(moved))
