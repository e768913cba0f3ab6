from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Iterator

from geocoin.sim.board import Cell
from geocoin.sim.cache import Coin, Geocache, cell_from_dict

if TYPE_CHECKING:
    from geocoin.sim.board import Board

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA_VERSION = 1
SUPPORTED_SNAPSHOT_SCHEMA_VERSIONS = {1}
SNAPSHOT_JSON_SEPARATORS = (",", ":")


class MalformedSnapshotError(ValueError):
    """A snapshot string could not be decoded into a cache."""


def to_snapshot(cache: Geocache) -> str:
    payload = {
        "schema_version": SNAPSHOT_SCHEMA_VERSION,
        "cell": cache.cell.to_dict(),
        "coins": [coin.to_dict() for coin in cache.coins],
    }
    return json.dumps(payload, sort_keys=True, separators=SNAPSHOT_JSON_SEPARATORS)


def _decode_payload(text: Any) -> dict[str, Any]:
    if not isinstance(text, str):
        raise MalformedSnapshotError("snapshot must be a string")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedSnapshotError(f"snapshot is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise MalformedSnapshotError("snapshot must decode to an object")
    schema_version = payload.get("schema_version")
    if isinstance(schema_version, bool) or not isinstance(schema_version, int):
        raise MalformedSnapshotError("snapshot must contain integer field: schema_version")
    if schema_version not in SUPPORTED_SNAPSHOT_SCHEMA_VERSIONS:
        raise MalformedSnapshotError(f"unsupported snapshot schema_version: {schema_version}")
    return payload


def snapshot_cell_key(text: str) -> tuple[int, int]:
    payload = _decode_payload(text)
    try:
        cell = cell_from_dict(payload.get("cell"), field_name="snapshot.cell")
    except ValueError as exc:
        raise MalformedSnapshotError(str(exc)) from exc
    return cell.key()


def from_snapshot(text: str, *, board: Board | None = None) -> Geocache:
    """Rebuild a cache from ``text``.

    When ``board`` is given, the cache and coin cells are resolved to the
    board's canonical instances.
    """
    payload = _decode_payload(text)
    coins_payload = payload.get("coins")
    if not isinstance(coins_payload, list):
        raise MalformedSnapshotError("snapshot.coins must be a list")
    try:
        cell = cell_from_dict(payload.get("cell"), field_name="snapshot.cell", board=board)
        coins = [
            Coin.from_dict(row, field_name=f"snapshot.coins[{index}]", board=board)
            for index, row in enumerate(coins_payload)
        ]
    except ValueError as exc:
        raise MalformedSnapshotError(str(exc)) from exc
    return Geocache(cell=cell, coins=coins)


class SnapshotStore:
    """One snapshot string per cell, keyed by (i, j) value."""

    def __init__(self) -> None:
        self._snapshots: dict[tuple[int, int], str] = {}

    def __len__(self) -> int:
        return len(self._snapshots)

    def __contains__(self, cell: Cell) -> bool:
        return cell.key() in self._snapshots

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(sorted(self._snapshots))

    def put(self, cache: Geocache) -> None:
        self._snapshots[cache.cell.key()] = to_snapshot(cache)

    def put_snapshot(self, cell: Cell, text: str) -> None:
        """Store ``text`` for ``cell`` as-is; it is only decoded on restore."""
        self._snapshots[cell.key()] = text

    def get(self, cell: Cell) -> str | None:
        return self._snapshots.get(cell.key())

    def discard(self, cell: Cell) -> bool:
        return self._snapshots.pop(cell.key(), None) is not None

    def clear(self) -> None:
        self._snapshots.clear()

    def restore(self, cell: Cell, *, board: Board | None = None) -> Geocache | None:
        """Return the cache stored for ``cell``, or None.

        A snapshot that fails to decode, or that belongs to another cell, is
        dropped so the caller can mint the cache afresh.
        """
        text = self.get(cell)
        if text is None:
            return None
        try:
            cache = from_snapshot(text, board=board)
            if cache.cell.key() != cell.key():
                raise MalformedSnapshotError(
                    f"snapshot cell {cache.cell.label()} does not match requested cell {cell.label()}"
                )
        except MalformedSnapshotError as exc:
            logger.warning("dropping malformed snapshot for cell %s: %s", cell.label(), exc)
            self.discard(cell)
            return None
        logger.debug("restored cache at %s with %d coins", cell.label(), cache.count)
        return cache

    def to_list(self) -> list[str]:
        return [self._snapshots[key] for key in sorted(self._snapshots)]

    @classmethod
    def from_list(cls, rows: Any) -> "SnapshotStore":
        """Build a store from persisted snapshot strings, skipping malformed entries."""
        if not isinstance(rows, list):
            raise ValueError("caches must be a list")
        store = cls()
        for index, text in enumerate(rows):
            try:
                key = snapshot_cell_key(text)
            except MalformedSnapshotError as exc:
                logger.warning("skipping malformed snapshot caches[%d]: %s", index, exc)
                continue
            store.put_snapshot(Cell(*key), text)
        return store
