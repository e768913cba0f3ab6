from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from geocoin.content.storage import Storage
from geocoin.sim.board import LatLng
from geocoin.sim.cache import PlayerInventory
from geocoin.sim.config import GameConfig
from geocoin.sim.memento import SnapshotStore
from geocoin.sim.world import GameState

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
SUPPORTED_SCHEMA_VERSIONS = {1}
SCHEMA_VERSION_KEY = "schema_version"
CACHES_KEY = "caches"
PLAYER_POSITION_KEY = "player_position"
PLAYER_COINS_KEY = "player_coins"
CANONICAL_JSON_SEPARATORS = (",", ":")


def _canonical_json(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=CANONICAL_JSON_SEPARATORS)


def _load_json_blob(storage: Storage, key: str) -> Any | None:
    text = storage.load(key)
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{key} is not valid JSON: {exc.msg}") from exc


def save_caches(storage: Storage, state: GameState) -> None:
    storage.save(CACHES_KEY, _canonical_json(state.snapshots.to_list()))


def save_player(storage: Storage, state: GameState) -> None:
    storage.save(PLAYER_POSITION_KEY, _canonical_json(state.player_position.to_dict()))
    storage.save(PLAYER_COINS_KEY, _canonical_json(state.inventory.to_list()))


def save_game(storage: Storage, state: GameState) -> None:
    storage.save(SCHEMA_VERSION_KEY, _canonical_json(SCHEMA_VERSION))
    save_caches(storage, state)
    save_player(storage, state)


def load_game(storage: Storage, config: GameConfig | None = None) -> GameState:
    """Rebuild game state from ``storage``; absent blobs start a fresh game."""
    state = GameState.create(config)

    schema_version = _load_json_blob(storage, SCHEMA_VERSION_KEY)
    if schema_version is not None:
        if isinstance(schema_version, bool) or not isinstance(schema_version, int):
            raise ValueError("schema_version must be an integer")
        if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
            raise ValueError(f"unsupported save schema_version: {schema_version}")

    caches = _load_json_blob(storage, CACHES_KEY)
    if caches is not None:
        state.snapshots = SnapshotStore.from_list(caches)

    position = _load_json_blob(storage, PLAYER_POSITION_KEY)
    if position is not None:
        state.player_position = LatLng.from_dict(position)

    coins = _load_json_blob(storage, PLAYER_COINS_KEY)
    if coins is not None:
        state.inventory = PlayerInventory.from_list(coins, board=state.board)

    logger.debug(
        "loaded game: %d cache snapshots, %d coins in hand",
        len(state.snapshots),
        state.inventory.count,
    )
    return state


def load_config_json(path: str | Path) -> GameConfig:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return GameConfig.from_dict(payload)
