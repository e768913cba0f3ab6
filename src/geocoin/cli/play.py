from __future__ import annotations

import argparse
import logging
from typing import Callable, Sequence

from geocoin.cli.viewer import AsciiRenderer, GameController
from geocoin.content.io import load_config_json, load_game
from geocoin.content.storage import JsonDirectoryStorage
from geocoin.sim.config import GameConfig
from geocoin.sim.population import PopulationDriver

DEFAULT_SAVE_DIR = "saves/geocoin"
HELP_TEXT = "Commands: show | n | s | e | w | collect <i> <j> | deposit <i> <j> | inventory | reset | quit"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="geocoin-play", description="Collect and deposit coins in nearby caches.")
    parser.add_argument("--save-dir", default=DEFAULT_SAVE_DIR, help="Directory holding the persisted game blobs.")
    parser.add_argument("--config", help="Optional JSON file with gameplay parameters.")
    parser.add_argument("--tile-width", type=float, help="Cell size in degrees.")
    parser.add_argument("--radius", type=int, help="Visibility radius in cells.")
    parser.add_argument("--spawn-probability", type=float, help="Chance that a cell holds a cache.")
    parser.add_argument("--reset", action="store_true", help="Discard the saved game before starting.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def _resolve_config(args: argparse.Namespace) -> GameConfig:
    config = load_config_json(args.config) if args.config else GameConfig()
    return config.with_overrides(
        tile_width=args.tile_width,
        visibility_radius=args.radius,
        spawn_probability=args.spawn_probability,
    )


def run_session(controller: GameController, read_line: Callable[[str], str] = input) -> None:
    print(HELP_TEXT)
    print(controller.renderer.render(controller.driver))
    while True:
        try:
            raw = read_line("> ")
        except EOFError:
            break
        reply = controller.handle(raw)
        if reply is None:
            break
        if reply:
            print(reply)


def main(argv: Sequence[str] | None = None, read_line: Callable[[str], str] = input) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = _resolve_config(args)
        storage = JsonDirectoryStorage(args.save_dir)
        if args.reset:
            storage.clear()
        state = load_game(storage, config)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}")
        return 1

    renderer = AsciiRenderer()
    driver = PopulationDriver(state, renderer, storage)
    driver.refresh()
    run_session(GameController(driver, renderer), read_line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
