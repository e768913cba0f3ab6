import json
from pathlib import Path

from geocoin.cli.play import main
from geocoin.cli.viewer import AsciiRenderer, GameController
from geocoin.content.io import PLAYER_POSITION_KEY
from geocoin.content.storage import MemoryStorage
from geocoin.sim.board import LatLng
from geocoin.sim.config import GameConfig
from geocoin.sim.population import PopulationDriver
from geocoin.sim.world import GameState


def _scripted(lines: list[str]):
    feed = iter(lines)

    def read_line(_prompt: str) -> str:
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    return read_line


def _controller(radius: int = 1) -> GameController:
    config = GameConfig(tile_width=1.0, visibility_radius=radius, spawn_probability=1.0, origin=LatLng(0.5, 0.5))
    renderer = AsciiRenderer()
    driver = PopulationDriver(GameState.create(config), renderer, MemoryStorage())
    driver.refresh()
    return GameController(driver, renderer)


def test_play_session_persists_to_save_dir(tmp_path: Path, capsys) -> None:
    save_dir = tmp_path / "save"

    result = main(
        ["--save-dir", str(save_dir), "--radius", "1", "--spawn-probability", "1.0"],
        read_line=_scripted(["show", "n", "quit"]),
    )

    assert result == 0
    output = capsys.readouterr().out
    assert "cache at" in output
    assert (save_dir / "caches.json").exists()
    position = json.loads((save_dir / f"{PLAYER_POSITION_KEY}.json").read_text(encoding="utf-8"))
    assert position["lat"] > GameConfig().origin.lat


def test_play_reports_bad_config(tmp_path: Path, capsys) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"tile_width": -1}), encoding="utf-8")

    result = main(["--save-dir", str(tmp_path / "save"), "--config", str(config_path)], read_line=_scripted([]))

    assert result == 1
    assert "error: tile_width" in capsys.readouterr().out


def test_controller_collect_and_deposit_round_trip() -> None:
    controller = _controller()
    cache = next(entry.cache for entry in controller.renderer.displayed.values() if entry.cache.count > 0)
    before = cache.count

    collected = controller.handle(f"collect {cache.cell.i} {cache.cell.j}")
    deposited = controller.handle(f"deposit {cache.cell.i} {cache.cell.j}")

    assert collected is not None and collected.startswith("moved ")
    assert deposited is not None and "No coins yet..." in deposited
    assert cache.count == before


def test_controller_reports_refused_transfers() -> None:
    controller = _controller(radius=0)

    assert controller.handle("deposit 0 0") == "you are too broke"
    assert controller.handle("collect 9 9") == "no cache at 9,9"


def test_controller_parses_commands() -> None:
    controller = _controller(radius=0)

    assert controller.handle("quit") is None
    assert controller.handle("") == ""
    assert controller.handle("collect a b") == "cell coordinates must be integers"
    assert controller.handle("dance") == "unknown command"
    assert controller.handle("inventory") == "No coins yet..."
    assert "cell=0,1" in controller.handle("e")


def test_render_marks_cache_under_player() -> None:
    controller = _controller(radius=1)

    lines = controller.handle("show").splitlines()

    here = [line for line in lines if line.endswith("(here)")]
    assert len(here) == 1
    assert here[0].startswith('cache at "0,0"')
