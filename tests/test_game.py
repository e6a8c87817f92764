import os
import random

os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame
import pytest

from flappy.assets import AssetCache
from flappy.config import CACHE_VERSION, GameConfig
from flappy.game import Game, translate_event
from flappy.persistence import MemoryBestScoreStore
from flappy.simulation import Mode
from flappy.state import Trigger


@pytest.fixture(autouse=True)
def no_asset_url(monkeypatch) -> None:
    monkeypatch.delenv("FLAPPY_ASSET_URL", raising=False)


def make_game(tmp_path, config: GameConfig | None = None) -> Game:
    return Game(
        config or GameConfig(),
        store=MemoryBestScoreStore(),
        assets=AssetCache(tmp_path / "cache"),
        rng=random.Random(5),
        fps=0,
    )


def key(k: int) -> pygame.event.Event:
    return pygame.event.Event(pygame.KEYDOWN, key=k)


def test_translate_event() -> None:
    assert translate_event(key(pygame.K_SPACE), Mode.RUNNING) is Trigger.FLAP
    assert translate_event(key(pygame.K_UP), Mode.IDLE) is Trigger.FLAP
    assert translate_event(key(pygame.K_p), Mode.RUNNING) is Trigger.PAUSE
    assert translate_event(key(pygame.K_RETURN), Mode.IDLE) is Trigger.START
    assert translate_event(key(pygame.K_RETURN), Mode.ENDED) is Trigger.RESET
    assert translate_event(key(pygame.K_r), Mode.ENDED) is Trigger.RESET
    assert translate_event(key(pygame.K_z), Mode.RUNNING) is None
    click = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(10, 10))
    assert translate_event(click, Mode.RUNNING) is Trigger.FLAP
    right_click = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(10, 10))
    assert translate_event(right_click, Mode.RUNNING) is None


def test_game_init(tmp_path) -> None:
    g = make_game(tmp_path)
    assert g.machine.mode is Mode.IDLE
    assert g.screen.get_size() == (600, 800)
    assert g.running


def test_events_drive_state_machine(tmp_path) -> None:
    g = make_game(tmp_path)
    g.handle_event(key(pygame.K_SPACE))
    assert g.machine.mode is Mode.RUNNING
    g.handle_event(key(pygame.K_p))
    assert g.machine.mode is Mode.PAUSED
    g.handle_event(key(pygame.K_p))
    assert g.machine.mode is Mode.RUNNING
    g.handle_event(pygame.event.Event(pygame.QUIT))
    assert not g.running


def test_run_respects_tick_budget(tmp_path) -> None:
    g = make_game(tmp_path)
    assert g.run(max_ticks=0) == 0
    g.machine.start()
    assert g.run(max_ticks=5) == 5
    assert g.machine.session.frame == 5
    assert g.machine.mode is Mode.RUNNING


def test_render_failure_does_not_stop_simulation(tmp_path, monkeypatch) -> None:
    g = make_game(tmp_path)

    def broken(*args: object) -> None:
        raise pygame.error("display lost")

    monkeypatch.setattr(g.renderer, "draw", broken)
    g.machine.start()
    assert g.run(max_ticks=3) == 3
    assert g.render_failures == 3
    assert g.machine.session.frame == 3


def test_resize_rescales_output(tmp_path) -> None:
    g = make_game(tmp_path)
    g.handle_event(pygame.event.Event(pygame.VIDEORESIZE, w=300, h=400, size=(300, 400)))
    g.draw()
    assert g.render_failures == 0


def test_icon_loaded_from_cache(tmp_path) -> None:
    icon_dir = tmp_path / "cache" / CACHE_VERSION
    icon_dir.mkdir(parents=True)
    pygame.init()
    pygame.image.save(pygame.Surface((8, 8)), str(icon_dir / "icon-192.png"))
    g = make_game(tmp_path)
    assert g.machine.mode is Mode.IDLE


def test_non_pygame_render_error_skips_frame(tmp_path, monkeypatch) -> None:
    g = make_game(tmp_path)

    def broken(*args: object) -> None:
        raise ValueError("bad surface size")

    monkeypatch.setattr(g.renderer, "draw", broken)
    g.machine.start()
    assert g.run(max_ticks=3) == 3
    assert g.render_failures == 3
    assert g.machine.mode is Mode.RUNNING


def test_startup_refreshes_asset_cache(tmp_path) -> None:
    root = tmp_path / "cache"
    stale = root / "flappy-assets-v1"
    stale.mkdir(parents=True)
    assets = AssetCache(root, fetcher=lambda name: name.encode())
    Game(GameConfig(), store=MemoryBestScoreStore(), assets=assets, fps=0)
    assert not stale.exists()
    assert (root / CACHE_VERSION / "icon-512.png").read_bytes() == b"icon-512.png"


def test_startup_survives_unreachable_asset_source(tmp_path) -> None:
    def offline(name: str) -> bytes:
        raise OSError("no network")

    g = Game(GameConfig(), store=MemoryBestScoreStore(), assets=AssetCache(tmp_path / "cache", offline), fps=0)
    assert g.machine.mode is Mode.IDLE
    assert not (tmp_path / "cache" / CACHE_VERSION).exists()


def test_pause_during_loop_is_not_counted_as_tick(tmp_path) -> None:
    g = make_game(tmp_path)
    g.machine.start()
    pygame.event.clear()
    pygame.event.post(key(pygame.K_p))
    pygame.event.post(pygame.event.Event(pygame.QUIT))
    assert g.run(max_ticks=5) == 0
    assert g.machine.mode is Mode.PAUSED
    assert g.machine.session.frame == 0
