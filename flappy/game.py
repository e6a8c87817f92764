"""Window, input wiring and the frame loop for Flappy."""

from __future__ import annotations

import argparse
import io
import logging
import random
import sys

import pygame

from .assets import AssetCache, AssetUnavailable
from .config import DEFAULT_CONFIG, FPS, GameConfig
from .persistence import BestScoreStore, ScoreStore
from .render import Renderer
from .simulation import Mode
from .state import GameStateMachine, Trigger

logger = logging.getLogger(__name__)

FLAP_KEYS = (pygame.K_SPACE, pygame.K_UP, pygame.K_w)
ICON_ASSET = "icon-192.png"


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def translate_event(event: pygame.event.Event, mode: Mode) -> Trigger | None:
    """Map a pygame event to a game trigger; None for everything else."""
    if event.type == pygame.KEYDOWN:
        if event.key in FLAP_KEYS:
            return Trigger.FLAP
        if event.key == pygame.K_p:
            return Trigger.PAUSE
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            return Trigger.RESET if mode is Mode.ENDED else Trigger.START
        if event.key == pygame.K_r:
            return Trigger.RESET
    elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        return Trigger.FLAP
    return None


class Game:
    """Top-level controller: owns the window and drives the state machine."""

    def __init__(
        self,
        config: GameConfig = DEFAULT_CONFIG,
        store: ScoreStore | None = None,
        assets: AssetCache | None = None,
        rng: random.Random | None = None,
        fps: int = FPS,
    ) -> None:
        pygame.init()
        self.config = config
        self.fps = fps
        self.screen = pygame.display.set_mode((config.world_width, config.world_height), pygame.RESIZABLE)
        pygame.display.set_caption("Flappy")
        self.clock = pygame.time.Clock()
        self.assets = assets if assets is not None else AssetCache()
        self._prepare_assets()
        self._load_icon()
        self.machine = GameStateMachine(config, store if store is not None else BestScoreStore(), rng)
        self.renderer = Renderer(config)
        self.running = True
        self.render_failures = 0

    def _prepare_assets(self) -> None:
        """Drop stale cache versions and pre-cache the asset list when online."""
        self.assets.activate()
        if self.assets.fetcher is None:
            return
        try:
            self.assets.install()
        except AssetUnavailable as e:
            logger.warning(f"Assets not pre-cached, running from what is cached: {e}")

    def _load_icon(self) -> None:
        try:
            data = self.assets.fetch(ICON_ASSET)
            icon = pygame.image.load(io.BytesIO(data), ICON_ASSET)
        except (AssetUnavailable, pygame.error) as e:
            logger.debug(f"No window icon: {e}")
            return
        pygame.display.set_icon(icon)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE):
            self.running = False
            return
        if event.type == pygame.VIDEORESIZE:
            self.screen = pygame.display.set_mode((max(1, event.w), max(1, event.h)), pygame.RESIZABLE)
            return
        trigger = translate_event(event, self.machine.mode)
        if trigger is not None:
            self.machine.handle(trigger)

    def draw(self) -> None:
        """Render the current snapshot; a failed frame is skipped, never fatal."""
        try:
            self.renderer.draw(self.screen, self.machine.snapshot())
            pygame.display.flip()
        except Exception as e:
            self.render_failures += 1
            logger.warning(f"Skipping frame {self.machine.session.frame}: {e!r}")

    def run(self, max_ticks: int | None = None) -> int:
        """Run until quit or until max_ticks simulation ticks have happened.

        While the game is running each iteration is input, one tick, one render.
        In any other mode the loop draws the still frame and blocks on the next
        event. Returns the number of ticks performed.
        """
        ticks = 0
        while self.running:
            budget_left = max_ticks is None or ticks < max_ticks
            if self.machine.mode is Mode.RUNNING and budget_left:
                for event in pygame.event.get():
                    self.handle_event(event)
                if self.machine.mode is Mode.RUNNING:
                    self.machine.tick()
                    ticks += 1
                self.draw()
                self.clock.tick(self.fps)
                continue
            if not budget_left:
                break
            self.draw()
            self.handle_event(pygame.event.wait())
        return ticks

    def close(self) -> None:
        pygame.quit()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="flappy", description="Fly through the pipes.")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    parser.add_argument("--seed", type=int, default=None, help="seed for pipe placement")
    args = parser.parse_args(argv)

    setup_logging(args.debug)
    rng = random.Random(args.seed) if args.seed is not None else None
    game = Game(rng=rng)
    try:
        game.run()
    finally:
        game.close()
    sys.exit(0)
