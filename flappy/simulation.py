"""Fixed-timestep simulation: one call to ``advance`` is one tick."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, auto

from .config import DEFAULT_CONFIG, GameConfig
from .entities import Bird, Pipe

logger = logging.getLogger(__name__)


class Mode(Enum):
    IDLE = auto()
    RUNNING = auto()
    PAUSED = auto()
    ENDED = auto()


@dataclass
class Session:
    """Everything that changes during one play session."""

    bird: Bird
    pipes: list[Pipe] = field(default_factory=list)
    mode: Mode = Mode.IDLE
    score: int = 0
    frame: int = 0
    pipe_speed: float = DEFAULT_CONFIG.pipe_speed
    spawn_timer: int = 0


@dataclass(frozen=True)
class StepResult:
    terminated: bool = False
    cause: str | None = None  # "ground", "ceiling" or "pipe"
    scored: int = 0


def new_session(config: GameConfig = DEFAULT_CONFIG, mode: Mode = Mode.IDLE) -> Session:
    return Session(
        bird=Bird(config.bird_x, config.bird_start_y, config.bird_radius),
        mode=mode,
        pipe_speed=config.pipe_speed,
    )


def spawn_pipe(config: GameConfig, rng: random.Random) -> Pipe:
    """New pipe at the right edge with its gap centre drawn uniformly from the safe band."""
    lo, hi = config.safe_band()
    return Pipe(
        config.spawn_x,
        rng.uniform(lo, hi),
        gap=config.pipe_gap,
        width=config.pipe_width,
        depth=config.world_height,
    )


def integrate_bird(bird: Bird, config: GameConfig) -> None:
    bird.update(config.gravity, config.max_fall_speed)


def check_collision(session: Session, config: GameConfig) -> str | None:
    """Name what the bird hit this tick, or None."""
    bird = session.bird
    if bird.y + bird.radius >= config.ground_y:
        return "ground"
    if bird.y - bird.radius <= 0:
        return "ceiling"
    for pipe in session.pipes:
        if pipe.collides(bird):
            return "pipe"
    return None


def advance(session: Session, config: GameConfig = DEFAULT_CONFIG, rng: random.Random | None = None) -> StepResult:
    """Advance a running session by one tick, in place.

    Order matters: physics, spawn, scroll and score, cull, then the terminal
    check against what is left. A session that is not RUNNING is untouched.
    """
    if session.mode is not Mode.RUNNING:
        return StepResult()
    rng = rng or random
    session.frame += 1

    integrate_bird(session.bird, config)

    session.spawn_timer += 1
    if session.spawn_timer >= config.spawn_interval:
        session.spawn_timer = 0
        session.pipes.append(spawn_pipe(config, rng))

    scored = 0
    leading = session.bird.leading_edge
    for pipe in session.pipes:
        pipe.update(session.pipe_speed)
        if not pipe.passed and pipe.trailing_edge < leading:
            pipe.passed = True
            session.score += 1
            session.pipe_speed += config.pipe_speed_step
            scored += 1

    session.pipes = [p for p in session.pipes if not p.offscreen(config.offscreen_margin)]

    cause = check_collision(session, config)
    if cause is None:
        return StepResult(scored=scored)

    session.mode = Mode.ENDED
    logger.debug(f"Session ended on frame {session.frame}: hit {cause}, score {session.score}")
    return StepResult(terminated=True, cause=cause, scored=scored)
