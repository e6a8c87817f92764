"""
Game state machine.

States:
    IDLE: Menu shown, waiting for the first start (or flap)
    RUNNING: Simulation advances every tick
    PAUSED: Simulation frozen until the pause toggle is pressed again
    ENDED: Final score shown, waiting for a reset

The machine owns the session's lifecycle: a fresh Session is built on IDLE
entry and replaced wholesale on reset.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

from .config import DEFAULT_CONFIG, GameConfig
from .entities import BirdState, PipeState
from .persistence import MemoryBestScoreStore, ScoreStore
from .simulation import Mode, Session, StepResult, advance, new_session

logger = logging.getLogger(__name__)


class Trigger(Enum):
    """Discrete input events; none carries a payload."""
    FLAP = auto()
    START = auto()
    PAUSE = auto()
    RESET = auto()


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of one frame handed to the renderer."""
    bird: BirdState
    pipes: tuple[PipeState, ...]
    score: int
    best: int
    mode: Mode
    frame: int
    pipe_speed: float


ModeListener = Callable[[Mode, Mode], None]


class GameStateMachine:
    """
    Routes triggers and ticks to the current session.

    Only the transitions listed in VALID_TRANSITIONS change the mode;
    anything else is ignored and reported as not applied.
    """

    VALID_TRANSITIONS: set[tuple[Mode, Mode]] = {
        (Mode.IDLE, Mode.RUNNING),
        (Mode.RUNNING, Mode.PAUSED),
        (Mode.PAUSED, Mode.RUNNING),
        (Mode.RUNNING, Mode.ENDED),
        (Mode.ENDED, Mode.RUNNING),
    }

    def __init__(
        self,
        config: GameConfig = DEFAULT_CONFIG,
        store: ScoreStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.store: ScoreStore = store if store is not None else MemoryBestScoreStore()
        self.rng = rng if rng is not None else random.Random()
        self.session: Session = new_session(config)
        self.best = self._read_best()
        self.final_score: int | None = None
        self._listeners: list[ModeListener] = []
        logger.info(f"GameStateMachine ready, best score {self.best}")

    @property
    def mode(self) -> Mode:
        return self.session.mode

    @property
    def score(self) -> int:
        return self.session.score

    def add_listener(self, callback: ModeListener) -> None:
        """Register callback(old_mode, new_mode), called after every mode change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: ModeListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # Triggers

    def handle(self, trigger: Trigger) -> bool:
        """Apply a trigger. Returns False when it is a no-op in the current mode."""
        if trigger is Trigger.FLAP:
            return self.flap()
        if trigger is Trigger.START:
            return self.start()
        if trigger is Trigger.PAUSE:
            return self.toggle_pause()
        if trigger is Trigger.RESET:
            return self.reset()
        raise ValueError(f"Unknown trigger: {trigger!r}")

    def start(self) -> bool:
        if self.mode is not Mode.IDLE:
            return self._ignored(Trigger.START)
        self._set_mode(Mode.RUNNING)
        return True

    def flap(self) -> bool:
        if self.mode is Mode.IDLE:
            # The first flap doubles as the start button.
            return self.start()
        if self.mode is not Mode.RUNNING:
            return self._ignored(Trigger.FLAP)
        self.session.bird.flap(self.config.flap_impulse)
        return True

    def toggle_pause(self) -> bool:
        if self.mode is Mode.RUNNING:
            self._set_mode(Mode.PAUSED)
            return True
        if self.mode is Mode.PAUSED:
            self._set_mode(Mode.RUNNING)
            return True
        return self._ignored(Trigger.PAUSE)

    def reset(self) -> bool:
        if self.mode is not Mode.ENDED:
            return self._ignored(Trigger.RESET)
        old = self.mode
        self.session = new_session(self.config, mode=Mode.RUNNING)
        self.final_score = None
        self._notify(old, Mode.RUNNING)
        return True

    # Ticks

    def tick(self) -> StepResult:
        """Advance one frame if running; other modes leave everything untouched."""
        if self.mode is not Mode.RUNNING:
            return StepResult()
        result = advance(self.session, self.config, self.rng)
        if result.terminated:
            self._on_game_over(result)
        return result

    def snapshot(self) -> Snapshot:
        s = self.session
        return Snapshot(
            bird=s.bird.snapshot(),
            pipes=tuple(p.snapshot() for p in s.pipes),
            score=s.score,
            best=self.best,
            mode=s.mode,
            frame=s.frame,
            pipe_speed=s.pipe_speed,
        )

    # Internals

    def _on_game_over(self, result: StepResult) -> None:
        # advance() has already flipped the session to ENDED.
        self.final_score = self.session.score
        logger.info(f"Game over ({result.cause}), score {self.final_score}")
        if self.final_score > self.best:
            self.best = self.final_score
            self._write_best(self.best)
        self._notify(Mode.RUNNING, Mode.ENDED)

    def _set_mode(self, to_mode: Mode) -> None:
        old = self.mode
        if (old, to_mode) not in self.VALID_TRANSITIONS:
            raise RuntimeError(f"Invalid transition: {old.name} -> {to_mode.name}")
        self.session.mode = to_mode
        self._notify(old, to_mode)

    def _notify(self, old: Mode, new: Mode) -> None:
        logger.info(f"Mode: {old.name} -> {new.name}")
        for listener in list(self._listeners):
            try:
                listener(old, new)
            except Exception as e:
                logger.error(f"Mode listener failed: {e}")

    def _ignored(self, trigger: Trigger) -> bool:
        logger.debug(f"Ignoring {trigger.name} while {self.mode.name}")
        return False

    def _read_best(self) -> int:
        try:
            return max(0, int(self.store.read_best()))
        except Exception as e:
            logger.warning(f"Best score unavailable, starting from 0: {e}")
            return 0

    def _write_best(self, score: int) -> None:
        try:
            self.store.write_best(score)
        except Exception as e:
            logger.warning(f"Best score {score} not persisted: {e}")
