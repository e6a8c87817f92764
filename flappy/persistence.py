"""Best-score persistence.

The store is a collaborator of the state machine: it is read once when the
machine is built and written only when a finished session beats the record.
Every I/O fault degrades to "no best score yet" instead of interrupting play.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

SCORE_KEY = "flappy_high"
HOME_ENV = "FLAPPY_HOME"


class ScoreStore(Protocol):
    def read_best(self) -> int: ...

    def write_best(self, score: int) -> None: ...


def default_score_path() -> Path:
    root = os.environ.get(HOME_ENV)
    base = Path(root) if root else Path.home() / ".flappy"
    return base / "best.json"


class BestScoreStore:
    """JSON file holding a single non-negative integer."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else default_score_path()

    def read_best(self) -> int:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return 0
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read best score from {self.path}: {e}")
            return 0
        try:
            value = json.loads(raw).get(SCORE_KEY, 0)
        except (ValueError, AttributeError) as e:
            logger.warning(f"Ignoring corrupt best score file {self.path}: {e}")
            return 0
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning(f"Ignoring invalid best score {value!r} in {self.path}")
            return 0
        return value

    def write_best(self, score: int) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps({SCORE_KEY: int(score)}), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            # Dropped for this session; the next improvement tries again.
            logger.warning(f"Could not save best score {score} to {self.path}: {e}")
            return
        logger.info(f"New best score saved: {score}")


class MemoryBestScoreStore:
    """In-process store for headless runs and tests."""

    def __init__(self, best: int = 0) -> None:
        self.best = best
        self.writes: list[int] = []

    def read_best(self) -> int:
        return self.best

    def write_best(self, score: int) -> None:
        self.best = score
        self.writes.append(score)
