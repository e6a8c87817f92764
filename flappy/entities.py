"""Game entities: the player-controlled bird and the scrolling pipes.

Entities are plain mutable objects owned by a session. Rendering never touches
them directly; it works from the immutable views returned by ``snapshot()``.
"""

from __future__ import annotations

from typing import NamedTuple

from .config import (
    BIRD_RADIUS,
    FLAP_IMPULSE,
    GRAVITY,
    MAX_FALL_SPEED,
    PIPE_GAP,
    PIPE_WIDTH,
    WORLD_HEIGHT,
)
from .utils import Rect, circle_rect_collision


class BirdState(NamedTuple):
    x: float
    y: float
    vy: float
    radius: float


class PipeState(NamedTuple):
    x: float
    hole_y: float
    passed: bool
    top: Rect
    bottom: Rect


class Bird:
    def __init__(self, x: float, y: float, radius: float = BIRD_RADIUS) -> None:
        self.x = float(x)
        self.y = float(y)
        self.vy = 0.0
        self.radius = float(radius)

    def flap(self, impulse: float = FLAP_IMPULSE) -> None:
        # Overwrite, not add: every flap gives the same lift.
        self.vy = impulse

    def update(self, gravity: float = GRAVITY, max_fall: float = MAX_FALL_SPEED) -> None:
        """Integrate one tick: gravity, terminal velocity clamp, then position."""
        self.vy = min(self.vy + gravity, max_fall)
        self.y += self.vy

    @property
    def leading_edge(self) -> float:
        return self.x - self.radius

    def snapshot(self) -> BirdState:
        return BirdState(self.x, self.y, self.vy, self.radius)


class Pipe:
    def __init__(
        self,
        x: float,
        hole_y: float,
        gap: float = PIPE_GAP,
        width: float = PIPE_WIDTH,
        depth: float = WORLD_HEIGHT,
    ) -> None:
        self.x = float(x)
        self.hole_y = float(hole_y)
        self.gap = gap
        self.width = width
        self.depth = depth
        self.passed = False

    @property
    def trailing_edge(self) -> float:
        return self.x + self.width

    @property
    def top_rect(self) -> Rect:
        return (self.x, 0.0, self.width, self.hole_y - self.gap / 2)

    @property
    def bottom_rect(self) -> Rect:
        return (self.x, self.hole_y + self.gap / 2, self.width, self.depth)

    def update(self, speed: float) -> None:
        self.x -= speed

    def offscreen(self, margin: float) -> bool:
        return self.trailing_edge <= -margin

    def collides(self, bird: Bird) -> bool:
        """True if the bird's circle touches either solid part of the pipe."""
        return circle_rect_collision(bird.x, bird.y, bird.radius, self.top_rect) or circle_rect_collision(
            bird.x, bird.y, bird.radius, self.bottom_rect
        )

    def snapshot(self) -> PipeState:
        return PipeState(self.x, self.hole_y, self.passed, self.top_rect, self.bottom_rect)
