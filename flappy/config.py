"""Game configuration constants for Flappy."""

from __future__ import annotations

from dataclasses import dataclass

# World (logical design space; drawing is scaled to the window)
WORLD_WIDTH = 600
WORLD_HEIGHT = 800
GROUND_Y = 740
FPS = 60

# Physics (per tick)
GRAVITY = 0.38
FLAP_IMPULSE = -7.2
MAX_FALL_SPEED = 11.0

# Bird
BIRD_X = 140
BIRD_START_Y = WORLD_HEIGHT * 0.45
BIRD_RADIUS = 18

# Pipes
PIPE_GAP = 190
PIPE_WIDTH = 80
PIPE_SPEED = 2.8  # starting speed, restored on every new session
PIPE_SPEED_STEP = 0.05  # difficulty ramp per point
SPAWN_INTERVAL = 95  # ticks
SAFE_MARGIN = 120  # gap keeps this far from ceiling and ground
OFFSCREEN_MARGIN = 40  # removed once trailing edge is this far past x=0

# Offline asset cache
CACHE_VERSION = "flappy-assets-v2"

# Palette
COL_SKY_TOP = (112, 197, 206)
COL_SKY_BOTTOM = (190, 232, 236)
COL_CLOUD = (255, 255, 255)
COL_PIPE = (47, 191, 113)
COL_PIPE_RIM = (36, 158, 94)
COL_GROUND = (192, 132, 26)
COL_GROUND_STRIPE = (246, 173, 46)
BIRD_BODY = (255, 215, 0)
BIRD_WING = (255, 230, 128)
BIRD_BEAK = (255, 140, 0)
EYE_COLOR = (255, 255, 255)
PUPIL_COLOR = (0, 0, 0)
TEXT_COLOR = (255, 255, 255)
TEXT_SHADOW = (40, 40, 48)


class ConfigError(ValueError):
    """Raised when tuning values cannot produce a playable world."""


@dataclass(frozen=True)
class GameConfig:
    """All tunables in one place so tests and tuning can override any of them."""

    world_width: int = WORLD_WIDTH
    world_height: int = WORLD_HEIGHT
    ground_y: float = GROUND_Y
    gravity: float = GRAVITY
    flap_impulse: float = FLAP_IMPULSE
    max_fall_speed: float = MAX_FALL_SPEED
    bird_x: float = BIRD_X
    bird_start_y: float = BIRD_START_Y
    bird_radius: float = BIRD_RADIUS
    pipe_gap: float = PIPE_GAP
    pipe_width: float = PIPE_WIDTH
    pipe_speed: float = PIPE_SPEED
    pipe_speed_step: float = PIPE_SPEED_STEP
    spawn_interval: int = SPAWN_INTERVAL
    safe_margin: float = SAFE_MARGIN
    offscreen_margin: float = OFFSCREEN_MARGIN

    def __post_init__(self) -> None:
        if self.world_width <= 0 or self.world_height <= 0:
            raise ConfigError("world dimensions must be positive")
        if not 0 < self.ground_y <= self.world_height:
            raise ConfigError("ground_y must lie inside the world")
        if self.bird_radius <= 0 or self.pipe_gap <= 0 or self.pipe_width <= 0:
            raise ConfigError("bird_radius, pipe_gap and pipe_width must be positive")
        if self.spawn_interval < 1:
            raise ConfigError("spawn_interval must be at least one tick")
        if self.pipe_speed <= 0 or self.pipe_speed_step < 0:
            raise ConfigError("pipe speed must be positive and its ramp non-negative")
        if self.max_fall_speed <= 0:
            raise ConfigError("max_fall_speed must be positive")
        if self.pipe_gap + 2 * self.safe_margin >= self.ground_y:
            raise ConfigError(
                f"safe band is empty: gap {self.pipe_gap} + 2 * margin {self.safe_margin} "
                f">= ground {self.ground_y}"
            )

    def safe_band(self) -> tuple[float, float]:
        """Inclusive range of gap centres that keep the gap off ceiling and ground."""
        half = self.pipe_gap / 2
        return self.safe_margin + half, self.ground_y - self.safe_margin - half

    @property
    def spawn_x(self) -> float:
        return self.world_width + self.pipe_width


DEFAULT_CONFIG = GameConfig()
