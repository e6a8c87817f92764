"""Rendering of game snapshots.

Everything is drawn in the fixed design space first and then stretched to the
target surface, so the window can be any size.
"""

from __future__ import annotations

import math

import pygame

from .config import (
    BIRD_BEAK,
    BIRD_BODY,
    BIRD_WING,
    COL_CLOUD,
    COL_GROUND,
    COL_GROUND_STRIPE,
    COL_PIPE,
    COL_PIPE_RIM,
    COL_SKY_BOTTOM,
    COL_SKY_TOP,
    DEFAULT_CONFIG,
    EYE_COLOR,
    PUPIL_COLOR,
    TEXT_COLOR,
    TEXT_SHADOW,
    GameConfig,
)
from .simulation import Mode
from .state import Snapshot
from .utils import clamp, scale_color, vertical_gradient

RIM_HEIGHT = 22
RIM_OVERHANG = 4
STRIPE_SPACING = 80


def scale_factors(size: tuple[int, int], config: GameConfig = DEFAULT_CONFIG) -> tuple[float, float]:
    """Design-space to window scale on each axis."""
    w, h = size
    return w / config.world_width, h / config.world_height


def bird_tilt(vy: float) -> float:
    """Nose-up while rising, nose-down while falling, in radians."""
    return clamp(vy / 12.0, -0.35, 0.45)


class Renderer:
    def __init__(self, config: GameConfig = DEFAULT_CONFIG) -> None:
        if not pygame.font.get_init():
            pygame.font.init()
        self.config = config
        self.size = (config.world_width, config.world_height)
        self.world = pygame.Surface(self.size, 0, 32)
        self.font_big = pygame.font.SysFont(None, 72)
        self.font_small = pygame.font.SysFont(None, 32)
        self.sky = pygame.surfarray.make_surface(vertical_gradient(*self.size, COL_SKY_TOP, COL_SKY_BOTTOM))
        self.bird_sprite = self._make_bird_sprite()

    def _make_bird_sprite(self) -> pygame.Surface:
        r = int(self.config.bird_radius)
        side = r * 4
        s = pygame.Surface((side, side), pygame.SRCALPHA)
        c = side // 2
        pygame.draw.circle(s, BIRD_BODY, (c, c), r)
        pygame.draw.ellipse(s, BIRD_WING, pygame.Rect(c - 16, c - 4, 20, 12))
        pygame.draw.polygon(s, BIRD_BEAK, [(c + 10, c), (c + 22, c - 5), (c + 22, c + 5)])
        pygame.draw.circle(s, EYE_COLOR, (c + 4, c - 6), 5)
        pygame.draw.circle(s, PUPIL_COLOR, (c + 5, c - 6), 2)
        return s

    def draw(self, target: pygame.Surface, snap: Snapshot) -> None:
        surf = self.world
        surf.blit(self.sky, (0, 0))
        self.draw_clouds(surf, snap.frame)
        for pipe in snap.pipes:
            self.draw_pipe(surf, pipe.top, pipe.bottom)
        self.draw_ground(surf, snap.frame, snap.pipe_speed)
        self.draw_bird(surf, snap.bird.x, snap.bird.y, snap.bird.vy)
        self.draw_ui(surf, snap)

        if target.get_size() == self.size:
            target.blit(surf, (0, 0))
        else:
            target.blit(pygame.transform.smoothscale(surf, target.get_size()), (0, 0))

    def draw_clouds(self, surf: pygame.Surface, frame: int) -> None:
        layer = pygame.Surface(self.size, pygame.SRCALPHA)
        w = self.config.world_width
        for i in range(3):
            cx = (frame * 0.2 + i * 220) % (w + 200) - 100
            cy = 120 + i * 80
            r = 40 + i * 6
            color = (*COL_CLOUD, 230)
            pygame.draw.circle(layer, color, (int(cx), cy), r)
            pygame.draw.circle(layer, color, (int(cx + r), cy + 10), int(r * 0.85))
            pygame.draw.circle(layer, color, (int(cx - r), cy + 15), int(r * 0.9))
        layer.set_alpha(166)
        surf.blit(layer, (0, 0))

    def draw_pipe(self, surf: pygame.Surface, top: tuple, bottom: tuple) -> None:
        tx, ty, tw, th = top
        bx, by, bw, bh = bottom
        pygame.draw.rect(surf, COL_PIPE, pygame.Rect(int(tx), int(ty), int(tw), int(th)))
        pygame.draw.rect(surf, COL_PIPE, pygame.Rect(int(bx), int(by), int(bw), int(bh)))
        # Rims sit on the gap side of each half
        rim_w = int(tw) + 2 * RIM_OVERHANG
        pygame.draw.rect(surf, COL_PIPE_RIM, pygame.Rect(int(tx) - RIM_OVERHANG, int(th) - RIM_HEIGHT, rim_w, RIM_HEIGHT))
        pygame.draw.rect(surf, COL_PIPE_RIM, pygame.Rect(int(bx) - RIM_OVERHANG, int(by), rim_w, RIM_HEIGHT))
        highlight = scale_color(COL_PIPE, 1.25)
        pygame.draw.rect(surf, highlight, pygame.Rect(int(tx) + 8, 0, 6, max(0, int(th) - RIM_HEIGHT)))
        pygame.draw.rect(surf, highlight, pygame.Rect(int(bx) + 8, int(by) + RIM_HEIGHT, 6, int(bh)))

    def draw_ground(self, surf: pygame.Surface, frame: int, speed: float) -> None:
        ground_y = int(self.config.ground_y)
        w, h = self.size
        pygame.draw.rect(surf, COL_GROUND, pygame.Rect(0, ground_y, w, h - ground_y))
        shift = (frame * speed * 2) % STRIPE_SPACING
        for i in range(w // STRIPE_SPACING + 2):
            gx = int(i * STRIPE_SPACING - shift)
            pygame.draw.rect(surf, COL_GROUND_STRIPE, pygame.Rect(gx, ground_y, STRIPE_SPACING // 2, 10))

    def draw_bird(self, surf: pygame.Surface, x: float, y: float, vy: float) -> None:
        # pygame rotates counter-clockwise; a positive tilt points the beak down.
        sprite = pygame.transform.rotate(self.bird_sprite, -math.degrees(bird_tilt(vy)))
        surf.blit(sprite, sprite.get_rect(center=(int(x), int(y))))

    def _text(self, surf: pygame.Surface, text: str, font: pygame.font.Font, **pos: tuple[int, int]) -> None:
        shadow = font.render(text, True, TEXT_SHADOW)
        label = font.render(text, True, TEXT_COLOR)
        rect = label.get_rect(**pos)
        surf.blit(shadow, rect.move(2, 2))
        surf.blit(label, rect)

    def draw_ui(self, surf: pygame.Surface, snap: Snapshot) -> None:
        w, h = self.size
        cx, cy = w // 2, h // 2
        if snap.mode is not Mode.IDLE:
            self._text(surf, str(snap.score), self.font_big, midtop=(cx, 24))
        self._text(surf, f"Best: {snap.best}", self.font_small, topright=(w - 16, 16))

        if snap.mode is Mode.IDLE:
            self._text(surf, "Flappy", self.font_big, center=(cx, cy - 80))
            self._text(surf, "Space / Click to flap", self.font_small, center=(cx, cy))
            self._text(surf, "Enter to play  -  P to pause", self.font_small, center=(cx, cy + 36))
        elif snap.mode is Mode.PAUSED:
            self._text(surf, "Paused", self.font_big, center=(cx, cy - 20))
            self._text(surf, "Press P to resume", self.font_small, center=(cx, cy + 30))
        elif snap.mode is Mode.ENDED:
            self._text(surf, "Game Over", self.font_big, center=(cx, cy - 60))
            self._text(surf, f"Score: {snap.score}", self.font_small, center=(cx, cy))
            self._text(surf, f"Best: {snap.best}", self.font_small, center=(cx, cy + 34))
            self._text(surf, "Press Enter or R to play again", self.font_small, center=(cx, cy + 80))
