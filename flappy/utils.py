"""Geometry and color utility functions used across the game."""

from __future__ import annotations

import numpy as np

Rect = tuple[float, float, float, float]  # x, y, w, h


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp a numeric value into the inclusive range [lo, hi]."""
    return max(lo, min(hi, value))


def circle_rect_collision(cx: float, cy: float, r: float, rect: Rect) -> bool:
    """True if the circle centered at (cx,cy) with radius r touches or overlaps rect.

    The circle center is clamped onto the rectangle to find its nearest point;
    the shapes meet iff that point lies within r of the center.
    """
    x, y, w, h = rect
    closest_x = clamp(cx, x, x + w)
    closest_y = clamp(cy, y, y + h)
    dx = cx - closest_x
    dy = cy - closest_y
    return (dx * dx + dy * dy) <= r * r


def scale_color(color: tuple[int, int, int], factor: float) -> tuple[int, int, int]:
    """Scale an RGB color by factor, clamped to [0,255]."""
    r, g, b = color
    return (
        int(clamp(r * factor, 0, 255)),
        int(clamp(g * factor, 0, 255)),
        int(clamp(b * factor, 0, 255)),
    )


def vertical_gradient(
    w: int,
    h: int,
    top: tuple[int, int, int],
    bottom: tuple[int, int, int],
) -> np.ndarray:
    """Build a (w, h, 3) uint8 array blending top to bottom, ready for surfarray.

    Args:
        w, h: Dimensions.
        top, bottom: RGB colors at the first and last row.

    Returns:
        Array indexed [x, y, channel] as pygame.surfarray expects.
    """
    t = np.linspace(0.0, 1.0, h, dtype=np.float32)[:, None]
    a = np.asarray(top, dtype=np.float32)[None, :]
    b = np.asarray(bottom, dtype=np.float32)[None, :]
    column = np.clip(a * (1.0 - t) + b * t, 0, 255).astype(np.uint8)  # (h, 3)
    return np.broadcast_to(column[None, :, :], (w, h, 3)).copy()
