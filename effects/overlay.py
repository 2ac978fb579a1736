"""
Rainbleed — Grid Overlay Painter
Translucent discs on a regular grid. Each row starts a little darker and
more opaque than the one above it, and darkens further left to right.
"""

from typing import NamedTuple

import numpy as np

from core.raster import composite_over, disc_mask, make_color, validate_canvas

# Starting tint of the top-left disc (red-pink, nearly transparent)
INITIAL_ALPHA = 20
INITIAL_RED = 255
INITIAL_GREEN = 140
INITIAL_BLUE = 140
ALPHA_INCREMENT = 5
COLOR_DECREMENT = 5


class Disc(NamedTuple):
    x: int
    y: int
    color: tuple  # (r, g, b, a)


def row_start_color(row: int) -> tuple:
    """Color of the first disc in grid row `row` (0 = top)."""
    alpha = min(255, INITIAL_ALPHA + row * ALPHA_INCREMENT)
    red = max(0, INITIAL_RED - row * COLOR_DECREMENT)
    green = max(0, INITIAL_GREEN - row * COLOR_DECREMENT)
    return make_color(red, green, INITIAL_BLUE, alpha)


def _check_grid(grid_step, circle_size):
    if int(grid_step) <= 0:
        raise ValueError(f"grid_step must be positive, got {grid_step}")
    if int(circle_size) <= 0:
        raise ValueError(f"circle_size must be positive, got {circle_size}")


def grid_plan(width: int, height: int, grid_step: int = 30, circle_size: int = 20) -> list[Disc]:
    """List every disc the overlay pass paints, in paint order.

    Rows run top to bottom, discs left to right. Fully deterministic.
    """
    _check_grid(grid_step, circle_size)
    grid_step = int(grid_step)
    discs = []
    for y in range(0, height, grid_step):
        red, green, blue, alpha = row_start_color(y // grid_step)
        for x in range(0, width, grid_step):
            discs.append(Disc(x, y, (red, green, blue, alpha)))
            alpha = min(255, alpha + ALPHA_INCREMENT)
            red = max(0, red - COLOR_DECREMENT)
            green = max(0, green - COLOR_DECREMENT)
    return discs


def paint_grid(canvas: np.ndarray, grid_step: int = 30, circle_size: int = 20) -> list[Disc]:
    """Composite the grid of discs onto canvas in place.

    Args:
        canvas: (H, W, 4) uint8 RGBA buffer.
        grid_step: Distance between disc centres in pixels.
        circle_size: Disc diameter in pixels.

    Returns:
        The painted discs, in order.
    """
    w, h = validate_canvas(canvas)
    discs = grid_plan(w, h, grid_step, circle_size)
    circle_size = int(circle_size)
    mask = disc_mask(circle_size)
    offset = circle_size // 2
    for disc in discs:
        # Discs near the right/bottom edge are clipped by composite_over
        composite_over(canvas, mask, disc.color, disc.x - offset, disc.y - offset)
    return discs


def grid_circles(frame: np.ndarray, grid_step: int = 30, circle_size: int = 20) -> np.ndarray:
    """Return a copy of frame with the tinted disc grid painted on it."""
    result = frame.copy()
    paint_grid(result, grid_step=grid_step, circle_size=circle_size)
    return result
