"""
Rainbleed — Crack Generator
Thin dark-red strokes that wander and fork like grass or broken glass.

Each crack starts at a random point and walks in a random direction. Every
segment has a 30% chance to fork left and a 30% chance to fork right (each
fork half as long and one level deeper), then the crack carries on with a
slightly bent heading and a slightly shorter step. A segment whose end
point would leave the image ends that branch.
"""

import math
from typing import NamedTuple

import cv2
import numpy as np

from core.raster import composite_over, make_color, validate_canvas

CRACK_COLOR = (139, 0, 0, 200)  # dark red, semi-transparent
MAX_DEPTH = 5
BRANCH_CHANCE = 0.3
BRANCH_SPREAD = math.pi / 4
WOBBLE = math.pi / 8  # continuation heading changes by up to +/- WOBBLE / 2
MIN_LENGTH = 50
MAX_LENGTH = 100
MAX_SHRINK = 10


class Segment(NamedTuple):
    x1: int
    y1: int
    x2: int
    y2: int
    depth: int


def _make_rng(rng=None, seed=None) -> np.random.RandomState:
    if rng is not None:
        return rng
    # seed=None pulls fresh entropy from the OS
    return np.random.RandomState(seed)


def grow_crack(x: int, y: int, angle: float, length: int, width: int, height: int,
               rng: np.random.RandomState, depth: int = 0) -> list[Segment]:
    """Grow one crack tree from (x, y). Returns its segments in draw order.

    Traversal order is depth-first: a segment, then its whole left fork,
    then its whole right fork, then the continuation. Random draws happen
    in that same order, so a seeded rng always yields the same crack.
    """
    segments = []
    # ("seg", x, y, angle, length, depth) grows a segment;
    # "left"/"right"/"cont" resume after a drawn segment ending at (x, y).
    stack = [("seg", x, y, angle, length, depth)]
    while stack:
        step, x, y, angle, length, depth = stack.pop()

        if step == "seg":
            if length <= 0 or depth > MAX_DEPTH:
                continue
            x2 = x + int(math.cos(angle) * length)
            y2 = y + int(math.sin(angle) * length)
            if x2 < 0 or x2 >= width or y2 < 0 or y2 >= height:
                continue
            segments.append(Segment(x, y, x2, y2, depth))
            # Pushed in reverse so they pop as left, right, continuation
            stack.append(("cont", x2, y2, angle, length, depth))
            stack.append(("right", x2, y2, angle, length, depth))
            stack.append(("left", x2, y2, angle, length, depth))

        elif step == "left":
            if rng.random_sample() < BRANCH_CHANCE and depth < MAX_DEPTH:
                new_angle = angle + rng.random_sample() * BRANCH_SPREAD
                stack.append(("seg", x, y, new_angle, length // 2, depth + 1))

        elif step == "right":
            if rng.random_sample() < BRANCH_CHANCE and depth < MAX_DEPTH:
                new_angle = angle - rng.random_sample() * BRANCH_SPREAD
                stack.append(("seg", x, y, new_angle, length // 2, depth + 1))

        else:  # cont
            new_angle = angle + (rng.random_sample() - 0.5) * WOBBLE
            new_length = length - int(rng.random_sample() * MAX_SHRINK)
            stack.append(("seg", x, y, new_angle, new_length, depth))

    return segments


def crack_segments(width: int, height: int, count: int = 50, rng=None, seed=None) -> list[Segment]:
    """Seed `count` independent cracks and return all their segments in draw order.

    Args:
        width, height: Image size in pixels.
        count: Number of cracks (0 = none).
        rng: Optional numpy RandomState; takes precedence over seed.
        seed: Optional seed for reproducible output. None = non-deterministic.
    """
    count = int(count)
    if count < 0:
        raise ValueError(f"Crack count must be >= 0, got {count}")
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    rng = _make_rng(rng, seed)

    segments = []
    for _ in range(count):
        start_x = int(rng.random_sample() * width)
        start_y = int(rng.random_sample() * height)
        angle = rng.random_sample() * 2 * math.pi
        length = int(rng.randint(MIN_LENGTH, MAX_LENGTH + 1))
        segments.extend(grow_crack(start_x, start_y, angle, length, width, height, rng))
    return segments


def draw_segment(canvas: np.ndarray, segment: Segment, color: tuple = CRACK_COLOR) -> None:
    """Composite a 1px line from (x1, y1) to (x2, y2), both ends included."""
    x0 = min(segment.x1, segment.x2)
    y0 = min(segment.y1, segment.y2)
    mask = np.zeros((abs(segment.y2 - segment.y1) + 1, abs(segment.x2 - segment.x1) + 1),
                    dtype=np.uint8)
    cv2.line(mask, (segment.x1 - x0, segment.y1 - y0), (segment.x2 - x0, segment.y2 - y0),
             255, 1, cv2.LINE_8)
    composite_over(canvas, mask, color, x0, y0)


def paint_cracks(canvas: np.ndarray, count: int = 50, rng=None, seed=None,
                 color: tuple = CRACK_COLOR) -> list[Segment]:
    """Generate and draw `count` cracks onto canvas in place.

    Returns:
        The drawn segments, in draw order.
    """
    w, h = validate_canvas(canvas)
    color = make_color(*color)
    segments = crack_segments(w, h, count=count, rng=rng, seed=seed)
    for segment in segments:
        draw_segment(canvas, segment, color)
    return segments


def cracks(frame: np.ndarray, count: int = 50, seed: int = None,
           color: tuple = CRACK_COLOR) -> np.ndarray:
    """Return a copy of frame with branching cracks drawn on it."""
    result = frame.copy()
    paint_cracks(result, count=count, seed=seed, color=color)
    return result
