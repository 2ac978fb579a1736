"""
Rainbleed — Raster Buffer
Every effect works on an (H, W, 4) uint8 RGBA numpy array.
Drawing passes composite onto it in place with source-over blending.
"""

import numpy as np


def as_rgba(frame: np.ndarray) -> np.ndarray:
    """Promote a gray, RGB or RGBA array to a new RGBA uint8 array.

    Missing alpha is filled with 255 (fully opaque).
    """
    frame = np.asarray(frame)
    if frame.ndim == 2:
        frame = np.stack([frame] * 3, axis=2)
    if frame.ndim != 3 or frame.shape[2] not in (3, 4):
        raise ValueError(f"Expected (H, W), (H, W, 3) or (H, W, 4) array, got shape {frame.shape}")

    frame = np.clip(frame, 0, 255).astype(np.uint8)
    if frame.shape[2] == 3:
        alpha = np.full(frame.shape[:2] + (1,), 255, dtype=np.uint8)
        frame = np.concatenate([frame, alpha], axis=2)
    return np.ascontiguousarray(frame)


def validate_canvas(canvas: np.ndarray) -> tuple[int, int]:
    """Check that canvas is a drawable RGBA buffer. Returns (width, height).

    Raises:
        ValueError: On wrong dtype, shape, or a zero-sized buffer.
    """
    if not isinstance(canvas, np.ndarray):
        raise ValueError(f"Canvas must be a numpy array, got {type(canvas).__name__}")
    if canvas.ndim != 3 or canvas.shape[2] != 4:
        raise ValueError(f"Canvas must be (H, W, 4) RGBA, got shape {canvas.shape}")
    if canvas.dtype != np.uint8:
        raise ValueError(f"Canvas must be uint8, got {canvas.dtype}")
    h, w = canvas.shape[:2]
    if h <= 0 or w <= 0:
        raise ValueError(f"Canvas dimensions must be positive, got {w}x{h}")
    return w, h


def clamp_channel(value) -> int:
    """Clamp a single channel value to [0, 255]."""
    return int(max(0, min(255, value)))


def make_color(r, g, b, a=255) -> tuple:
    """Build an immutable (r, g, b, a) color with every channel clamped."""
    return (clamp_channel(r), clamp_channel(g), clamp_channel(b), clamp_channel(a))


def composite_over(canvas: np.ndarray, mask: np.ndarray, color: tuple,
                   x0: int = 0, y0: int = 0) -> None:
    """Source-over composite a single color onto canvas, in place.

    Args:
        canvas: (H, W, 4) uint8 RGBA buffer (modified in place).
        mask: (h, w) coverage array; nonzero = covered. Values in (0, 1]
            scale the source alpha, bool/uint8 masks are treated as full cover.
        color: (r, g, b, a) tuple, 0-255 per channel.
        x0, y0: Canvas position of mask[0, 0]. The mask may hang off any
            edge of the canvas; the overlap is clipped.
    """
    ch, cw = canvas.shape[:2]
    mh, mw = mask.shape[:2]

    # Clip mask rectangle to canvas
    cx0, cy0 = max(x0, 0), max(y0, 0)
    cx1, cy1 = min(x0 + mw, cw), min(y0 + mh, ch)
    if cx0 >= cx1 or cy0 >= cy1:
        return

    sub_mask = mask[cy0 - y0:cy1 - y0, cx0 - x0:cx1 - x0]
    if sub_mask.dtype == np.bool_ or np.issubdtype(sub_mask.dtype, np.integer):
        coverage = (sub_mask > 0).astype(np.float32)
    else:
        coverage = np.clip(sub_mask.astype(np.float32), 0.0, 1.0)
    if not coverage.any():
        return

    color = make_color(*color)
    src_rgb = np.array(color[:3], dtype=np.float32)
    src_a = (color[3] / 255.0) * coverage[:, :, np.newaxis]

    region = canvas[cy0:cy1, cx0:cx1].astype(np.float32)
    dst_rgb = region[:, :, :3]
    dst_a = region[:, :, 3:4] / 255.0

    out_a = src_a + dst_a * (1.0 - src_a)
    safe_a = np.where(out_a > 0, out_a, 1.0)
    out_rgb = (src_rgb * src_a + dst_rgb * dst_a * (1.0 - src_a)) / safe_a
    out_rgb = np.where(out_a > 0, out_rgb, 0.0)

    result = np.concatenate([out_rgb, out_a * 255.0], axis=2)
    canvas[cy0:cy1, cx0:cx1] = np.clip(np.rint(result), 0, 255).astype(np.uint8)


def disc_mask(diameter: int) -> np.ndarray:
    """Boolean coverage of a filled circle in a diameter x diameter box.

    A pixel is covered when its centre lies strictly inside the circle,
    the same rule as a non-antialiased fillOval.
    """
    r = diameter / 2.0
    coords = np.arange(diameter, dtype=np.float32) + 0.5 - r
    dist_sq = coords.reshape(-1, 1) ** 2 + coords.reshape(1, -1) ** 2
    return dist_sq < r * r
