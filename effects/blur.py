"""
Rainbleed — Convolution Blur
Strong box blur that smudges the whole image into a soft, bleeding base.
"""

from functools import lru_cache

import cv2
import numpy as np

from core.raster import validate_canvas

EDGE_MODES = {
    "replicate": cv2.BORDER_REPLICATE,  # clamp-to-edge
    "reflect": cv2.BORDER_REFLECT_101,
    "zero": None,  # border band set to 0, like java.awt ConvolveOp EDGE_ZERO_FILL
    "copy": None,  # border band copied from source, like EDGE_NO_OP
}


@lru_cache(maxsize=16)
def box_kernel(size: int = 7) -> np.ndarray:
    """Square averaging kernel: size x size weights of 1/size^2.

    The returned array is read-only and shared between callers.
    """
    size = int(size)
    if size <= 0:
        raise ValueError(f"Kernel size must be positive, got {size}")
    kernel = np.full((size, size), 1.0 / (size * size), dtype=np.float32)
    kernel.setflags(write=False)
    return kernel


def strong_blur(frame: np.ndarray, kernel_size: int = 7, edge: str = "replicate") -> np.ndarray:
    """Average every channel over a kernel_size x kernel_size neighbourhood.

    Args:
        frame: (H, W, 4) uint8 RGBA array. Not modified.
        kernel_size: Side of the square kernel (7 = the classic strong blur).
        edge: Border policy. 'replicate' (clamp-to-edge), 'reflect',
              'zero' (pixels the kernel can't fully cover become 0) or
              'copy' (those pixels keep their source value).

    Returns:
        New blurred RGBA frame of identical shape.
    """
    validate_canvas(frame)
    if edge not in EDGE_MODES:
        raise ValueError(f"Unknown edge mode: {edge}. Available: {', '.join(EDGE_MODES)}")
    kernel = box_kernel(kernel_size)

    border = EDGE_MODES[edge]
    if border is None:
        border = cv2.BORDER_REPLICATE
    # RGB and alpha go through the same kernel; copy since the cached one is read-only
    result = cv2.filter2D(frame, -1, np.array(kernel), borderType=border)

    if edge in ("zero", "copy"):
        _fill_border_band(result, frame, kernel_size, edge)
    return result


def _fill_border_band(result, source, kernel_size, edge):
    """Overwrite the band where the kernel hangs off the image."""
    h, w = result.shape[:2]
    lo = kernel_size // 2  # filter2D's default anchor
    hi = kernel_size - 1 - lo
    band = np.ones((h, w), dtype=bool)
    band[lo:max(lo, h - hi), lo:max(lo, w - hi)] = False
    if edge == "zero":
        result[band] = 0
    else:
        result[band] = source[band]
