"""
Conftest: shared fixtures for all Rainbleed test modules.

1. Synthetic frames — uniform gray, gradient, transparent
2. Image files on disk — written with Pillow into tmp_path
"""

import os
import sys

import numpy as np
import pytest
from PIL import Image

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def make_uniform_frame(width=100, height=100, color=(128, 128, 128, 255)):
    """Solid RGBA frame."""
    frame = np.zeros((height, width, 4), dtype=np.uint8)
    frame[:, :] = color
    return frame


def make_gradient_frame(width=160, height=120):
    """RGBA gradient (not blank) with opaque alpha."""
    frame = np.zeros((height, width, 4), dtype=np.uint8)
    frame[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)  # R gradient
    frame[:, :, 1] = 128  # constant G
    frame[:, :, 2] = np.linspace(255, 0, height, dtype=np.uint8)[:, np.newaxis]  # B vertical
    frame[:, :, 3] = 255
    return frame


@pytest.fixture
def gray_frame():
    """100x100 uniform mid-gray, the end-to-end reference input."""
    return make_uniform_frame()


@pytest.fixture
def gradient_frame():
    return make_gradient_frame()


@pytest.fixture
def white_frame():
    return make_uniform_frame(200, 200, (255, 255, 255, 255))


@pytest.fixture
def gray_png(tmp_path):
    """100x100 gray RGB PNG on disk."""
    path = tmp_path / "inputRainyNightImage.png"
    Image.fromarray(np.full((100, 100, 3), 128, dtype=np.uint8)).save(path)
    return path


@pytest.fixture
def rgba_png(tmp_path):
    """64x48 half-transparent RGBA PNG on disk."""
    path = tmp_path / "transparent.png"
    Image.fromarray(make_uniform_frame(64, 48, (10, 20, 30, 128))).save(path)
    return path
