"""
Rainbleed — Image I/O
Decodes images into RGBA numpy arrays and writes results atomically:
the encoded file only appears at its final path once it is complete.
"""

import os
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from core.raster import as_rgba
from core.safety import SafetyError, validate_dimensions

# Pillow format names by extension
FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".bmp": "BMP",
    ".gif": "GIF",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".webp": "WEBP",
}
# Formats that can't store an alpha channel
_NO_ALPHA = {"JPEG", "BMP"}


class ImageReadError(Exception):
    """Input image is missing or can't be decoded."""
    pass


class ImageWriteError(Exception):
    """Output image can't be written."""
    pass


def read_image(path) -> tuple[np.ndarray, bool]:
    """Load an image file.

    Returns:
        (frame, has_alpha): frame is an (H, W, 4) uint8 RGBA array;
        has_alpha tells whether the file carried transparency.

    Raises:
        ImageReadError: If the file is absent or undecodable.
        SafetyError: If the image has too many pixels. Checked from the
            header, before the pixel data is decoded.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            validate_dimensions(*img.size)
            img.load()
            has_alpha = img.mode in ("RGBA", "LA", "PA") or (
                img.mode == "P" and "transparency" in img.info
            )
            frame = np.array(img.convert("RGBA"))
    except FileNotFoundError as e:
        raise ImageReadError(f"Image cannot be found: {path}") from e
    except Image.DecompressionBombError as e:
        raise SafetyError(f"Image is too large to decode: {path} ({e})") from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageReadError(f"Image cannot be decoded: {path} ({e})") from e
    return as_rgba(frame), has_alpha


def write_image(frame: np.ndarray, path, keep_alpha: bool = True) -> Path:
    """Encode frame to path. Format follows the extension (PNG if unknown).

    Written to a temp file beside the destination and renamed into place,
    so a failed write never leaves a partial file behind.

    Raises:
        ImageWriteError: If the destination can't be created.
    """
    path = Path(path)
    fmt = FORMATS.get(path.suffix.lower(), "PNG")
    rgba = as_rgba(frame)
    img = Image.fromarray(rgba)
    if not keep_alpha or fmt in _NO_ALPHA:
        img = img.convert("RGB")

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
        )
        with os.fdopen(fd, "wb") as f:
            img.save(f, format=fmt)
        os.chmod(tmp_name, 0o644)  # mkstemp creates 0600
        os.replace(tmp_name, path)
    except (OSError, ValueError) as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ImageWriteError(f"Image cannot be written: {path} ({e})") from e
    return path
