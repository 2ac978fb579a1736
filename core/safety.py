"""
Rainbleed — Safety & Resource Guards
Centralized preflight checks run before any file processing.
Rejects unsupported or oversized inputs before they are decoded.
"""

import os
from pathlib import Path

# --- Configurable Limits ---
MAX_FILE_MB = 200          # Maximum input file size
MAX_PIXELS = 64_000_000    # Maximum decoded image size (width * height)
MAX_CHAIN_DEPTH = 10       # Maximum effects in a chain
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tif", ".tiff", ".webp"}


class SafetyError(Exception):
    """Raised when a preflight check fails."""
    pass


def check_extension(path) -> str:
    """Return the lowercased extension of path, or raise SafetyError."""
    ext = Path(path).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise SafetyError(
            f"File type '{ext}' not allowed. "
            f"Supported: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )
    return ext


def preflight(input_path: str, output_path: str | None = None) -> dict:
    """Run all safety checks before processing a file.

    Args:
        input_path: Path to the input image.
        output_path: Where the result will be written (optional).

    Returns:
        dict with file metadata (path, size_mb, extension)

    Raises:
        SafetyError: If any check fails.
        FileNotFoundError: If input doesn't exist.
    """
    input_path = str(input_path)
    real_path = os.path.realpath(input_path)

    # 1. File exists
    if not os.path.isfile(real_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    # 2. File size check
    size_bytes = os.path.getsize(real_path)
    size_mb = size_bytes / (1024 * 1024)
    if size_mb > MAX_FILE_MB:
        raise SafetyError(
            f"Input file is {size_mb:.0f}MB, exceeds {MAX_FILE_MB}MB limit. "
            f"Use a smaller image."
        )

    # 3. File extension check
    ext = check_extension(real_path)

    # 4. Output checks (if output specified)
    if output_path:
        check_extension(output_path)
        out_real = os.path.realpath(str(output_path))
        if out_real == real_path:
            raise SafetyError(f"Output would overwrite the input: {output_path}")
        out_dir = os.path.dirname(out_real) or "."
        if not os.path.isdir(out_dir):
            raise SafetyError(f"Output directory does not exist: {out_dir}")

    return {
        "path": real_path,
        "size_mb": size_mb,
        "extension": ext,
    }


def validate_dimensions(width: int, height: int) -> None:
    """Check decoded image dimensions.

    Raises:
        SafetyError: If the image is empty or too large to process.
    """
    if width <= 0 or height <= 0:
        raise SafetyError(f"Image has invalid dimensions {width}x{height}")
    if width * height > MAX_PIXELS:
        raise SafetyError(
            f"Image is {width}x{height} ({width * height / 1e6:.0f}MP), "
            f"exceeds {MAX_PIXELS / 1e6:.0f}MP limit."
        )


def validate_chain_depth(effects_list: list) -> None:
    """Check that effect chain isn't too deep.

    Raises:
        SafetyError: If chain exceeds MAX_CHAIN_DEPTH.
    """
    if len(effects_list) > MAX_CHAIN_DEPTH:
        raise SafetyError(
            f"Effect chain has {len(effects_list)} effects, max is {MAX_CHAIN_DEPTH}. "
            f"Split into multiple passes."
        )
