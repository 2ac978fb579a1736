"""
Rainbleed — Edit Pipeline
load → blur → grid circles → cracks → save.
"""

import logging
import time
from pathlib import Path

import numpy as np

from core.image_io import read_image, write_image
from core.safety import preflight, validate_dimensions
from core.settings import PipelineSettings
from effects import apply_chain

logger = logging.getLogger(__name__)

OUTPUT_PREFIX = "EDITED"


def default_output_path(input_path) -> Path:
    """EDITED<name> beside the input, always PNG."""
    input_path = Path(input_path)
    return input_path.with_name(f"{OUTPUT_PREFIX}{input_path.stem}.png")


def edit_frame(frame: np.ndarray, settings: PipelineSettings | None = None) -> np.ndarray:
    """Run the full effect chain on an in-memory RGBA frame. Returns a new frame."""
    settings = settings or PipelineSettings()
    h, w = frame.shape[:2]
    validate_dimensions(w, h)

    for step in settings.to_chain():
        start = time.perf_counter()
        frame = apply_chain(frame, [step])
        logger.debug("%s done in %.3fs", step["name"], time.perf_counter() - start)
    return frame


def edit_image(input_path, output_path=None, settings: PipelineSettings | None = None) -> dict:
    """Edit an image file end to end.

    Args:
        input_path: Image to read.
        output_path: Where to write (default: EDITED<name>.png beside the input).
        settings: Pipeline knobs (default: the classic values).

    Returns:
        dict with output path and image size.

    Raises:
        ImageReadError: Input missing or undecodable. Nothing is written.
        ImageWriteError: Output can't be written. No partial file is left.
        SafetyError: Preflight rejected the input or output.
    """
    settings = settings or PipelineSettings()
    output_path = Path(output_path) if output_path else default_output_path(input_path)

    if Path(input_path).is_file():
        preflight(input_path, output_path)
    frame, has_alpha = read_image(input_path)
    h, w = frame.shape[:2]
    logger.debug("Loaded %s (%dx%d, alpha=%s)", input_path, w, h, has_alpha)

    result = edit_frame(frame, settings)

    try:
        write_image(result, output_path, keep_alpha=has_alpha)
    except Exception:
        logger.debug("Writing %s failed", output_path, exc_info=True)
        raise

    return {
        "input": str(input_path),
        "output": str(output_path),
        "width": w,
        "height": h,
    }
