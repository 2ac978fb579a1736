"""
Rainbleed -- Pipeline Settings

Pydantic model for the knobs of the blur -> circles -> cracks pipeline.
Defaults reproduce the classic rainy-night edit exactly.
Settings files are small JSON documents with the same field names.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_KERNEL_SIZE = 7
DEFAULT_GRID_STEP = 30
DEFAULT_CIRCLE_SIZE = 20
DEFAULT_CRACK_COUNT = 50

EdgeMode = Literal["replicate", "reflect", "zero", "copy"]


class PipelineSettings(BaseModel):
    """Everything the pipeline needs besides the image itself."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kernel_size: int = Field(default=DEFAULT_KERNEL_SIZE, gt=0, le=99,
                             description="Side of the square blur kernel")
    blur_edge: EdgeMode = Field(default="replicate",
                                description="Blur border policy")
    grid_step: int = Field(default=DEFAULT_GRID_STEP, gt=0,
                           description="Distance between disc centres (px)")
    circle_size: int = Field(default=DEFAULT_CIRCLE_SIZE, gt=0,
                             description="Disc diameter (px)")
    crack_count: int = Field(default=DEFAULT_CRACK_COUNT, ge=0, le=10_000,
                             description="Number of cracks (0 disables the pass)")
    seed: int | None = Field(default=None, ge=0,
                             description="Crack seed; None = different every run")

    def to_chain(self) -> list[dict]:
        """Effect chain in apply_chain format."""
        return [
            {"name": "blur", "params": {"kernel_size": self.kernel_size, "edge": self.blur_edge}},
            {"name": "gridcircles", "params": {"grid_step": self.grid_step,
                                               "circle_size": self.circle_size}},
            {"name": "cracks", "params": {"count": self.crack_count, "seed": self.seed}},
        ]

    def merged(self, **overrides) -> PipelineSettings:
        """Copy with overrides applied; None values are ignored. Re-validates."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return PipelineSettings(**data)


def load_settings(path) -> PipelineSettings:
    """Load settings from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If a value is out of range or unknown.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    return PipelineSettings.model_validate_json(path.read_text())


def save_settings(settings: PipelineSettings, path) -> Path:
    """Write settings as pretty JSON."""
    path = Path(path)
    path.write_text(json.dumps(settings.model_dump(), indent=2))
    return path
