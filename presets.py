"""
Rainbleed -- Built-in Presets
Named settings bundles. Each preset only lists the knobs it changes;
everything else falls back to the PipelineSettings defaults.
"""

from core.settings import PipelineSettings

BUILT_IN_PRESETS = [
    {
        "name": "rainy-night",
        "description": "The classic edit: 7x7 smudge, 30px disc grid, 50 dark-red cracks.",
        "settings": {},
    },
    {
        "name": "drizzle",
        "description": "Lighter touch. Softer blur, sparse discs, a handful of cracks.",
        "settings": {"kernel_size": 5, "grid_step": 45, "circle_size": 14, "crack_count": 12},
    },
    {
        "name": "downpour",
        "description": "Heavy smear and a dense grid of overlapping discs. Lots of cracks.",
        "settings": {"kernel_size": 11, "grid_step": 18, "circle_size": 24, "crack_count": 120},
    },
    {
        "name": "shattered",
        "description": "Blur and cracks only; the disc grid is pushed so wide it barely shows.",
        "settings": {"grid_step": 400, "circle_size": 6, "crack_count": 200},
    },
    {
        "name": "no-cracks",
        "description": "Blur and disc grid, crack pass disabled.",
        "settings": {"crack_count": 0},
    },
]

_BY_NAME = {p["name"]: p for p in BUILT_IN_PRESETS}


def list_presets() -> list[str]:
    return [p["name"] for p in BUILT_IN_PRESETS]


def get_preset(name: str) -> PipelineSettings:
    """Build PipelineSettings for a preset.

    Raises:
        ValueError: Unknown preset name.
    """
    if name not in _BY_NAME:
        raise ValueError(f"Unknown preset: {name}. Available: {', '.join(list_presets())}")
    return PipelineSettings(**_BY_NAME[name]["settings"])
