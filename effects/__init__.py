"""
Rainbleed — Effects Registry
Every effect is a function: (frame: np.ndarray, **params) -> np.ndarray
Frames are RGBA uint8; RGB input is promoted and handed back as RGB.
"""

import numpy as np

from core.raster import as_rgba
from effects.blur import strong_blur
from effects.overlay import grid_circles
from effects.cracks import cracks

# Master registry: name -> function, default params, description
EFFECTS = {
    "blur": {
        "fn": strong_blur,
        "category": "base",
        "params": {"kernel_size": 7, "edge": "replicate"},
        "description": "Strong box blur that smudges the image into a bleeding base",
    },
    "gridcircles": {
        "fn": grid_circles,
        "category": "overlay",
        "params": {"grid_step": 30, "circle_size": 20},
        "description": "Grid of translucent red-pink discs, darker and more opaque row by row",
    },
    "cracks": {
        "fn": cracks,
        "category": "overlay",
        "params": {"count": 50, "seed": None},
        "description": "Randomly branching dark-red cracks, like grass or broken glass",
    },
}

CATEGORIES = {
    "base": "BASE",
    "overlay": "OVERLAY",
}

# Default pipeline order
PIPELINE_ORDER = ["blur", "gridcircles", "cracks"]


def get_effect(name: str):
    """Get an effect by name. Returns (fn, default_params).

    Raises ValueError if effect doesn't exist.
    """
    if name not in EFFECTS:
        available = ", ".join(sorted(EFFECTS.keys()))
        raise ValueError(f"Unknown effect: {name}. Available: {available}")
    entry = EFFECTS[name]
    return entry["fn"], entry["params"].copy()


def list_effects(category: str = None) -> list[dict]:
    """List all available effects with descriptions.

    Args:
        category: Optional filter — only return effects in this category.
    """
    results = []
    for name, entry in EFFECTS.items():
        if category and entry.get("category") != category:
            continue
        results.append({
            "name": name,
            "description": entry["description"],
            "params": entry["params"],
            "category": entry.get("category", "other"),
        })
    return results


def list_categories() -> list[str]:
    """Return ordered list of category keys."""
    return list(CATEGORIES.keys())


def apply_effect(frame, effect_name: str, **params):
    """Apply a named effect to a frame with given params.

    Unknown param names are rejected rather than silently ignored.
    """
    fn, defaults = get_effect(effect_name)
    unknown = set(params) - set(defaults)
    if unknown:
        raise ValueError(
            f"Unknown params for {effect_name}: {', '.join(sorted(unknown))}. "
            f"Accepted: {', '.join(defaults)}"
        )
    merged = {**defaults, **params}

    input_channels = frame.shape[2] if frame.ndim == 3 else 1
    rgba = frame if input_channels == 4 and frame.dtype == np.uint8 else as_rgba(frame)

    result = fn(rgba, **merged)

    # Opaque input comes back opaque; gray comes back as RGB since the
    # overlays add color
    if input_channels in (1, 3):
        return result[:, :, :3].copy()
    return result


def apply_chain(frame, effects_list: list[dict]):
    """Apply a chain of effects sequentially.

    effects_list: [{"name": "blur", "params": {"kernel_size": 7}}, ...]
    """
    from core.safety import validate_chain_depth
    validate_chain_depth(effects_list)

    for effect in effects_list:
        if effect.get("bypassed", False):
            continue
        frame = apply_effect(frame, effect["name"], **effect.get("params", {}))
    return frame
