#!/usr/bin/env python3
"""
Rainbleed — Rainy Night Image Editor
CLI entry point. Also importable as a library.

Usage:
    python rainbleed.py run inputRainyNightImage.png
    python rainbleed.py run photo.png -o out.png --crack-count 80 --seed 7
    python rainbleed.py run photo.png --preset downpour
    python rainbleed.py run photo.png --settings my_settings.json
    python rainbleed.py list-effects
    python rainbleed.py list-presets
    python rainbleed.py info cracks
"""

import sys
import os
import logging
import argparse

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from pydantic import ValidationError

from core.image_io import ImageReadError, ImageWriteError
from core.pipeline import edit_image
from core.safety import SafetyError
from core.settings import PipelineSettings, load_settings
from effects import list_effects, list_categories, EFFECTS, CATEGORIES
from presets import BUILT_IN_PRESETS, get_preset

__version__ = "0.1.0"


def _build_settings(args) -> PipelineSettings:
    """defaults < preset < settings file < explicit flags."""
    settings = get_preset(args.preset) if args.preset else PipelineSettings()
    if args.settings:
        from_file = load_settings(args.settings)
        settings = settings.merged(**from_file.model_dump(exclude_unset=True))
    return settings.merged(
        kernel_size=args.kernel_size,
        grid_step=args.grid_step,
        circle_size=args.circle_size,
        crack_count=args.crack_count,
        seed=args.seed,
        blur_edge=args.edge,
    )


def cmd_run(args):
    """Edit one image."""
    settings = _build_settings(args)
    info = edit_image(args.input, args.output, settings=settings)
    print(f"Edited {info['width']}x{info['height']} image")
    print(f"  Blur: {settings.kernel_size}x{settings.kernel_size} ({settings.blur_edge} edges)")
    print(f"  Circles: every {settings.grid_step}px, {settings.circle_size}px wide")
    seed = settings.seed if settings.seed is not None else "random"
    print(f"  Cracks: {settings.crack_count} (seed {seed})")
    print(f"Saved: {info['output']}")


def cmd_list_effects(args):
    """List all available effects, grouped by category."""
    total = 0
    for cat_key, cat_label in CATEGORIES.items():
        effects = list_effects(category=cat_key)
        if not effects:
            continue
        total += len(effects)
        print(f"\n  {cat_label} ({len(effects)})")
        print(f"  {'—' * 50}")
        for e in effects:
            print(f"    {e['name']:12s} — {e['description']}")
            params_str = ", ".join(f"{k}={v}" for k, v in e["params"].items())
            print(f"    {'':12s}   Params: {params_str}")
    print(f"\n  Total: {total} effects across {len(list_categories())} categories\n")


def cmd_list_presets(args):
    """List built-in presets."""
    print(f"\n  Presets ({len(BUILT_IN_PRESETS)} available)")
    print(f"  {'—' * 50}")
    for p in BUILT_IN_PRESETS:
        print(f"    {p['name']:12s} — {p['description']}")
    print(f"\n  Usage: rainbleed run <image> --preset <name>\n")


def cmd_info(args):
    """Show detailed info about a single effect."""
    name = args.effect_name
    if name not in EFFECTS:
        matches = [n for n in EFFECTS if name in n]
        if matches:
            print(f"Unknown effect: {name}. Did you mean: {', '.join(matches)}?")
        else:
            print(f"Unknown effect: {name}. Use 'rainbleed list-effects' to see all.")
        return

    entry = EFFECTS[name]
    cat = entry.get("category", "other")
    print(f"\n  {name}")
    print(f"  {'—' * 40}")
    print(f"  Category:    {CATEGORIES.get(cat, cat)}")
    print(f"  Description: {entry['description']}")
    print(f"\n  Parameters:")
    for k, v in entry["params"].items():
        print(f"    {k:20s} = {v}")
    print()


def build_parser():
    parser = argparse.ArgumentParser(
        prog="rainbleed",
        description="Rainbleed — blur, tinted circles and cracks for rainy-night photos",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # run
    p = sub.add_parser("run", help="Edit an image")
    p.add_argument("input", help="Input image")
    p.add_argument("-o", "--output", help="Output image (default: EDITED<name>.png beside input)")
    p.add_argument("--preset", choices=[x["name"] for x in BUILT_IN_PRESETS], help="Start from a preset")
    p.add_argument("--settings", help="JSON settings file")
    p.add_argument("--kernel-size", type=int, help="Blur kernel size (default 7)")
    p.add_argument("--edge", choices=["replicate", "reflect", "zero", "copy"],
                   help="Blur border policy (default replicate)")
    p.add_argument("--grid-step", type=int, help="Distance between circles (default 30)")
    p.add_argument("--circle-size", type=int, help="Circle diameter (default 20)")
    p.add_argument("--crack-count", type=int, help="Number of cracks (default 50)")
    p.add_argument("--seed", type=int, help="Seed for reproducible cracks")

    # list-effects
    sub.add_parser("list-effects", help="List all available effects")

    # list-presets
    sub.add_parser("list-presets", help="List built-in presets")

    # info
    p = sub.add_parser("info", help="Show detailed info about an effect")
    p.add_argument("effect_name", help="Effect name")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    commands = {
        "run": cmd_run,
        "list-effects": cmd_list_effects,
        "list-presets": cmd_list_presets,
        "info": cmd_info,
    }

    if args.command in commands:
        try:
            commands[args.command](args)
        except (ImageReadError, ImageWriteError, SafetyError, ValidationError,
                ValueError, FileNotFoundError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
