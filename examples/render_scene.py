#!/usr/bin/env python3
"""Render a scene to a PPM or PNG file.

Renders either a JSON scene description (see raytracer.scene.loader) or the
built-in showcase scene, printing progress as rows complete.

Usage:
    python examples/render_scene.py [options]

Options:
    --scene FILE            JSON scene file (default: built-in showcase scene)
    --width WIDTH           Image width in pixels (overrides the scene camera)
    --height HEIGHT         Image height in pixels (overrides the scene camera)
    --output OUTPUT         Output file path, .png or .ppm (default: scene.png)
    --depth DEPTH           Reflection depth (default: 5)
    --rows-per-batch ROWS   Rows rendered between progress updates (default: 32)
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Example:
    python examples/render_scene.py --scene examples/scenes/showcase.json --output showcase.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 225


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the Whitted ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in showcase scene)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help=f"Image width in pixels (default: scene camera, or {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help=f"Image height in pixels (default: scene camera, or {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="scene.png",
        help="Output file path, .png or .ppm (default: scene.png)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=5,
        help="Reflection depth (default: 5)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=32,
        help="Rows rendered between progress updates (default: 32)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def render_scene(
    scene_path: str | None = None,
    width: int | None = None,
    height: int | None = None,
    output_path: str = "scene.png",
    depth: int = 5,
    rows_per_batch: int = 32,
    quiet: bool = False,
) -> Path:
    """Build the scene, render it and save the result.

    Args:
        scene_path: JSON scene file, or None for the showcase scene.
        width: Image width override.
        height: Image height override.
        output_path: Output file path (.png or .ppm).
        depth: Reflection depth.
        rows_per_batch: Rows rendered between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raytracer.camera.camera import Camera
    from raytracer.core.integrator import render
    from raytracer.preview.export import save_canvas
    from raytracer.scene.loader import load_scene_file
    from raytracer.scene.presets import create_showcase_scene

    if scene_path is None:
        if not quiet:
            print("Creating showcase scene...")
        camera, world = create_showcase_scene(width or DEFAULT_WIDTH, height or DEFAULT_HEIGHT)
    else:
        if not quiet:
            print(f"Loading scene from {scene_path}...")
        camera, world = load_scene_file(scene_path)
        if width is not None or height is not None:
            camera = Camera(
                width or camera.hsize,
                height or camera.vsize,
                camera.field_of_view,
                camera.transform,
            )

    if not quiet:
        print(f"Rendering {camera.hsize}x{camera.vsize}, {len(world.shapes)} shapes, depth {depth}...")

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows ({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    canvas = render(
        camera,
        world,
        remaining=depth,
        rows_per_batch=rows_per_batch,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_canvas(canvas, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)
    if not args.quiet:
        print(f"Using {args.arch.upper()} backend")

    try:
        render_scene(
            scene_path=args.scene,
            width=args.width,
            height=args.height,
            output_path=args.output,
            depth=args.depth,
            rows_per_batch=args.rows_per_batch,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
