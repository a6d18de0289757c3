#!/usr/bin/env python3
"""Render one of the preset scenes, or a scene loaded from JSON.

This script builds the scene, sets up its camera, renders the frame in
batches with a progress line, and writes a PNG or PPM file.

Usage:
    python examples/render_scene.py [options]

Options:
    --scene NAME        Preset scene: three_sphere, glass_sphere, random
                        (default: glass_sphere)
    --scene-file PATH   Load materials, spheres, background and an optional
                        "camera" entry from a JSON file instead
    --width WIDTH       Image width in pixels (default: 400)
    --aspect-ratio R    Width / height (default: 1.5)
    --samples SAMPLES   Samples per pixel (default: 100)
    --depth DEPTH       Maximum rays per sample (default: 10)
    --seed SEED         Seed for sampling and the random scene (default: 0)
    --output OUTPUT     Output file (.png or .ppm); default is a timestamped
                        PNG in the temp directory
    --batch-size SIZE   Samples per progress update (default: 10)
    --preview           Show the result in a Matplotlib window
    --cpu               Force the CPU backend
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python examples/render_scene.py --scene random --width 300 --samples 20
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=["three_sphere", "glass_sphere", "random"],
        default="glass_sphere",
        help="Preset scene to render (default: glass_sphere)",
    )
    parser.add_argument(
        "--scene-file",
        type=Path,
        default=None,
        help=(
            "JSON scene file with 'materials' and 'spheres', plus optional 'background' "
            "and 'camera' entries (missing camera keys use the default camera)"
        ),
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=3.0 / 2.0,
        help="Image width divided by height (default: 1.5)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=10,
        help="Maximum number of rays traced per sample (default: 10)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for sampling and the random scene layout (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output file path, .png or .ppm (default: timestamped PNG in temp dir)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered image with Matplotlib",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Use the CPU backend even if a GPU is available",
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
    return parser.parse_args(argv)


def render_scene(args: argparse.Namespace) -> Path:
    """Build, render and save the requested scene.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from rtw.core.config import RenderConfig
    from rtw.core.progressive import render_frame
    from rtw.preview.export import default_output_path, save_image
    from rtw.scene.manager import SceneManager
    from rtw.scene.presets import camera_from_dict, create_scene

    config = RenderConfig(
        aspect_ratio=args.aspect_ratio,
        image_width=args.width,
        samples_per_pixel=args.samples,
        max_depth=args.depth,
        seed=args.seed,
    )

    if args.scene_file is not None:
        logger.info(f"Loading scene from {args.scene_file}")
        scene = SceneManager()
        data = json.loads(args.scene_file.read_text())
        scene.from_dict(data)
        camera = camera_from_dict(data.get("camera", {}), config.aspect_ratio)
    else:
        logger.info(f"Creating {args.scene} scene")
        scene, camera = create_scene(args.scene, aspect_ratio=config.aspect_ratio, seed=args.seed)
    logger.info(f"Scene has {scene.get_sphere_count()} spheres")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not args.quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    image = render_frame(
        config,
        camera,
        batch_size=args.batch_size,
        callback=progress_callback,
    )

    if not args.quiet:
        print()  # Newline after progress

    output_path = args.output if args.output is not None else default_output_path("png")
    saved = save_image(image, output_path)

    if args.preview:
        from rtw.preview.display import show_preview

        show_preview(image)

    return saved


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    ti.init(arch=ti.cpu if args.cpu else ti.gpu)

    try:
        saved = render_scene(args)
    except Exception as e:
        logger.error(f"Render failed: {e}")
        return 1

    if not args.quiet:
        print(f"Saved to: {saved.absolute()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
