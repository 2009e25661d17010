#!/usr/bin/env python3
"""Render the reflective-spheres showcase scene.

This script renders the five-sphere showcase scene with progressive
refinement. After every pass the current estimate is written to the output
PNG, so the file can be watched while the render converges.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: 1000)
    --height HEIGHT     Image height in pixels (default: 1000)
    --samples SAMPLES   Number of sample passes (default: 200)
    --bounces BOUNCES   Maximum reflections per path (default: 5)
    --jitter            Jitter samples within each pixel (anti-aliasing)
    --seed SEED         Random seed for Taichi's generator
    --output OUTPUT     Output file path (default: spheres.png)
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python -m examples.render_spheres --width 256 --height 256 --samples 50
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the reflective-spheres showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1000,
        help="Image width in pixels (default: 1000)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=1000,
        help="Image height in pixels (default: 1000)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=200,
        help="Number of sample passes (default: 200)",
    )
    parser.add_argument(
        "--bounces",
        type=int,
        default=5,
        help="Maximum reflections per path (default: 5)",
    )
    parser.add_argument(
        "--jitter",
        action="store_true",
        help="Jitter samples within each pixel for anti-aliasing",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for Taichi's generator",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
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


def render_spheres(
    width: int = 1000,
    height: int = 1000,
    num_samples: int = 200,
    max_bounces: int = 5,
    jitter: bool = False,
    output_path: str = "spheres.png",
    quiet: bool = False,
) -> Path:
    """Render the showcase scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of sample passes.
        max_bounces: Maximum reflections per path.
        jitter: Jitter samples within each pixel.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from mirrorball.core.progressive import ProgressiveRenderer
    from mirrorball.core.settings import RenderSettings
    from mirrorball.preview.export import PngSink
    from mirrorball.scene.showcase import create_showcase_scene

    settings = RenderSettings(
        width=width,
        height=height,
        samples=num_samples,
        max_bounces=max_bounces,
        jitter=jitter,
    )

    if not quiet:
        print(f"Creating showcase scene ({width}x{height})...")

    scene, camera = create_showcase_scene()
    renderer = ProgressiveRenderer(scene, camera, settings)

    output_file = Path(output_path)
    sink = PngSink(output_file)

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(sink=sink, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )

    init_kwargs = {}
    if args.seed is not None:
        init_kwargs["random_seed"] = args.seed

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, **init_kwargs)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu, **init_kwargs)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_bounces=args.bounces,
            jitter=args.jitter,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
