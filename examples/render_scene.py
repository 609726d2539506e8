#!/usr/bin/env python3
"""Render a scene with the Whitted ray tracer.

Renders the built-in demo scene, or a scene loaded from a JSON file in the
format produced by SceneManager.to_dict(), and saves it as a PNG.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 800)
    --height HEIGHT     Image height in pixels (default: 600)
    --fov FOV           Vertical field of view in degrees (default: 90)
    --depth DEPTH       Recursion depth budget (default: 3)
    --output OUTPUT     Output file path (default: output.png)
    --scene FILE        JSON scene file (default: the demo scene)
    --arch ARCH         Taichi backend: cpu, gpu or auto (default: auto)
    --gamma GAMMA       Gamma correction for the output (default: 1.0)
    --show              Show the result in a Matplotlib window
    --quiet             Only log warnings and errors

Example:
    python -m examples.render_scene --width 400 --height 300 --depth 4
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the Whitted ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Image width in pixels (default: 800)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=600,
        help="Image height in pixels (default: 600)",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=90.0,
        help="Vertical field of view in degrees (default: 90)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=3,
        help="Recursion depth budget (default: 3)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output.png",
        help="Output file path (default: output.png)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: the demo scene)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu", "auto"),
        default="auto",
        help="Taichi backend (default: auto, GPU with CPU fallback)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma correction for the output (default: 1.0)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser.parse_args(argv)


def init_taichi(arch: str) -> None:
    """Initialize Taichi in double precision on the requested backend."""
    if arch == "cpu":
        ti.init(arch=ti.cpu, default_fp=ti.f64)
    elif arch == "gpu":
        ti.init(arch=ti.gpu, default_fp=ti.f64)
    else:
        # ti.gpu falls back to the CPU when no GPU backend is available
        ti.init(arch=ti.gpu, default_fp=ti.f64)


def render_scene(
    width: int = 800,
    height: int = 600,
    fov: float = 90.0,
    depth: int = 3,
    output_path: str = "output.png",
    scene_path: str | None = None,
    gamma: float = 1.0,
    show: bool = False,
) -> Path:
    """Render a scene and save it to a PNG file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Vertical field of view in degrees.
        depth: Recursion depth budget.
        output_path: Output file path (PNG).
        scene_path: Optional JSON scene file; the demo scene is used if None.
        gamma: Gamma correction for the output.
        show: If True, also display the result with Matplotlib.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from yars.camera.camera import CameraBuilder, setup_camera
    from yars.core.integrator import get_image_numpy, render_image, setup_render_target
    from yars.preview.display import show_preview
    from yars.preview.export import save_png
    from yars.scene.demo import create_demo_scene
    from yars.scene.manager import SceneManager

    if scene_path is None:
        scene, builder = create_demo_scene(width, height, fov)
    else:
        with open(scene_path, encoding="utf-8") as f:
            data = json.load(f)
        scene = SceneManager()
        scene.from_dict(data)
        builder = CameraBuilder(width, height, fov)

    logger.info(
        "Scene: %d shapes, %d lights, %d materials",
        scene.get_shape_count(),
        scene.get_light_count(),
        scene.get_material_count(),
    )

    setup_camera(builder.build())
    setup_render_target(width, height)
    render_image(max_depth=depth)

    image = get_image_numpy()
    output_file = Path(output_path)
    save_png(image, output_file, gamma=gamma)

    if show:
        show_preview(image, gamma=gamma)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_taichi(args.arch)

    try:
        output_file = render_scene(
            width=args.width,
            height=args.height,
            fov=args.fov,
            depth=args.depth,
            output_path=args.output,
            scene_path=args.scene,
            gamma=args.gamma,
            show=args.show,
        )
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Render failed: %s", e)
        return 1

    logger.info("Saved to: %s", output_file.absolute())
    return 0


if __name__ == "__main__":
    sys.exit(main())
