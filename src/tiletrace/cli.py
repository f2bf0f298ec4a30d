"""Command-line front end.

Renders the built-in demo scene, or a scene loaded from a JSON file, and
writes it to a PNG file.

Usage:
    tiletrace [options]
    python -m tiletrace [options]

Example:
    tiletrace --width 640 --height 360 --samples 32 --tiles 8 --output out.png
"""

from __future__ import annotations

import argparse
import cProfile
import logging
import pstats
import sys
from pathlib import Path

import taichi as ti

from tiletrace.config import DEFAULT_BACKGROUND, DEFAULT_FIELD_OF_VIEW, MAX_DEPTH, RenderConfig
from tiletrace.logging_config import setup_logging

logger = logging.getLogger("tiletrace.cli")


def _color(text: str) -> tuple[float, float, float]:
    """Parse an 'R,G,B' command-line color."""
    parts = text.split(",")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected R,G,B, got {text!r}")
    try:
        return (float(parts[0]), float(parts[1]), float(parts[2]))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid color {text!r}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="tiletrace",
        description="Render a scene with a tiled parallel Monte Carlo path tracer.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=1280, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=720, help="Image height in pixels")
    parser.add_argument("--samples", type=int, default=16, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, default=MAX_DEPTH, help="Maximum bounce depth")
    parser.add_argument("--tiles", type=int, default=4, help="Number of parallel tiles")
    parser.add_argument(
        "--fov",
        type=float,
        default=DEFAULT_FIELD_OF_VIEW,
        help="Horizontal field of view in degrees",
    )
    parser.add_argument("--seed", type=int, default=0, help="Master random seed")
    parser.add_argument(
        "--scene",
        type=Path,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--background",
        type=_color,
        default=DEFAULT_BACKGROUND,
        help="Sky color as R,G,B",
    )
    parser.add_argument(
        "--background-top",
        type=_color,
        default=None,
        help="Sky color straight up as R,G,B (enables a vertical gradient)",
    )
    parser.add_argument("--output", type=Path, default=Path("out.png"), help="Output PNG path")
    parser.add_argument("--gamma", type=float, default=2.0, help="Output gamma (1.0 = linear)")
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend; gpu falls back to cpu when unavailable",
    )
    parser.add_argument(
        "--cpuprofile",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write cProfile statistics of the render to FILE",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Logging level",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Optional rotating log file")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build and validate a RenderConfig from parsed arguments.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    config = RenderConfig(
        width=args.width,
        height=args.height,
        field_of_view=args.fov,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        num_tiles=args.tiles,
        seed=args.seed,
        background=args.background,
        background_top=args.background_top,
        gamma=args.gamma,
    )
    config.validate()
    return config


def init_taichi(arch: str) -> None:
    """Initialize Taichi, falling back to the CPU backend if needed."""
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            logger.info("Using GPU backend")
            return
        except RuntimeError as e:
            logger.warning("GPU backend unavailable (%s), falling back to CPU", e)
    ti.init(arch=ti.cpu)
    logger.info("Using CPU backend")


def run(config: RenderConfig, scene_path: Path | None, output: Path, cpuprofile: Path | None) -> None:
    """Build the scene, render it and write the PNG.

    Taichi must already be initialized.

    Raises:
        ValueError: If the scene description is invalid.
        OSError: If the scene file cannot be read or the image cannot be written.
    """
    # Lazy imports to allow Taichi initialization first
    from tiletrace.core.scheduler import TileRenderer
    from tiletrace.preview.export import save_png
    from tiletrace.scene.default_scene import create_default_camera, create_default_scene
    from tiletrace.scene.manager import load_scene

    if scene_path is None:
        scene, camera = create_default_scene()
    else:
        scene = load_scene(scene_path)
        camera = create_default_camera()
    logger.info("Scene has %d shapes and %d materials", scene.get_shape_count(), scene.get_material_count())

    renderer = TileRenderer(config, camera)

    if cpuprofile is None:
        image = renderer.render()
    else:
        profiler = cProfile.Profile()
        image = profiler.runcall(renderer.render)
        cpuprofile.parent.mkdir(parents=True, exist_ok=True)
        pstats.Stats(profiler).dump_stats(str(cpuprofile))
        logger.info("Wrote CPU profile to %s", cpuprofile)

    output.parent.mkdir(parents=True, exist_ok=True)
    save_png(image, output, gamma=config.gamma)


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    level = "WARNING" if args.quiet else args.log_level
    setup_logging("tiletrace", level=level, log_file=args.log_file)

    try:
        config = config_from_args(args)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    init_taichi(args.arch)

    try:
        run(config, args.scene, args.output, args.cpuprofile)
    except (ValueError, OSError) as e:
        logger.error("Render failed: %s", e)
        return 1

    logger.info("Saved to %s", args.output.absolute())
    return 0


if __name__ == "__main__":
    sys.exit(main())
