"""
Command line interface.

Usage:
    asciistag -i photo.jpg --color --fit
    asciistag -i https://example.com/cat.png -o cat.txt -s 4
    asciistag -i clip.gif --fit --edges -d 50
    python -m asciistag -i movie.mp4 --fit --block-width 2 --block-height 2

Still images are printed once. Animated GIFs and videos are played in the
terminal, unless an output file is given, in which case the first frame is
written to it.

Exit codes: 0 on success (or --help), 1 on any error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import IO, Sequence

from .config import RenderParams, settings
from .errors import AsciiStagError, LoadError, ValidationError
from .glyphs import GlyphRamp
from .interpolation import InterpolationMethod
from .pipeline import emit, render_buffer
from .player import PlaybackLoop
from .streams import open_source

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1


class ArgumentParser(argparse.ArgumentParser):
    """argparse parser reporting bad arguments as ValidationError."""

    def error(self, message: str):
        raise ValidationError(message)


def create_parser() -> ArgumentParser:
    """Builds the argument parser."""
    presets = ", ".join(GlyphRamp.presets())
    parser = ArgumentParser(
        prog="asciistag",
        description="Convert images, GIFs and videos to ASCII art",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -i photo.jpg --color --fit
  %(prog)s -i clip.gif --fit --edges
  %(prog)s -i photo.png -o photo.txt -s 4 -c detailed
        """,
    )
    parser.add_argument(
        "-i", "--input", dest="input_path", metavar="PATH_OR_URL",
        help="Image, GIF or video file, or http(s) URL (required)",
    )
    parser.add_argument(
        "-o", "--output", dest="output_path", metavar="PATH",
        help="Write the text to this file instead of the terminal",
    )
    parser.add_argument(
        "-c", "--chars", default=None, metavar="STR",
        help=f"Glyph ramp, dark to bright, or a preset ({presets})",
    )
    parser.add_argument("--color", action="store_true", help="Emit 24-bit color")
    parser.add_argument(
        "--invert", action="store_true", help="Invert the brightness mapping"
    )
    parser.add_argument(
        "--invert-colors", action="store_true", help="Invert the emitted colors"
    )
    parser.add_argument(
        "-b", "--brightness", type=float, default=1.0, metavar="F",
        help="Brightness multiplier (default: 1.0)",
    )
    parser.add_argument(
        "-s", "--scale", type=float, default=1.0, metavar="F",
        help="Downscale factor (default: 1.0)",
    )
    parser.add_argument(
        "--edges", action="store_true", help="Select glyphs by edge strength"
    )
    parser.add_argument(
        "--aspect-ratio", type=float, default=settings.ASPECT_RATIO, metavar="F",
        help="Glyph cell height/width ratio, rows are divided by it "
        f"(default: {settings.ASPECT_RATIO})",
    )
    fit = parser.add_mutually_exclusive_group()
    fit.add_argument(
        "--fit", dest="auto_fit", action="store_true",
        help="Fit the output to the terminal size",
    )
    fit.add_argument(
        "--original-size", dest="auto_fit", action="store_false",
        help="Use --scale instead of fitting (default)",
    )
    parser.set_defaults(auto_fit=False)
    parser.add_argument(
        "-d", "--delay", type=float, default=None, metavar="MS",
        help="Delay between frames in ms (default: from the source frame rate)",
    )
    parser.add_argument(
        "--block-width", type=int, default=1, metavar="N",
        help="Pixels per glyph horizontally (default: 1)",
    )
    parser.add_argument(
        "--block-height", type=int, default=1, metavar="N",
        help="Pixels per glyph vertically (default: 1)",
    )
    parser.add_argument(
        "--interpolation",
        choices=[method.value for method in InterpolationMethod],
        default=InterpolationMethod.NEAREST.value,
        help="Resampling method (default: nearest)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def build_params(args: argparse.Namespace) -> RenderParams:
    """
    Converts parsed arguments to validated render parameters.

    Raises a ValidationError for missing or out of range values
    """
    ramp = GlyphRamp.get(args.chars) if args.chars is not None else settings.DEFAULT_RAMP
    params = RenderParams(
        input_path=args.input_path or "",
        output_path=args.output_path,
        ramp=ramp,
        color=args.color,
        invert=args.invert,
        invert_colors=args.invert_colors,
        brightness=args.brightness,
        edges=args.edges,
        scale=args.scale,
        aspect_ratio=args.aspect_ratio,
        auto_fit=args.auto_fit,
        block_width=args.block_width,
        block_height=args.block_height,
        interpolation=InterpolationMethod(args.interpolation),
        frame_delay_ms=args.delay,
    )
    return params.validate()


def run(params: RenderParams, stream: IO[str] | None = None) -> None:
    """
    Converts params.input_path.

    Single images, and any input when an output file is set, are rendered
    once from their first frame. Multi-frame inputs are played back.

    :param params: Validated render parameters
    :param stream: Console stream (default: stdout)
    """
    source = open_source(params.input_path)
    if source.is_multi_frame and not params.output_path:
        stats = PlaybackLoop(params, stream=stream).play(source)
        logger.info(
            "Played %d frames (%d skipped)", stats.frames_rendered, stats.frames_skipped
        )
        return

    with source:
        frame = source.next_frame()
    if frame is None:
        raise LoadError(params.input_path, "no frames")
    emit(render_buffer(frame, params), params, stream)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else settings.LOG_LEVEL.upper()
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    """
    Entry point of the ``asciistag`` command.

    :param argv: Arguments without the program name (default: sys.argv[1:])
    :return: The process exit code
    """
    parser = create_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:  # --help
        return e.code if isinstance(e.code, int) else EXIT_OK
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_ERROR

    setup_logging(args.verbose)

    try:
        params = build_params(args)
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_ERROR

    try:
        run(params)
    except AsciiStagError as e:
        logger.debug("Conversion failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    return EXIT_OK


__all__ = ["create_parser", "build_params", "run", "main"]


if __name__ == "__main__":
    sys.exit(main())
