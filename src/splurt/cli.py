import argparse
import logging
import sys
from pathlib import Path

from splurt.converter import image_to_ansi
from splurt.decoder import DecodeError, load
from splurt.model import Viewport
from splurt.quantize import QUANTIZERS, get_quantizer
from splurt.scaler import render
from splurt.terminal import Screen, TerminalError, get_terminal_size, supports_256_colours

logger = logging.getLogger("splurt")


def parse_size(value: str) -> tuple[int, int]:
    """Parse a COLSxROWS viewport size such as ``100x40``."""
    try:
        columns, rows = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid size {value!r}, expected COLSxROWS") from None
    if columns <= 0 or rows <= 0:
        raise argparse.ArgumentTypeError(f"Size must be positive: {value!r}")
    return columns, rows


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="splurt", description="Show images in the terminal using 256 colours")
    parser.add_argument("images", nargs="+", metavar="FILE", help="Image files to show, one after another")
    parser.add_argument(
        "-q",
        "--quantizer",
        default="cube",
        choices=sorted(QUANTIZERS),
        help="Colour matching strategy (default: cube)",
    )
    parser.add_argument(
        "-s", "--size", type=parse_size, default=None, help="Viewport as COLSxROWS (default: terminal size)"
    )
    parser.add_argument(
        "-p",
        "--print",
        dest="print_only",
        action="store_true",
        default=False,
        help="Print the images as text instead of showing them full screen",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Enable debug logging")
    return parser


def show(paths: list[Path], screen: Screen, quantizer) -> int:
    """Draw each image full screen, waiting for a key between them. Returns the failure count."""
    failures = 0
    for path in paths:
        try:
            bitmap = load(path)
        except (OSError, DecodeError) as e:
            logger.error("Skipping %s: %s", path, e)
            failures += 1
            continue
        screen.clear()
        render(bitmap, screen.viewport(), screen.draw_cell, quantizer)
        screen.flush()
        screen.wait_for_key()
    return failures


def print_images(paths: list[Path], size: tuple[int, int] | None, quantizer) -> int:
    failures = 0
    columns, rows = size if size is not None else get_terminal_size()
    for path in paths:
        try:
            print(image_to_ansi(path, Viewport(columns=columns, rows=rows), quantizer))
        except (OSError, DecodeError) as e:
            logger.error("Skipping %s: %s", path, e)
            failures += 1
    return failures


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    paths = [Path(p) for p in args.images]
    quantizer = get_quantizer(args.quantizer)

    if args.print_only or not sys.stdout.isatty():
        failures = print_images(paths, args.size, quantizer)
    else:
        try:
            if not supports_256_colours():
                raise TerminalError("Color support not detected.")
            with Screen(size=args.size) as screen:
                failures = show(paths, screen, quantizer)
        except TerminalError as e:
            print(e, file=sys.stderr)
            return 1

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
