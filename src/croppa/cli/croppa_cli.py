from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Sequence

from ..config import CroppaConfig, load_config
from ..errors import CroppaError
from ..models import PassThrough
from ..service import Croppa
from ..urls.options import parse_options

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate and manage derived images")
    parser.add_argument(
        "--src-dir",
        dest="src_dirs",
        action="append",
        default=None,
        help="Directory to look for source images in (repeatable, defaults to CROPPA_SRC_DIRS)",
    )
    parser.add_argument("--host", default=None, help="Host prefix for generated URLs")
    parser.add_argument(
        "--max-crops", type=int, default=None, help="Maximum number of crops per source image"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("url", "Print the derived URL for a source image"),
        ("sizes", "Print the CSS size declaration of a generated derivative"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("src", help="Path to the source image, like /uploads/photo.jpg")
        command.add_argument("-W", "--width", type=int, default=None, help="Target width (px)")
        command.add_argument("-H", "--height", type=int, default=None, help="Target height (px)")
        command.add_argument(
            "-o",
            "--option",
            dest="options",
            action="append",
            default=[],
            help="Option such as 'resize' or 'quadrant(T)' (repeatable)",
        )

    generate = commands.add_parser("generate", help="Generate the derivative for a request path")
    generate.add_argument("path", help="Derived image path, like /uploads/photo-200x100.jpg")

    delete = commands.add_parser("delete", help="Delete a source image and all of its crops")
    delete.add_argument("path", help="Path to the source image")

    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> CroppaConfig:
    loaded = load_config()
    return CroppaConfig.create(
        args.src_dirs if args.src_dirs else loaded.src_dirs,
        host=args.host if args.host is not None else loaded.host,
        max_crops=args.max_crops if args.max_crops is not None else loaded.max_crops,
    )


def _collect_options(raw_options: List[str]) -> list:
    options: list = []
    for name, args in parse_options("-".join(raw_options)).items():
        options.append(name if args is None else (name, args))
    return options


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        croppa = Croppa(_build_config(args))
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    if args.command == "url":
        print(croppa.url(args.src, args.width, args.height, _collect_options(args.options)))
        return 0

    try:
        if args.command == "delete":
            if not croppa.delete(args.path):
                logger.error("No source image found for %s", args.path)
                return 1
            return 0

        if args.command == "sizes":
            sizes = croppa.sizes(args.src, args.width, args.height, _collect_options(args.options))
            if sizes is None:
                logger.error("Derivative has not been generated yet")
                return 1
            print(sizes)
            return 0

        result = croppa.handle(args.path)
    except CroppaError as exc:
        logger.error("%s: %s", exc.kind, exc.message)
        return 2

    if isinstance(result, PassThrough):
        logger.error("Nothing to serve for %s (%s)", args.path, result.reason)
        return 1
    print(result.path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
