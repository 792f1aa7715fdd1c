"""Command line entry point: `python -m gdynia --widget pizzaz`."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from gdynia.bundler import BundleError
from gdynia.core import Forge
from gdynia.output import read_package_version

logger = logging.getLogger("gdynia")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gdynia", description="Build widgets into single-file HTML documents.")
    parser.add_argument("--src", type=Path, default=Path("src"), help="source tree to scan for widget entries")
    parser.add_argument("--out", type=Path, default=Path("assets"), help="output directory")
    parser.add_argument("--widget", dest="widgets", action="append", required=True, help="allowed widget name")
    parser.add_argument(
        "--global-css",
        dest="global_css",
        type=Path,
        action="append",
        help="stylesheet applied to every widget (default: <src>/index.css)",
    )
    parser.add_argument("--release", help="release version (default: version in package.json)")
    parser.add_argument("--no-minify", dest="minify", action="store_false")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


async def _build(args: argparse.Namespace) -> list[Path]:
    version = args.release or await read_package_version(args.src.resolve().parent)
    forge = Forge(
        args.src,
        args.out,
        args.widgets,
        version,
        global_css=args.global_css if args.global_css is not None else [args.src / "index.css"],
        minify=args.minify,
    )
    return await forge()


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        built = asyncio.run(_build(args))
    except (BundleError, OSError, ValueError) as exc:
        logger.error("%s", exc)  # noqa: TRY400
        return 1

    logger.info("Built %d widget(s) into %s", len(built), args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
