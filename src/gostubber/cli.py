from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from pathlib import Path

from . import config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gostubber")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print gostubber version.")

    p_gen = sub.add_parser(
        "gen",
        help="Generate stubbed implementations of Go interfaces.",
        description="Generate stubbed implementations of Go interfaces. Requires Go 1.22 or newer on PATH.",
    )
    p_gen.add_argument(
        "dirs",
        nargs="*",
        default=["."],
        help="Go package directories to scan (default: current directory).",
    )
    p_gen.add_argument(
        "--types",
        default="",
        help="Comma-separated list of interface names; defaults to all interfaces.",
    )
    p_gen.add_argument(
        "--output",
        default=None,
        help="Output directory; '-' writes the result to stdout (default: next to each input).",
    )
    p_gen.add_argument(
        "--rename",
        action="append",
        default=[],
        metavar="PKG.OLD=NEW",
        help="Rename a stub, e.g. bank.StubbedAccount=FakeAccount. May be repeated.",
    )
    tag = p_gen.add_mutually_exclusive_group()
    tag.add_argument(
        "--build-tag",
        default=None,
        help="Build tag that excludes the generated files (default: GOSTUBBER_BUILD_TAG or 'nostubs').",
    )
    tag.add_argument("--no-build-tag", action="store_true", help="Do not emit a build constraint.")
    p_gen.add_argument(
        "--formatter",
        default=None,
        choices=["gofmt", "goimports", "none"],
        help="Formatter for generated code (default: GOSTUBBER_FORMATTER or gofmt).",
    )
    p_gen.add_argument("-v", "--verbose", action="store_true", help="Log each step.")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "version":
        try:
            print(importlib.metadata.version("gostubber"))
        except importlib.metadata.PackageNotFoundError:
            print("0.0.0")
        return

    if args.cmd == "gen":
        from .errors import StubberError
        from .format import get_formatter
        from .generate import GenerateOptions, run
        from .naming import parse_renames

        logging.basicConfig(
            format="gostubber: %(message)s",
            level=logging.DEBUG if args.verbose else logging.WARNING,
        )

        if args.no_build_tag:
            build_tag = None
        elif args.build_tag is not None:
            build_tag = args.build_tag.strip() or None
        else:
            build_tag = config.default_build_tag()

        stream = args.output == "-"
        output_dir = None if stream or args.output is None else Path(args.output)
        types = frozenset(t.strip() for t in args.types.split(",") if t.strip())

        try:
            options = GenerateOptions(
                inputs=tuple(Path(d) for d in args.dirs),
                types=types,
                output_dir=output_dir,
                renames=parse_renames(args.rename),
                build_tag=build_tag,
            )
            run(
                options,
                formatter=get_formatter(args.formatter),
                out=sys.stdout.buffer if stream else None,
            )
        except StubberError as e:
            raise SystemExit(f"gostubber: {e}") from None
        return
