"""Pawprint CLI — pawprint [root] [-w] [--serve].

Entry point for the ``pawprint`` command-line interface. Without a mode
flag the project is generated and bundled once for production.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pawprint._errors import PawprintError


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the pawprint CLI."""
    parser = argparse.ArgumentParser(
        prog="pawprint",
        description="Convention-based dev server and bundler for component front ends.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument("root", nargs="?", default=".", help="Project root directory")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-w", "-watch", "--watch",
        dest="watch",
        action="store_true",
        help="Development mode: watch, rebuild and live-reload",
    )
    mode.add_argument(
        "-build", "--build",
        dest="build",
        action="store_true",
        help="Generate and bundle once for production (the default)",
    )
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Serve the output directory without building",
    )

    parser.add_argument("--host", default=None, help="Bind address (default 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default 3000)")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug logging",
    )
    return parser


def _get_version() -> str:
    """Get the package version."""
    from pawprint import __version__

    return __version__


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="  %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    from pawprint.app import build, dev, serve
    from pawprint.banner import print_error

    try:
        if args.watch:
            dev(root=args.root, host=args.host, port=args.port)
        elif args.serve:
            serve(root=args.root, host=args.host, port=args.port)
        else:
            build(root=args.root, host=args.host, port=args.port)
    except PawprintError as exc:
        print_error(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
