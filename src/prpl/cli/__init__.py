"""prpl CLI — serve a directory of differential builds.

Entry point registered as ``prpl`` in ``pyproject.toml``::

    [project.scripts]
    prpl = "prpl.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``prpl`` command."""
    parser = argparse.ArgumentParser(
        prog="prpl",
        description="prpl — Differential serving for progressive web apps.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- prpl serve -------------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve a build directory")
    serve_parser.add_argument("--root", default=".", help="Directory containing the builds")
    serve_parser.add_argument(
        "--config",
        default="polymer.json",
        help="Project file declaring the builds (relative to --root)",
    )
    serve_parser.add_argument(
        "--version",
        default="static",
        help="URL prefix segment build assets are served under",
    )
    serve_parser.add_argument(
        "--route",
        action="append",
        default=[],
        metavar="PATTERN=FRAGMENT",
        help="Route pattern and the fragment backing it (repeatable)",
    )
    serve_parser.add_argument(
        "--classifier",
        default=None,
        metavar="MODULE:ATTR",
        help="Import string of a User-Agent -> Capability classifier",
    )
    serve_parser.add_argument(
        "--push",
        action="store_true",
        help="Use HTTP/2 server push where the transport supports it",
    )
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    serve_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect)",
    )
    serve_parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging verbosity",
    )
    serve_parser.add_argument("--ssl-certfile", default=None, help="TLS certificate file")
    serve_parser.add_argument("--ssl-keyfile", default=None, help="TLS private key file")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from prpl.cli._serve import serve

        serve(args)
