"""``prpl serve`` — build a PRPL app from flags and run it."""

import argparse
import logging
import sys

from prpl.app import PRPL
from prpl.classify import cached_classifier, no_capabilities
from prpl.cli._resolve import resolve_object
from prpl.config import ServerConfig
from prpl.errors import ConfigurationError


def parse_routes(values: list[str]) -> dict[str, str]:
    """Parse ``PATTERN=FRAGMENT`` pairs, keeping command-line order."""
    routes: dict[str, str] = {}
    for value in values:
        pattern, sep, fragment = value.partition("=")
        if not sep or not pattern or not fragment:
            msg = f"Invalid --route {value!r}; expected PATTERN=FRAGMENT"
            raise ValueError(msg)
        routes[pattern] = fragment
    return routes


def build_app(args: argparse.Namespace) -> PRPL:
    """Create the PRPL app described by parsed ``serve`` arguments."""
    overrides: dict[str, object] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.workers is not None:
        overrides["workers"] = args.workers

    config = ServerConfig(
        **overrides,
        log_level=args.log_level,
        root=args.root,
        version=args.version,
        project_file=args.config,
        routes=parse_routes(args.route),
        ssl_certfile=args.ssl_certfile,
        ssl_keyfile=args.ssl_keyfile,
    )

    classifier = no_capabilities
    if args.classifier:
        classifier = cached_classifier(resolve_object(args.classifier))

    return PRPL(
        config,
        classifier=classifier,
        should_push=(lambda request: True) if args.push else None,
    )


def serve(args: argparse.Namespace) -> None:
    """Configure logging, build the app, and serve until interrupted."""
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        app = build_app(args)
    except (ValueError, ModuleNotFoundError, AttributeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app.run()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
