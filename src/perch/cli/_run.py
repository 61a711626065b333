"""``perch run``: resolve an app and serve it with pounce."""

import argparse
import sys

from perch.cli._resolve import resolve_app


def run_command(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and start the server.

    CLI flags override the app config. ``--reload`` (or ``debug=True``
    in the config) runs a single auto-reloading worker.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from perch.server.serve import run_server

    reload = args.reload or app.config.debug
    run_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=reload,
        app_path=args.app if reload else None,
    )
