"""Command line entry point.

Registered as the ``perch`` script::

    perch run site:app --port 3000 --reload
"""

import argparse
import sys


def build_parser() -> argparse.ArgumentParser:
    from perch import __version__

    parser = argparse.ArgumentParser(
        prog="perch",
        description="Serve a file-routed perch site.",
    )
    parser.add_argument("--version", action="version", version=f"perch {__version__}")
    commands = parser.add_subparsers(dest="command")

    run = commands.add_parser("run", help="Serve an app with pounce")
    run.add_argument("app", help="Import string, e.g. site:app (attribute defaults to 'app')")
    run.add_argument("--host", default=None, help="Bind address (default: from AppConfig)")
    run.add_argument("--port", type=int, default=None, help="Bind port (default: from AppConfig)")
    run.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes; implies a single worker",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse *argv* and dispatch to the chosen command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        from perch.cli._run import run_command

        run_command(args)
        return

    parser.print_help()
    sys.exit(0)
