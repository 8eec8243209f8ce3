"""Command-line entry point for env0."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from env0cli import commands


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        print(f"Error: {message}", file=sys.stderr)
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per operation."""
    parser = _Parser(prog="env0")
    sub = parser.add_subparsers(dest="command", parser_class=_Parser)

    p = sub.add_parser("signup", help="Create a new Env0 account")
    p.add_argument("username")
    p.add_argument("email")
    p.add_argument("password")
    p.set_defaults(run=lambda ns: commands.signup(ns.username, ns.email, ns.password))

    p = sub.add_parser("login", help="Authenticate with Env0")
    p.add_argument("username_or_email")
    p.add_argument("password")
    p.set_defaults(run=lambda ns: commands.login(ns.username_or_email, ns.password))

    p = sub.add_parser("init", help="Initialize a new Env0 app in this directory")
    p.add_argument("app_name")
    p.set_defaults(run=lambda ns: commands.init_app(ns.app_name))

    p = sub.add_parser("clone", help="Clone an existing Env0 app's environments")
    p.add_argument("full_app_name")
    p.set_defaults(run=lambda ns: commands.clone(ns.full_app_name))

    p = sub.add_parser("pull", help="Pull the latest environments for the initialized app")
    p.add_argument("env_name", nargs="?")
    p.set_defaults(run=lambda ns: commands.pull(ns.env_name))

    p = sub.add_parser("push", help="Push local environment files to the remote app")
    p.add_argument("env_name", nargs="?")
    p.set_defaults(run=lambda ns: commands.push(ns.env_name))

    p = sub.add_parser("adduser", help="Add a user to the initialized Env0 app")
    p.add_argument("username")
    p.set_defaults(run=lambda ns: commands.add_user(ns.username))

    p = sub.add_parser("deluser", help="Remove a user from the initialized Env0 app")
    p.add_argument("username")
    p.set_defaults(run=lambda ns: commands.del_user(ns.username))

    p = sub.add_parser("version", help="Get version")
    p.set_defaults(run=lambda ns: commands.version())

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run env0 with the given arguments and return the exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1
    if args.command is None:
        parser.print_help()
        return 0
    try:
        args.run(args)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())