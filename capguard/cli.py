"""Command line inspector for identity permissions."""

from __future__ import annotations

import argparse
import logging
import sys

from .errors import SecurityError
from .logging import setup_structured_logging
from .permissions import Permission, create_group, create_user, match_group, match_user
from .templates import get_config, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="capguard", description="Render and parse identity permissions"
    )
    parser.add_argument("--config", "-c", default=None, help="YAML config file")
    parser.add_argument(
        "--log-level",
        "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("user", help="render a user permission").add_argument("id")
    sub.add_parser("group", help="render a group permission").add_argument("id")
    sub.add_parser("parse", help="decode a permission name").add_argument("name")
    sub.add_parser("config", help="show the resolved templates")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(sys.argv[1:] if argv is None else argv)
    setup_structured_logging(getattr(logging, args.log_level))

    try:
        config = load_config(args.config) if args.config else get_config()
        if args.command == "user":
            print(create_user(args.id, config).name)
        elif args.command == "group":
            print(create_group(args.id, config).name)
        elif args.command == "parse":
            perm = Permission(args.name)
            user_id = match_user(perm, config)
            group_id = match_group(perm, config)
            if user_id is None and group_id is None:
                print(f"{perm.name}: no identity template matches")
                return 1
            if user_id is not None:
                print(f"user {user_id}")
            if group_id is not None:
                print(f"group {group_id}")
        else:
            print(f"user: {config.user.template}")
            print(f"group: {config.group.template}")
    except (SecurityError, TypeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
