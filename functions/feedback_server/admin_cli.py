"""
Command-line maintenance of the admin password.

    python -m feedback_server.admin_cli set <new-password>
    python -m feedback_server.admin_cli reset

``reset`` removes the stored password so the configured default applies
again. Both commands act on the store selected by the environment.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from feedback_server.auth import ADMIN_PASSWORD_KEY, AdminAuth
from feedback_server.config import get_settings
from feedback_server.dependencies import build_kv_store
from feedback_server.kv_store import KvStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Manage the feedback dashboard admin password."
    )
    sub = parser.add_subparsers(dest="command", required=True)
    set_cmd = sub.add_parser("set", help="Overwrite the admin password.")
    set_cmd.add_argument("password")
    sub.add_parser("reset", help="Fall back to the default admin password.")
    return parser


def main(argv: Optional[Sequence[str]] = None, store: KvStore | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    settings = get_settings()
    store = store or build_kv_store(settings)

    if args.command == "set":
        if not args.password:
            print("Password must not be empty.", file=sys.stderr)
            return 1
        AdminAuth(store, default_password=settings.default_admin_password).change_password(
            args.password
        )
        print("Admin password updated.")
    else:
        store.delete(ADMIN_PASSWORD_KEY)
        print("Admin password reset to the configured default.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
