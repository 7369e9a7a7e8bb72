"""Seed or reset the administrator account.

Reads ADMIN_EMAIL, ADMIN_PASSWORD and ADMIN_FULLNAME from the environment;
``--email``/``--password``/``--fullname`` override them.
"""

import argparse
import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from storage import get_user_store  # noqa: E402
from utils.request_validation import normalize_email  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))
    parser.add_argument("--fullname", default=os.getenv("ADMIN_FULLNAME", "Site Admin"))
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    email = normalize_email(args.email)
    if not email or not args.password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD (or --email/--password) are required.", file=sys.stderr)
        return 2

    app = create_app()
    with app.app_context():
        users = get_user_store()
        _, action = users.ensure_admin(args.fullname, email, args.password, reset=True)
    print(f"Admin user {action}: {email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
