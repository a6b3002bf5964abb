"""
Create a local account without the mobile client. Run from project root:
  python -m memantra.scripts.create_user USERNAME EMAIL PASSWORD
Example:
  python -m memantra.scripts.create_user alice alice@example.com your-secure-password
"""
import argparse
import sys

from pydantic import ValidationError

from memantra.core.database import session_scope
from memantra.schemas.auth import RegisterRequest
from memantra.services.auth import ConflictError, register_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a MeMantra user account.")
    parser.add_argument("username", help="Username (3-50 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-128 chars)")
    args = parser.parse_args(argv)

    try:
        body = RegisterRequest(username=args.username, email=args.email, password=args.password)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"{field}: {err['msg']}", file=sys.stderr)
        return 1

    with session_scope() as db:
        try:
            result = register_user(db, body)
        except ConflictError as e:
            print(e.message, file=sys.stderr)
            return 1
    print(f"Created user '{result.user.username}' (user_id={result.user.user_id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
