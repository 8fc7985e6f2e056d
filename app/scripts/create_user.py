"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password ADMIN
"""
import argparse
import sys

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from app.core.config import get_settings
from app.core.database import Database
from app.core.errors import ConflictError
from app.models import Role
from app.schemas.auth import RegisterRequest
from app.services.auth import AuthService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an Eventhub user from the command line.")
    parser.add_argument("username", help="Username (3-30 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument(
        "role", nargs="?", default=Role.ATTENDEE.value, choices=[r.value for r in Role]
    )
    args = parser.parse_args(argv)

    try:
        data = RegisterRequest(
            username=args.username.strip(),
            email=args.email.strip(),
            password=args.password,
            role=args.role,
        )
    except PydanticValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"Invalid {field}: {err['msg']}", file=sys.stderr)
        return 1

    load_dotenv()
    settings = get_settings()
    db = Database(settings.DATABASE_URL)
    session = db.session()
    try:
        user = AuthService(session, settings).register(data)
    except ConflictError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        session.close()
        db.dispose()
    print(f"Created user '{user.username}' ({user.id}) with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
