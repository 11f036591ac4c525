import argparse
import getpass
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portal.accounts import AccountService
from portal.config import load_settings
from portal.database import create_store
from portal.errors import DuplicateAccountError, StorageError
from portal.security import PasswordHasher


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register an insurance portal account")
    parser.add_argument("first_name", help="Given name for the account")
    parser.add_argument("last_name", help="Family name for the account")
    parser.add_argument("email", help="Unique email address for login")
    return parser.parse_args(argv)


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if not password:
            print("Password must not be empty.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    args = parse_args(argv)
    settings = load_settings()
    if not settings.mongodb_uri:
        print("Error: MONGODB_URI is not set; accounts would not be persisted.", file=sys.stderr)
        return 1

    password = prompt_for_password()
    store = create_store(settings)
    if not store.connect():
        print("Error: the document store is unreachable.", file=sys.stderr)
        return 1

    accounts = AccountService(store, PasswordHasher(rounds=settings.bcrypt_rounds))
    try:
        user = accounts.register(args.first_name.strip(), args.last_name.strip(), args.email.strip(), password)
    except DuplicateAccountError:
        print(f"Error: an account for {args.email} already exists.", file=sys.stderr)
        return 1
    except StorageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()

    print(f"Created account for {user.first_name} {user.last_name} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
