"""Print an argon2 hash of the admin password for ADMIN_PASSWORD_HASH.

Usage:
    python scripts/hash_admin_password.py            # prompts for the password
    python scripts/hash_admin_password.py --stdin    # reads it from stdin
"""

import argparse
import getpass
import sys

from votetally.core.security import hash_password


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--stdin", action="store_true", help="Read the password from standard input"
    )
    args = parser.parse_args()

    if args.stdin:
        password = sys.stdin.readline().rstrip("\n")
    else:
        password = getpass.getpass("Admin password: ")
        if password != getpass.getpass("Repeat password: "):
            print("❌ Passwords do not match", file=sys.stderr)
            sys.exit(1)

    if not password:
        print("❌ Password must not be empty", file=sys.stderr)
        sys.exit(1)

    print(f"ADMIN_PASSWORD_HASH={hash_password(password)}")


if __name__ == "__main__":
    main()
