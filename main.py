"""Command-line interface for the user directory helpers."""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from getpass import getpass
from typing import List, Optional, Sequence

from userdir.auth import decode_session_token, generate_session_token, hash_password, is_session_expired
from userdir.config import Settings, load_settings, resolve_config_path
from userdir.directory import create_user
from userdir.errors import DuplicateEmail, MissingField, NetworkError, UserDirectoryError
from userdir.models import ROLE_RANKS, UserRecord
from userdir.remote import RemoteUserClient, to_candidate
from userdir.validation import is_valid_email, is_valid_phone, validate_password, validate_user

logger = logging.getLogger("userdir.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User directory utilities")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to the YAML settings file (defaults to USERDIR_CONFIG or config/userdir.yaml)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    email_parser = subparsers.add_parser("check-email", help="Validate an email address")
    email_parser.add_argument("email")

    phone_parser = subparsers.add_parser("check-phone", help="Validate a French phone number")
    phone_parser.add_argument("phone")

    password_parser = subparsers.add_parser("check-password", help="Check password strength rules")
    password_parser.add_argument("--password", default=None, help="Password to check (prompted when omitted)")

    hash_parser = subparsers.add_parser("hash-password", help="Print the stored form of a password")
    hash_parser.add_argument("--password", default=None, help="Password to hash (prompted when omitted)")

    decode_parser = subparsers.add_parser("decode-token", help="Decode a session token")
    decode_parser.add_argument("token")
    decode_parser.add_argument(
        "--issued-at",
        dest="issued_at",
        type=float,
        default=None,
        help="Token creation time in epoch milliseconds; reports whether the session expired",
    )

    register_parser = subparsers.add_parser(
        "register", help="Validate and create a user, then issue a session token"
    )
    register_parser.add_argument("name", help="Display name for the user")
    register_parser.add_argument("email", help="Unique email address for login")
    register_parser.add_argument("--role", choices=sorted(ROLE_RANKS), default=None)
    register_parser.add_argument("--birth-date", dest="birth_date", default=None, help="YYYY-MM-DD")
    register_parser.add_argument("--password", default=None, help="Password (prompted when omitted)")

    seed_parser = subparsers.add_parser("seed", help="Build a directory from random remote users")
    seed_parser.add_argument("--count", type=int, default=5, help="Number of users to fetch (1-100)")

    return parser.parse_args(list(argv) if argv is not None else None)


def _prompt_for_password(confirm: bool = False) -> str:
    for _ in range(3):
        password = getpass("Password: ")
        if not confirm:
            return password
        if password != getpass("Confirm password: "):
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def _load_settings(config_path: Optional[str]) -> Settings:
    path = resolve_config_path(config_path or os.getenv("USERDIR_CONFIG"))
    return load_settings(path)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _register(args: argparse.Namespace, settings: Settings) -> int:
    password = args.password if args.password is not None else _prompt_for_password(confirm=True)
    candidate = {
        "name": args.name,
        "email": args.email,
        "password": password,
        "birth_date": args.birth_date,
    }
    result = validate_user(candidate)
    if not result.valid:
        for error in result.errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    users = create_user([], {"name": args.name, "email": args.email, "role": args.role})
    user = users[-1]
    _print_json(
        {
            "user": user.to_dict(),
            "password_hash": hash_password(password, settings.password_salt),
            "session_token": generate_session_token(user),
        }
    )
    return 0


def _seed(count: int, settings: Settings) -> int:
    client = RemoteUserClient(settings)
    try:
        remote_users = client.fetch_multiple_users(count)
    except NetworkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    users: List[UserRecord] = []
    for remote_user in remote_users:
        try:
            users = create_user(users, to_candidate(remote_user))
        except (DuplicateEmail, MissingField) as exc:
            logger.warning("Skipping remote user: %s", exc)
    _print_json([user.to_dict() for user in users])
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        settings = _load_settings(args.config_path)

        if args.command == "check-email":
            valid = is_valid_email(args.email)
            print("valid" if valid else "invalid")
            return 0 if valid else 1
        if args.command == "check-phone":
            valid = is_valid_phone(args.phone)
            print("valid" if valid else "invalid")
            return 0 if valid else 1
        if args.command == "check-password":
            password = args.password if args.password is not None else _prompt_for_password()
            result = validate_password(password)
            for error in result.errors:
                print(error)
            return 0 if result.valid else 1
        if args.command == "hash-password":
            password = args.password if args.password is not None else _prompt_for_password()
            print(hash_password(password, settings.password_salt))
            return 0
        if args.command == "decode-token":
            payload = decode_session_token(args.token)
            if args.issued_at is not None:
                payload["expired"] = is_session_expired(args.issued_at, settings.session_ttl_ms)
            _print_json(payload)
            return 0
        if args.command == "register":
            return _register(args, settings)
        if args.command == "seed":
            return _seed(args.count, settings)
    except UserDirectoryError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
