#!/usr/bin/env python3
"""
Register a user directly in the users file (no HTTP round trip).

Usage:
  python scripts/add_user.py --email ana@example.com --name "Ana" [--password s3cret]
"""
from __future__ import annotations

import argparse
import getpass
import sys

from minicrud.core.errors import ServiceError
from minicrud.services.auth_service import AuthService


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Register a user in the JSON users file")
    ap.add_argument("--email", required=True, help="Login email (stored lowercased)")
    ap.add_argument("--name", required=True, help="Display name")
    ap.add_argument("--password", help="Password (prompted when omitted)")
    args = ap.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    svc = AuthService()
    try:
        user = svc.register(args.name, args.email, password)
    except ServiceError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        return 1
    print("OK: user registered")
    print(f"  Name:  {user.display_name}")
    print(f"  Email: {user.email}")
    print(f"  File:  {svc.users.path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
