#!/usr/bin/env python3
"""
Inspect the users/records files and report problems the service would hide.

The service reads a broken file as an empty list; this script tells you
when that is happening and flags duplicate canonical emails.

Usage:
  python scripts/check_store.py [--users data/users.json] [--records data/data.json]
"""
from __future__ import annotations

import argparse
import json
from collections import Counter
from pathlib import Path

from minicrud.core.config import get_settings
from minicrud.domain.validation import canonical_email


def check_file(path: Path, label: str) -> list[str]:
    problems: list[str] = []
    if not path.exists():
        return [f"{label}: {path} does not exist (read as empty)"]
    try:
        data = json.loads(path.read_text(encoding="utf-8") or "[]")
    except (ValueError, UnicodeDecodeError) as exc:
        return [f"{label}: {path} is not valid JSON ({exc})"]
    if not isinstance(data, list):
        return [f"{label}: {path} does not hold a JSON array"]
    emails = []
    for position, entry in enumerate(data):
        if not isinstance(entry, dict):
            problems.append(f"{label}[{position}]: not an object")
            continue
        email = canonical_email(entry.get("email"))
        if not email:
            problems.append(f"{label}[{position}]: missing email")
        else:
            emails.append(email)
    for email, count in Counter(emails).items():
        if count > 1:
            problems.append(f"{label}: {email} appears {count} times")
    return problems


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Check the minicrud JSON files")
    ap.add_argument("--users", type=Path, default=settings.users_file)
    ap.add_argument("--records", type=Path, default=settings.records_file)
    args = ap.parse_args(argv)

    problems = check_file(args.users, "users") + check_file(args.records, "records")
    for line in problems:
        print(line)
    if not problems:
        print("OK: no problems found")
    return 1 if problems else 0


if __name__ == "__main__":
    raise SystemExit(main())
