#!/usr/bin/env python3
"""
Create (or reset the password of) an administrator account.

Admins cannot self-register, so this is the only way to obtain one.

Usage:
  python scripts/create_admin.py --email admin@ecoride.com [--password secret] [--first-name Ada]
"""
from __future__ import annotations

import argparse
import getpass
import sys

from ecoride.core.security import hash_password
from ecoride.db import create_all
from ecoride.domain.accounts import ROLE_ADMIN, STATUS_APPROVED
from ecoride.repositories.account_repository import AccountRepository


def main() -> None:
    ap = argparse.ArgumentParser(description="Create an EcoRide admin account")
    ap.add_argument("--email", required=True, help="Admin e-mail (login identifier)")
    ap.add_argument("--password", help="Password (prompted when omitted)")
    ap.add_argument("--first-name", default="Admin")
    ap.add_argument("--last-name", default="")
    args = ap.parse_args()

    email = (args.email or "").strip()
    if not email:
        raise SystemExit("Invalid e-mail")
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        raise SystemExit("Password too short (minimum 8 characters)")

    create_all()
    repo = AccountRepository()
    existing = repo.find_by_email(email)
    if existing:
        if existing.role != ROLE_ADMIN:
            raise SystemExit(f"'{email}' already belongs to a {existing.role} account")
        existing.password_hash = hash_password(password)
        repo.save(existing)
        print(f"OK: password reset for admin {email}")
        return

    account = repo.create(
        email=email,
        password_hash=hash_password(password),
        role=ROLE_ADMIN,
        first_name=args.first_name,
        last_name=args.last_name or None,
        status=STATUS_APPROVED,
        approved=True,
    )
    print("OK: admin created")
    print(f"  ID: {account.id}")
    print(f"  Email: {account.email}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
