#!/usr/bin/env python3
"""
SCOLARIS - Seed Directory
Crée un annuaire JSON avec un compte administrateur initial.

Usage:
    SCOLARIS_ADMIN_EMAIL=admin@ecole.fr python scripts/seed_directory.py data/directory.json
"""

import getpass
import os
import sys
from pathlib import Path

from scolaris.bootstrap import build_services
from scolaris.directory import JsonFileBackend

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "auth.yaml"


def main():
    print("=== SEED DIRECTORY ===\n")

    target = sys.argv[1] if len(sys.argv) > 1 else "data/directory.json"
    Path(target).parent.mkdir(parents=True, exist_ok=True)

    email = os.environ.get("SCOLARIS_ADMIN_EMAIL")
    if not email:
        email = input("Admin email: ").strip()
    username = os.environ.get("SCOLARIS_ADMIN_USERNAME", "admin")
    password = os.environ.get("SCOLARIS_ADMIN_PASSWORD") or getpass.getpass("Admin password: ")

    services = build_services(config_path=CONFIG_PATH, backend=JsonFileBackend(target))

    print(f"Annuaire: {target}")
    result = services.registration.register({
        "username": username,
        "email": email,
        "password": password,
        "role": "administrator",
        "school_name": os.environ.get("SCOLARIS_SCHOOL_NAME", ""),
    })

    if not result.success:
        print(f"✗ {result.message}")
        for reason in result.reasons:
            print(f"  - {reason}")
        sys.exit(1)

    print(f"✓ Administrateur créé: {result.user_id} ({email})")
    print("\n=== SEED TERMINÉ ===")


if __name__ == "__main__":
    main()
