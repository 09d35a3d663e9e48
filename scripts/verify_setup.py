#!/usr/bin/env python3
"""
Verify that all components of the Omondi AI studio are correctly set up.

Run with: python scripts/verify_setup.py
"""

import os
import shutil
import sys

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from sqlalchemy import text  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from omondi.core.config import Settings  # noqa: E402
from omondi.db import Database  # noqa: E402


def check(ok: bool, description: str, detail: str = "") -> bool:
    status = "✓" if ok else "✗"
    suffix = f": {detail}" if detail else ""
    print(f"  {status} {description}{suffix}")
    return ok


def main():
    print("=" * 60)
    print("Omondi AI Setup Verification")
    print("=" * 60)

    settings = Settings.from_env()
    errors = []

    print(f"\nProject root: {PROJECT_ROOT}")

    print("\n[1] Media tools")
    print("-" * 40)
    for name, path in [("ffmpeg", settings.ffmpeg_path), ("ffprobe", settings.ffprobe_path)]:
        found = shutil.which(path)
        if not check(bool(found), name, found or f"'{path}' not found on PATH"):
            errors.append(f"{name} not found")

    print("\n[2] Secrets")
    print("-" * 40)
    if not check(bool(settings.jwt_secret), "JWT_SECRET", "set" if settings.jwt_secret else "missing"):
        errors.append("JWT_SECRET is not set (login will fail)")
    if not check(
        bool(settings.gemini_api_key), "GEMINI_API_KEY", "set" if settings.gemini_api_key else "missing"
    ):
        errors.append("GEMINI_API_KEY is not set (generation will fail)")

    print("\n[3] Database")
    print("-" * 40)
    database = Database(settings.database_url)
    try:
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        check(True, "Connection", database.engine.url.render_as_string(hide_password=True))
    except SQLAlchemyError as e:
        check(False, "Connection", str(e).splitlines()[0])
        errors.append("Database is unreachable")
    finally:
        database.dispose()

    print("\n[4] Shared data")
    print("-" * 40)
    for subdir in ["temp", "output"]:
        path = os.path.join(settings.shared_data_path, subdir)
        os.makedirs(path, exist_ok=True)
        check(True, subdir, path)

    print("\n" + "=" * 60)
    if errors:
        print("Setup incomplete:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)
    print("All checks passed.")


if __name__ == "__main__":
    main()
