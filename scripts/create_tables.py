"""
Standalone script that creates every table defined in the ORM models.

Existing tables are left untouched, so it is safe to re-run after adding a
new model.

Usage:
    python scripts/create_tables.py [--prod]
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine

# --- Path Setup ---
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.irshad_center_backend.database.models import Base


async def create_tables(url: str):
    engine = create_async_engine(url, echo=False)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create the database schema.")
    parser.add_argument("--prod", action="store_true", help="Target the PRODUCTION database.")
    args = parser.parse_args()

    load_dotenv(PROJECT_ROOT / '.env')

    if args.prod:
        target_env_var = "DATABASE_URL_PROD"
        print("WARNING: You are about to modify the PRODUCTION database schema.")
        confirmation = input("Are you sure you want to proceed? (y/n): ").strip().lower()
        if confirmation != 'y':
            print("Operation aborted.")
            return
    else:
        target_env_var = "DATABASE_URL_TEST"

    url = os.environ.get(target_env_var)
    if not url:
        print(f"Error: {target_env_var} is not set.")
        sys.exit(1)

    print(f"Creating tables using {target_env_var}...")
    asyncio.run(create_tables(url))
    print(f"Created {len(Base.metadata.tables)} tables (existing ones skipped).")


if __name__ == "__main__":
    main()
