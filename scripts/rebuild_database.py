#!/usr/bin/env python3
"""
Rebuild the database from scratch.

This script:
1. Deletes the existing database file
2. Re-initializes the database using init_database()
3. Optionally seeds domains, subunits and the blueprint (--seed)

WARNING: This will DELETE ALL QUESTIONS, SESSIONS AND PROGRESS.
Use only for development/testing purposes.
"""

import argparse
import asyncio

import structlog

from satprep.core.bank_loader import load_bank_layout
from satprep.core.config import settings
from satprep.core.logging import configure_logging
from satprep.persistence.database import init_database
from satprep.persistence.repositories.question_repo import QuestionRepository
from satprep.services.bank_seeder import seed_question_bank

log = structlog.get_logger(__name__)


async def rebuild_database(seed: bool = False) -> None:
    """Delete the existing database and recreate it."""
    db_path = settings.database_path

    if not db_path.exists():
        log.info(
            "database_not_found",
            path=str(db_path),
            message="No existing database to delete",
        )
    else:
        file_size = db_path.stat().st_size
        log.warning(
            "deleting_database",
            path=str(db_path),
            size_bytes=file_size,
            size_mb=f"{file_size / (1024 * 1024):.2f}",
        )
        db_path.unlink()
        log.info("database_deleted", path=str(db_path))

    log.info("reinitializing_database", path=str(db_path))
    await init_database()

    if seed:
        await seed_question_bank(QuestionRepository(str(db_path)), load_bank_layout())

    if db_path.exists():
        new_size = db_path.stat().st_size
        log.info(
            "database_rebuilt",
            path=str(db_path),
            size_bytes=new_size,
            size_kb=f"{new_size / 1024:.2f}",
        )
    else:
        log.error("database_rebuild_failed", path=str(db_path))


def main():
    parser = argparse.ArgumentParser(description="Delete and recreate the SQLite database")
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Load config/question_bank.yaml after rebuilding",
    )
    args = parser.parse_args()

    configure_logging()
    log.info("starting_database_rebuild")
    asyncio.run(rebuild_database(seed=args.seed))
    log.info("database_rebuild_complete")


if __name__ == "__main__":
    main()
