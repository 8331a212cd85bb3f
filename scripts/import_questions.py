#!/usr/bin/env python3
"""
Import questions from a plain-text bank file.

The domain and subunit must already exist (see rebuild_database.py --seed).

Usage:
    python scripts/import_questions.py questions.txt --domain Algebra \\
        --subunit "Linear functions"
"""

import argparse
import asyncio
import sys
from pathlib import Path

from satprep.core.config import settings
from satprep.core.logging import configure_logging
from satprep.persistence.database import init_database
from satprep.persistence.repositories.question_repo import QuestionRepository
from satprep.services.question_importer import ImportReport, QuestionImporter


async def run_import(path: Path, domain: str, subunit: str) -> ImportReport:
    await init_database()
    importer = QuestionImporter(QuestionRepository(str(settings.database_path)))
    return await importer.import_text(path.read_text(), domain, subunit)


def main():
    parser = argparse.ArgumentParser(
        description="Import questions into an existing domain/subunit"
    )
    parser.add_argument("file", type=Path, help="Plain-text question file")
    parser.add_argument("--domain", required=True, help="Domain name, e.g. Algebra")
    parser.add_argument("--subunit", required=True, help="Subunit name within the domain")
    args = parser.parse_args()

    if not args.file.exists():
        print(f"File not found: {args.file}")
        sys.exit(1)

    configure_logging()
    report = asyncio.run(run_import(args.file, args.domain, args.subunit))

    print(f"Imported {report.success} question(s)")
    for error in report.errors:
        print(f"  - {error}")

    sys.exit(0 if report.success and not report.errors else 1)


if __name__ == "__main__":
    main()
