"""
Shared test fixtures.

Every database fixture builds a fresh SQLite file from schema.sql in a
temporary directory.
"""

import json
import tempfile
import uuid
from pathlib import Path
from typing import Dict, List
from unittest.mock import patch

import aiosqlite
import pytest

from satprep.core.bank_loader import BankLayout, load_bank_layout
from satprep.domain.models.scoring import Difficulty
from satprep.persistence.database import init_database
from satprep.persistence.repositories.progress_repo import ProgressRepository
from satprep.persistence.repositories.question_repo import QuestionRepository
from satprep.persistence.repositories.session_repo import SessionRepository
from satprep.services.bank_seeder import seed_question_bank
from satprep.services.progress_service import ProgressService

# Every seeded question has the first choice correct
CORRECT = 0
WRONG = 1


@pytest.fixture
async def test_db():
    """Create and initialize test database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        from satprep.core import config

        original_path = config.settings.database_path
        config.settings.database_path = db_path

        with patch("satprep.persistence.database.settings", config.settings):
            yield db_path

        config.settings.database_path = original_path


@pytest.fixture
async def session_repo(test_db):
    return SessionRepository(str(test_db))


@pytest.fixture
async def question_repo(test_db):
    return QuestionRepository(str(test_db))


@pytest.fixture
async def progress_repo(test_db):
    return ProgressRepository(str(test_db))


@pytest.fixture
async def progress_service(progress_repo):
    return ProgressService(progress_repo)


@pytest.fixture
def bank_layout() -> BankLayout:
    """The shipped config/question_bank.yaml layout."""
    return load_bank_layout()


async def add_questions(
    db_path: Path, domain_id: str, subunit_id: str, difficulty: Difficulty, count: int
) -> List[str]:
    """Bulk insert questions whose correct answer is choice 0."""
    ids = [str(uuid.uuid4()) for _ in range(count)]
    async with aiosqlite.connect(str(db_path)) as db:
        await db.executemany(
            """INSERT INTO questions (
                id, domain_id, subunit_id, difficulty, question_text, choices, answer
            ) VALUES (?, ?, ?, ?, ?, ?, ?)""",
            [
                (
                    qid,
                    domain_id,
                    subunit_id,
                    difficulty.value,
                    f"{subunit_id} {difficulty.value} question {i + 1}",
                    json.dumps(["right", "wrong", "also wrong", "still wrong"]),
                    CORRECT,
                )
                for i, qid in enumerate(ids)
            ],
        )
        await db.commit()
    return ids


@pytest.fixture
async def seeded_bank(test_db, question_repo, bank_layout) -> BankLayout:
    """Seeded domains and blueprint, with enough questions for a full test.

    Each blueprint subunit gets as many questions of every difficulty as it
    has positions, so both modules can be filled from either pool.
    """
    await seed_question_bank(question_repo, bank_layout)

    per_subunit: Dict[tuple, int] = {}
    for items in bank_layout.blueprint.values():
        for item in items:
            key = (item.domain_id, item.subunit_id)
            per_subunit[key] = per_subunit.get(key, 0) + 1

    for (domain_id, subunit_id), count in per_subunit.items():
        for difficulty in Difficulty:
            await add_questions(test_db, domain_id, subunit_id, difficulty, count)

    return bank_layout


@pytest.fixture
def answer_sheet():
    """Build answers that get the first `correct` served questions right."""

    def build(questions, correct: int) -> Dict[str, int]:
        return {q.id: CORRECT if i < correct else WRONG for i, q in enumerate(questions)}

    return build
