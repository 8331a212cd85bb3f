"""Tests for database initialization and health checks."""

import aiosqlite

from satprep.persistence.database import (
    check_database_health,
    init_database,
)

EXPECTED_TABLES = {
    "domains",
    "subunits",
    "questions",
    "sat_blueprint",
    "practice_sessions",
    "section_attempts",
    "module_results",
    "user_question_usage",
    "test_results",
    "user_progress",
}


async def test_init_creates_tables(tmp_path):
    db_path = tmp_path / "nested" / "satprep.db"
    await init_database(db_path)

    async with aiosqlite.connect(db_path) as db:
        cursor = await db.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}

    assert EXPECTED_TABLES <= tables


async def test_init_is_idempotent(tmp_path):
    db_path = tmp_path / "satprep.db"
    await init_database(db_path)
    await init_database(db_path)
    assert db_path.exists()


async def test_health_check_healthy(test_db):
    health = await check_database_health()
    assert health["status"] == "healthy"
    assert health["question_count"] == 0
    assert health["session_count"] == 0
    assert health["integrity"] == "ok"


async def test_health_check_unhealthy_without_schema(tmp_path, monkeypatch):
    from satprep.core import config

    monkeypatch.setattr(config.settings, "database_path", tmp_path / "empty.db")
    health = await check_database_health()
    assert health["status"] == "unhealthy"
    assert "error" in health
