"""Progress repository: finished results and per-user XP/streak state."""

from datetime import date, datetime
from typing import List, Optional

import aiosqlite

from satprep.domain.models.progress import TestResult, UserProgress


class ProgressRepository:
    """Repository for test results and user progress."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def add_test_result(self, result: TestResult) -> TestResult:
        """Insert a finished result."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT INTO test_results (
                    id, user_id, result_type, section, domain,
                    total_questions, correct_answers,
                    reading_score, math_score, total_score,
                    time_spent, xp_earned, completed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    result.id,
                    result.user_id,
                    result.result_type.value,
                    result.section.value,
                    result.domain,
                    result.total_questions,
                    result.correct_answers,
                    result.reading_score,
                    result.math_score,
                    result.total_score,
                    result.time_spent,
                    result.xp_earned,
                    result.completed_at.isoformat(),
                ),
            )
            await db.commit()
        return result

    async def list_test_results(self, user_id: str) -> List[TestResult]:
        """All results for a user, oldest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """SELECT * FROM test_results
                   WHERE user_id = ? ORDER BY completed_at ASC""",
                (user_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_result(row) for row in rows]

    async def get_progress(self, user_id: str) -> Optional[UserProgress]:
        """Get a user's progress, or None if they have no activity yet."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM user_progress WHERE user_id = ?", (user_id,)
            )
            row = await cursor.fetchone()
            if not row:
                return None
            return UserProgress(
                user_id=row["user_id"],
                name=row["name"],
                level=row["level"],
                current_xp=row["current_xp"],
                total_xp=row["total_xp"],
                streak=row["streak"],
                badge=row["badge"],
                last_activity_date=date.fromisoformat(row["last_activity_date"])
                if row["last_activity_date"]
                else None,
            )

    async def save_progress(self, progress: UserProgress) -> None:
        """Insert or replace a user's progress."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT OR REPLACE INTO user_progress (
                    user_id, name, level, current_xp, total_xp,
                    streak, badge, last_activity_date
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    progress.user_id,
                    progress.name,
                    progress.level,
                    progress.current_xp,
                    progress.total_xp,
                    progress.streak,
                    progress.badge,
                    progress.last_activity_date.isoformat()
                    if progress.last_activity_date
                    else None,
                ),
            )
            await db.commit()

    def _row_to_result(self, row: aiosqlite.Row) -> TestResult:
        return TestResult(
            id=row["id"],
            user_id=row["user_id"],
            result_type=row["result_type"],
            section=row["section"],
            domain=row["domain"],
            total_questions=row["total_questions"],
            correct_answers=row["correct_answers"],
            reading_score=row["reading_score"],
            math_score=row["math_score"],
            total_score=row["total_score"],
            time_spent=row["time_spent"],
            xp_earned=row["xp_earned"],
            completed_at=datetime.fromisoformat(row["completed_at"]),
        )
