"""Practice session repository for database operations."""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

import aiosqlite
import structlog

from satprep.core.exceptions import SessionNotFoundError
from satprep.domain.models.scoring import (
    AdaptiveDecision,
    CompositeScore,
    ModuleResult,
    ScaledScore,
    SectionType,
)
from satprep.domain.models.session import PracticeSession, SectionState
from satprep.services.scoring.attempt import SectionAttempt
from satprep.services.scoring.engine import select_pool

log = structlog.get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionRepository:
    """Repository for practice sessions, section attempts and module results.

    Also serves as the session store for the scoring flow:
    record_module_result and record_final_score.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    # ============ SESSIONS ============

    async def create(
        self, session: PracticeSession, sections: Iterable[SectionType] = ()
    ) -> PracticeSession:
        """Create a session, with a not-started attempt per section."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute(
                """INSERT INTO practice_sessions (
                    id, user_id, session_type, status,
                    domain_id, subunit_id, difficulty, started_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    session.id,
                    session.user_id,
                    session.session_type.value,
                    session.status.value,
                    session.domain_id,
                    session.subunit_id,
                    session.difficulty.value if session.difficulty else None,
                    session.started_at.isoformat(),
                ),
            )
            for section in sections:
                await db.execute(
                    """INSERT INTO section_attempts (session_id, section_type, state)
                       VALUES (?, ?, ?)""",
                    (
                        session.id,
                        SectionType(section).value,
                        SectionState.NOT_STARTED.value,
                    ),
                )
            await db.commit()

            cursor = await db.execute(
                "SELECT * FROM practice_sessions WHERE id = ?", (session.id,)
            )
            row = await cursor.fetchone()
            if not row:
                raise ValueError(f"Session {session.id} not found after creation")
            return self._row_to_session(row)

    async def get(self, session_id: str) -> Optional[PracticeSession]:
        """Get a session by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM practice_sessions WHERE id = ?", (session_id,)
            )
            row = await cursor.fetchone()
            if not row:
                return None
            return self._row_to_session(row)

    async def list_for_user(self, user_id: str) -> List[PracticeSession]:
        """List a user's sessions, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """SELECT * FROM practice_sessions
                   WHERE user_id = ? ORDER BY started_at DESC""",
                (user_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_session(row) for row in rows]

    async def complete(
        self,
        session_id: str,
        total_questions: Optional[int] = None,
        correct_answers: Optional[int] = None,
        score_percentage: Optional[float] = None,
    ) -> None:
        """Mark a session completed, storing practice results if given."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """UPDATE practice_sessions SET
                    status = 'completed',
                    completed_at = ?,
                    total_questions = COALESCE(?, total_questions),
                    correct_answers = COALESCE(?, correct_answers),
                    score_percentage = COALESCE(?, score_percentage)
                   WHERE id = ?""",
                (_now(), total_questions, correct_answers, score_percentage, session_id),
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise SessionNotFoundError(f"Session {session_id} not found")

    # ============ SECTION ATTEMPTS ============

    async def save_attempt(self, session_id: str, attempt: SectionAttempt) -> None:
        """Persist the current state of a section attempt."""
        decision = attempt.decision
        module_2_difficulty = None
        if decision is not None:
            module_2_difficulty = "Hard" if decision.qualifies_for_hard_module_2 else "Easy"

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT INTO section_attempts (
                    session_id, section_type, state, module_1_difficulty,
                    module_2_difficulty, qualifies_for_hard, threshold,
                    scaled_score, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (session_id, section_type) DO UPDATE SET
                    state = excluded.state,
                    module_1_difficulty = excluded.module_1_difficulty,
                    module_2_difficulty = excluded.module_2_difficulty,
                    qualifies_for_hard = excluded.qualifies_for_hard,
                    threshold = excluded.threshold,
                    scaled_score = excluded.scaled_score,
                    updated_at = excluded.updated_at""",
                (
                    session_id,
                    attempt.section_type.value,
                    attempt.state.value,
                    "Mixed" if attempt.state != SectionState.NOT_STARTED else None,
                    module_2_difficulty,
                    None if decision is None else int(decision.qualifies_for_hard_module_2),
                    None if decision is None else decision.threshold,
                    attempt.scaled_score.value if attempt.scaled_score else None,
                    _now(),
                ),
            )
            await db.commit()

    async def claim_state(
        self,
        session_id: str,
        section_type: SectionType,
        expected: SectionState,
        target: SectionState,
    ) -> bool:
        """Move an attempt from `expected` to `target` only if it is still there.

        Returns False when another writer changed the state first.
        """
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """UPDATE section_attempts SET state = ?, updated_at = ?
                   WHERE session_id = ? AND section_type = ? AND state = ?""",
                (
                    SectionState(target).value,
                    _now(),
                    session_id,
                    SectionType(section_type).value,
                    SectionState(expected).value,
                ),
            )
            await db.commit()
            claimed = cursor.rowcount == 1

        if not claimed:
            log.warning(
                "section_state_claim_lost",
                session_id=session_id,
                section=SectionType(section_type).value,
                expected=SectionState(expected).value,
                target=SectionState(target).value,
            )
        return claimed

    async def get_attempts(self, session_id: str) -> Dict[SectionType, SectionAttempt]:
        """Load every section attempt of a session, keyed by section."""
        results = await self.get_module_results(session_id)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """SELECT * FROM section_attempts
                   WHERE session_id = ? ORDER BY rowid""",
                (session_id,),
            )
            rows = await cursor.fetchall()

        attempts: Dict[SectionType, SectionAttempt] = {}
        for row in rows:
            section = SectionType(row["section_type"])
            decision = None
            if row["qualifies_for_hard"] is not None:
                decision = AdaptiveDecision(
                    qualifies_for_hard_module_2=bool(row["qualifies_for_hard"]),
                    section_type=section,
                    threshold=row["threshold"],
                )
            state = SectionState(row["state"])
            pool = None
            if decision is not None and state in (
                SectionState.MODULE2_IN_PROGRESS,
                SectionState.MODULE2_SUBMITTED,
                SectionState.SCORED,
            ):
                pool = select_pool(decision)

            attempts[section] = SectionAttempt(
                section_type=section,
                state=state,
                module_one=results.get((section, 1)),
                decision=decision,
                pool=pool,
                module_two=results.get((section, 2)),
                scaled_score=ScaledScore(row["scaled_score"])
                if row["scaled_score"] is not None
                else None,
            )
        return attempts

    # ============ SESSION STORE ============

    async def record_module_result(
        self, session_id: str, module_number: int, result: ModuleResult
    ) -> None:
        """Store a submitted module result. Module results are immutable."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT INTO module_results (
                    session_id, section_type, module_number, raw_score, total_questions
                ) VALUES (?, ?, ?, ?, ?)""",
                (
                    session_id,
                    result.section_type.value,
                    module_number,
                    result.raw_score,
                    result.total_questions,
                ),
            )
            await db.commit()

        log.info(
            "module_result_recorded",
            session_id=session_id,
            section=result.section_type.value,
            module_number=module_number,
            raw_score=result.raw_score,
            total_questions=result.total_questions,
        )

    async def get_module_results(self, session_id: str) -> Dict[tuple, ModuleResult]:
        """Module results keyed by (section, module_number)."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM module_results WHERE session_id = ?", (session_id,)
            )
            rows = await cursor.fetchall()
            return {
                (SectionType(row["section_type"]), row["module_number"]): ModuleResult(
                    raw_score=row["raw_score"],
                    total_questions=row["total_questions"],
                    section_type=SectionType(row["section_type"]),
                )
                for row in rows
            }

    async def record_final_score(
        self,
        session_id: str,
        score: Union[ScaledScore, CompositeScore],
        section_type: Optional[SectionType] = None,
    ) -> None:
        """Store a section score (with section_type) or the composite score."""
        async with aiosqlite.connect(self.db_path) as db:
            if isinstance(score, CompositeScore):
                cursor = await db.execute(
                    "UPDATE practice_sessions SET composite_score = ? WHERE id = ?",
                    (score.value, session_id),
                )
            else:
                if section_type is None:
                    raise ValueError("section_type is required for a section score")
                cursor = await db.execute(
                    """UPDATE section_attempts SET scaled_score = ?, updated_at = ?
                       WHERE session_id = ? AND section_type = ?""",
                    (score.value, _now(), session_id, SectionType(section_type).value),
                )
            await db.commit()
            if cursor.rowcount == 0:
                raise SessionNotFoundError(f"Session {session_id} not found")

        log.info(
            "final_score_recorded",
            session_id=session_id,
            section=SectionType(section_type).value if section_type else "composite",
            score=score.value,
        )

    # ============ ROW MAPPING ============

    def _row_to_session(self, row: aiosqlite.Row) -> PracticeSession:
        return PracticeSession(
            id=row["id"],
            user_id=row["user_id"],
            session_type=row["session_type"],
            status=row["status"],
            domain_id=row["domain_id"],
            subunit_id=row["subunit_id"],
            difficulty=row["difficulty"],
            started_at=datetime.fromisoformat(row["started_at"]),
            completed_at=datetime.fromisoformat(row["completed_at"])
            if row["completed_at"]
            else None,
            total_questions=row["total_questions"],
            correct_answers=row["correct_answers"],
            score_percentage=row["score_percentage"],
            composite_score=row["composite_score"],
        )
