"""Question bank repository for database operations."""

import json
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import aiosqlite
import structlog

from satprep.domain.models.question import BlueprintItem, Domain, Question, Subunit
from satprep.domain.models.scoring import Difficulty, SectionType

log = structlog.get_logger(__name__)


def _placeholders(n: int) -> str:
    return ", ".join("?" for _ in range(n))


class QuestionRepository:
    """Repository for question bank reads, imports and usage tracking."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    # ============ QUESTION SELECTION ============

    async def fetch(
        self,
        domain_id: Optional[str],
        subunit_id: Optional[str],
        difficulties: Optional[Iterable[Difficulty]],
        exclude_ids: Iterable[str],
        limit: int,
    ) -> List[Question]:
        """Fetch random questions matching the filters.

        Args:
            domain_id: Domain filter (None for any domain)
            subunit_id: Subunit filter (None for any subunit)
            difficulties: Allowed difficulties (None for any)
            exclude_ids: Question IDs already used in this session
            limit: Maximum number of questions to return

        Returns:
            Up to `limit` questions. A short pool yields fewer; the caller
            decides how to fill the shortfall.
        """
        if limit <= 0:
            return []

        clauses: List[str] = []
        params: List = []

        if domain_id is not None:
            clauses.append("domain_id = ?")
            params.append(domain_id)
        if subunit_id is not None:
            clauses.append("subunit_id = ?")
            params.append(subunit_id)

        if difficulties is not None:
            values = [Difficulty(d).value for d in difficulties]
            if not values:
                return []
            clauses.append(f"difficulty IN ({_placeholders(len(values))})")
            params.extend(values)

        excluded = list(exclude_ids)
        if excluded:
            clauses.append(f"id NOT IN ({_placeholders(len(excluded))})")
            params.extend(excluded)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT * FROM questions {where} ORDER BY RANDOM() LIMIT ?",
                (*params, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_question(row) for row in rows]

    async def get_many(self, question_ids: Sequence[str]) -> Dict[str, Question]:
        """Get questions by ID, keyed by ID."""
        if not question_ids:
            return {}
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT * FROM questions WHERE id IN ({_placeholders(len(question_ids))})",
                tuple(question_ids),
            )
            rows = await cursor.fetchall()
            return {row["id"]: self._row_to_question(row) for row in rows}

    # ============ USAGE TRACKING ============

    async def record_usage(
        self,
        user_id: str,
        question_ids: Sequence[str],
        session_id: str,
        practice_type: str,
        section_type: Optional[SectionType] = None,
        module_number: Optional[int] = None,
    ) -> None:
        """Record that questions were served to a user in a session."""
        section = SectionType(section_type).value if section_type else None
        async with aiosqlite.connect(self.db_path) as db:
            await db.executemany(
                """INSERT INTO user_question_usage (
                    id, user_id, question_id, session_id,
                    practice_type, section_type, module_number
                ) VALUES (?, ?, ?, ?, ?, ?, ?)""",
                [
                    (
                        str(uuid.uuid4()),
                        user_id,
                        question_id,
                        session_id,
                        practice_type,
                        section,
                        module_number,
                    )
                    for question_id in question_ids
                ],
            )
            await db.commit()

        log.debug(
            "question_usage_recorded",
            session_id=session_id,
            count=len(question_ids),
            module_number=module_number,
        )

    async def used_question_ids(self, session_id: str, user_id: str) -> List[str]:
        """Question IDs already served to this user in this session."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """SELECT question_id FROM user_question_usage
                   WHERE session_id = ? AND user_id = ?""",
                (session_id, user_id),
            )
            rows = await cursor.fetchall()
            return [row[0] for row in rows]

    async def served_questions(
        self, session_id: str, section_type: SectionType, module_number: int
    ) -> List[Question]:
        """Questions served for one module, in serving order."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """SELECT q.* FROM user_question_usage u
                   JOIN questions q ON q.id = u.question_id
                   WHERE u.session_id = ? AND u.section_type = ? AND u.module_number = ?
                   ORDER BY u.rowid""",
                (session_id, SectionType(section_type).value, module_number),
            )
            rows = await cursor.fetchall()
            return [self._row_to_question(row) for row in rows]

    async def session_questions(
        self, session_id: str
    ) -> List[Tuple[Question, Optional[int]]]:
        """Every question served in a session with its recorded answer, in serving order."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """SELECT q.*, u.selected_answer FROM user_question_usage u
                   JOIN questions q ON q.id = u.question_id
                   WHERE u.session_id = ?
                   ORDER BY u.rowid""",
                (session_id,),
            )
            rows = await cursor.fetchall()
            return [(self._row_to_question(row), row["selected_answer"]) for row in rows]

    async def record_answers(
        self, session_id: str, answers: Dict[str, Optional[int]]
    ) -> None:
        """Store the chosen choice for each served question (None if skipped)."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.executemany(
                """UPDATE user_question_usage SET selected_answer = ?
                   WHERE session_id = ? AND question_id = ?""",
                [(choice, session_id, qid) for qid, choice in answers.items()],
            )
            await db.commit()

    # ============ BANK MAINTENANCE ============

    async def upsert_domain(
        self,
        name: str,
        section_type: SectionType,
        description: Optional[str] = None,
        domain_id: Optional[str] = None,
    ) -> Domain:
        """Create a domain by name, or return the existing one.

        A new domain gets `domain_id` when given, otherwise a random UUID.
        """
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute(
                """INSERT OR IGNORE INTO domains (id, name, section_type, description)
                   VALUES (?, ?, ?, ?)""",
                (
                    domain_id or str(uuid.uuid4()),
                    name,
                    SectionType(section_type).value,
                    description,
                ),
            )
            await db.commit()
            cursor = await db.execute("SELECT * FROM domains WHERE name = ?", (name,))
            row = await cursor.fetchone()
            return self._row_to_domain(row)

    async def upsert_subunit(
        self,
        domain_id: str,
        name: str,
        description: Optional[str] = None,
        subunit_id: Optional[str] = None,
    ) -> Subunit:
        """Create a subunit by (domain, name), or return the existing one."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute(
                """INSERT OR IGNORE INTO subunits (id, domain_id, name, description)
                   VALUES (?, ?, ?, ?)""",
                (subunit_id or str(uuid.uuid4()), domain_id, name, description),
            )
            await db.commit()
            cursor = await db.execute(
                "SELECT * FROM subunits WHERE domain_id = ? AND name = ?",
                (domain_id, name),
            )
            row = await cursor.fetchone()
            return self._row_to_subunit(row)

    async def get_domain(self, domain_id: str) -> Optional[Domain]:
        """Get a domain by ID (without subunits)."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM domains WHERE id = ?", (domain_id,))
            row = await cursor.fetchone()
            return self._row_to_domain(row) if row else None

    async def find_subunit(self, domain_name: str, subunit_name: str) -> Optional[Subunit]:
        """Look up a subunit by domain and subunit name."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """SELECT s.* FROM subunits s
                   JOIN domains d ON d.id = s.domain_id
                   WHERE d.name = ? AND s.name = ?""",
                (domain_name, subunit_name),
            )
            row = await cursor.fetchone()
            return self._row_to_subunit(row) if row else None

    async def add_question(self, question: Question) -> Question:
        """Insert a question."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT INTO questions (
                    id, domain_id, subunit_id, difficulty, question_text,
                    choices, answer, explanation, passage_text
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    question.id,
                    question.domain_id,
                    question.subunit_id,
                    question.difficulty.value,
                    question.question_text,
                    json.dumps(question.choices),
                    question.answer,
                    question.explanation,
                    question.passage_text,
                ),
            )
            await db.commit()
        return question

    async def list_domains_with_subunits(
        self, section_type: Optional[SectionType] = None
    ) -> List[Domain]:
        """List domains ordered by name, each with its subunits."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if section_type is None:
                cursor = await db.execute("SELECT * FROM domains ORDER BY name")
            else:
                cursor = await db.execute(
                    "SELECT * FROM domains WHERE section_type = ? ORDER BY name",
                    (SectionType(section_type).value,),
                )
            domains = [self._row_to_domain(row) for row in await cursor.fetchall()]

            cursor = await db.execute("SELECT * FROM subunits ORDER BY name")
            by_domain: Dict[str, List[Subunit]] = {}
            for row in await cursor.fetchall():
                by_domain.setdefault(row["domain_id"], []).append(
                    self._row_to_subunit(row)
                )

        return [
            domain.model_copy(update={"subunits": by_domain.get(domain.id, [])})
            for domain in domains
        ]

    # ============ BLUEPRINT ============

    async def add_blueprint_item(self, item: BlueprintItem) -> BlueprintItem:
        """Insert or replace one blueprint position."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT OR REPLACE INTO sat_blueprint (
                    id, section_type, question_number, domain_id, subunit_id, description
                ) VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    item.id,
                    item.section_type.value,
                    item.question_number,
                    item.domain_id,
                    item.subunit_id,
                    item.description,
                ),
            )
            await db.commit()
        return item

    async def get_blueprint(self, section_type: SectionType) -> List[BlueprintItem]:
        """Blueprint positions for a section, ordered by question number."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """SELECT * FROM sat_blueprint
                   WHERE section_type = ?
                   ORDER BY question_number""",
                (SectionType(section_type).value,),
            )
            rows = await cursor.fetchall()
            return [
                BlueprintItem(
                    id=row["id"],
                    section_type=row["section_type"],
                    question_number=row["question_number"],
                    domain_id=row["domain_id"],
                    subunit_id=row["subunit_id"],
                    description=row["description"],
                )
                for row in rows
            ]

    # ============ ROW MAPPING ============

    def _row_to_question(self, row: aiosqlite.Row) -> Question:
        return Question(
            id=row["id"],
            domain_id=row["domain_id"],
            subunit_id=row["subunit_id"],
            difficulty=row["difficulty"],
            question_text=row["question_text"],
            choices=json.loads(row["choices"]),
            answer=row["answer"],
            explanation=row["explanation"],
            passage_text=row["passage_text"],
            created_at=datetime.fromisoformat(row["created_at"])
            if row["created_at"]
            else None,
        )

    def _row_to_domain(self, row: aiosqlite.Row) -> Domain:
        return Domain(
            id=row["id"],
            name=row["name"],
            section_type=row["section_type"],
            description=row["description"],
        )

    def _row_to_subunit(self, row: aiosqlite.Row) -> Subunit:
        return Subunit(
            id=row["id"],
            domain_id=row["domain_id"],
            name=row["name"],
            description=row["description"],
        )
