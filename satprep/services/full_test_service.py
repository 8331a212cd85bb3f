"""
Full-length adaptive test orchestration.

Drives each section through its state machine against the repositories:

1. Module 1 questions follow the section blueprint at mixed difficulty
2. Module 1 submission grades the served questions and decides the
   Module 2 pool (hard or easy)
3. Module 2 questions follow the blueprint within that pool, widening to any
   difficulty for positions whose pool is exhausted
4. Module 2 submission scales the section; once every section is scored
   the composite is recorded and the session completes

The scoring itself is delegated to the pure engine via SectionAttempt.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import uuid4

import structlog

from satprep.core.exceptions import (
    InvalidTransitionError,
    PoolExhaustionError,
    SessionCompletedError,
    SessionNotFoundError,
    ValidationError,
)
from satprep.domain.models.progress import ResultSection, ResultType
from satprep.domain.models.question import BlueprintItem, Question
from satprep.domain.models.scoring import (
    AdaptiveDecision,
    CompositeScore,
    Difficulty,
    ModuleResult,
    PoolSelection,
    ScaledScore,
    SectionType,
)
from satprep.domain.models.session import (
    PracticeSession,
    SectionState,
    SessionStatus,
    SessionType,
)
from satprep.persistence.repositories.question_repo import QuestionRepository
from satprep.persistence.repositories.session_repo import SessionRepository
from satprep.services.progress_service import ProgressService
from satprep.services.scoring import SectionAttempt, composite, policy_for

log = structlog.get_logger(__name__)

DEFAULT_SECTIONS = (SectionType.READING, SectionType.MATH)


@dataclass
class ModuleQuestions:
    """Questions served for one module."""

    section_type: SectionType
    module_number: int
    difficulty: str  # "Mixed" for Module 1, "Hard" or "Easy" for Module 2
    questions: List[Question]
    time_limit_minutes: int


@dataclass
class ModuleSubmission:
    """Outcome of submitting a module."""

    section_type: SectionType
    module_number: int
    result: ModuleResult
    decision: Optional[AdaptiveDecision] = None
    pool: Optional[PoolSelection] = None
    scaled_score: Optional[ScaledScore] = None
    composite_score: Optional[CompositeScore] = None
    session_completed: bool = False


class FullTestService:
    """Runs full-length adaptive tests."""

    def __init__(
        self,
        session_repo: SessionRepository,
        question_repo: QuestionRepository,
        progress_service: Optional[ProgressService] = None,
    ):
        self.session_repo = session_repo
        self.question_repo = question_repo
        self.progress_service = progress_service

    # ============ LIFECYCLE ============

    async def start(
        self, user_id: str, sections: Iterable[SectionType] = DEFAULT_SECTIONS
    ) -> PracticeSession:
        """Create a full-test session with one attempt per section."""
        sections = list(dict.fromkeys(SectionType(s) for s in sections))
        if not sections:
            raise ValidationError("A full test needs at least one section")

        session = PracticeSession(
            id=str(uuid4()),
            user_id=user_id,
            session_type=SessionType.FULL_TEST,
            started_at=datetime.now(timezone.utc),
        )
        created = await self.session_repo.create(session, sections=sections)

        log.info(
            "full_test_started",
            session_id=created.id,
            user_id=user_id,
            sections=[s.value for s in sections],
        )
        return created

    async def get_status(
        self, session_id: str
    ) -> Tuple[PracticeSession, Dict[SectionType, SectionAttempt]]:
        """Session record plus every section attempt."""
        session = await self._load_session(session_id)
        attempts = await self.session_repo.get_attempts(session_id)
        return session, attempts

    # ============ QUESTIONS ============

    async def module_questions(
        self, session_id: str, section_type: SectionType, module_number: int
    ) -> ModuleQuestions:
        """Serve a module's questions, starting the module if needed.

        Re-requesting a module that is already in progress returns the
        questions that were served for it.
        """
        session, attempt = await self._load_attempt(session_id, section_type)
        self._check_module_number(module_number)
        policy = policy_for(attempt.section_type)

        in_progress = (
            SectionState.MODULE1_IN_PROGRESS
            if module_number == 1
            else SectionState.MODULE2_IN_PROGRESS
        )
        if attempt.state == in_progress:
            served = await self.question_repo.served_questions(
                session_id, attempt.section_type, module_number
            )
            return ModuleQuestions(
                section_type=attempt.section_type,
                module_number=module_number,
                difficulty=self._difficulty_label(attempt, module_number),
                questions=served,
                time_limit_minutes=policy.module_minutes,
            )

        previous = attempt.state
        if module_number == 1:
            attempt.start_module_one()
            difficulties = None
        else:
            pool = attempt.start_module_two()
            difficulties = pool.difficulties

        # Claim the module before drawing so a concurrent start cannot serve it twice
        await self._claim(session, attempt, previous)

        questions = await self._draw_by_blueprint(
            session, attempt.section_type, difficulties
        )
        await self.question_repo.record_usage(
            session.user_id,
            [q.id for q in questions],
            session.id,
            SessionType.FULL_TEST.value,
            section_type=attempt.section_type,
            module_number=module_number,
        )
        await self.session_repo.save_attempt(session.id, attempt)

        log.info(
            "module_started",
            session_id=session.id,
            section=attempt.section_type.value,
            module_number=module_number,
            question_count=len(questions),
            expected=policy.module_size,
        )

        return ModuleQuestions(
            section_type=attempt.section_type,
            module_number=module_number,
            difficulty=self._difficulty_label(attempt, module_number),
            questions=questions,
            time_limit_minutes=policy.module_minutes,
        )

    # ============ SUBMISSION ============

    async def submit_module(
        self,
        session_id: str,
        section_type: SectionType,
        module_number: int,
        answers: Dict[str, Optional[int]],
    ) -> ModuleSubmission:
        """Grade a module and advance the section.

        Unanswered questions count as incorrect. A module that is not in
        progress is rejected with InvalidTransitionError. A module whose
        served question count is not the section's fixed size is rejected
        with ValidationError and nothing is persisted.
        """
        session, attempt = await self._load_attempt(session_id, section_type)
        self._check_module_number(module_number)

        in_progress = (
            SectionState.MODULE1_IN_PROGRESS
            if module_number == 1
            else SectionState.MODULE2_IN_PROGRESS
        )
        if attempt.state != in_progress:
            raise InvalidTransitionError(
                f"{attempt.section_type.value} Module {module_number} is not in "
                f"progress (state: {attempt.state.value})"
            )

        served = await self.question_repo.served_questions(
            session_id, attempt.section_type, module_number
        )
        raw_score = sum(1 for q in served if q.is_correct(answers.get(q.id)))
        result = ModuleResult(
            raw_score=raw_score,
            total_questions=len(served),
            section_type=attempt.section_type,
        )

        if module_number == 1:
            return await self._submit_module_one(session, attempt, result)
        return await self._submit_module_two(session, attempt, result)

    async def _submit_module_one(
        self, session: PracticeSession, attempt: SectionAttempt, result: ModuleResult
    ) -> ModuleSubmission:
        decision = attempt.submit_module_one(result)
        await self._claim(session, attempt, SectionState.MODULE1_IN_PROGRESS)
        await self.session_repo.record_module_result(session.id, 1, result)
        await self.session_repo.save_attempt(session.id, attempt)

        log.info(
            "module_one_submitted",
            session_id=session.id,
            section=attempt.section_type.value,
            raw_score=result.raw_score,
            hard_module_2=decision.qualifies_for_hard_module_2,
        )

        return ModuleSubmission(
            section_type=attempt.section_type,
            module_number=1,
            result=result,
            decision=decision,
        )

    async def _submit_module_two(
        self, session: PracticeSession, attempt: SectionAttempt, result: ModuleResult
    ) -> ModuleSubmission:
        score = attempt.submit_module_two(result)
        await self._claim(session, attempt, SectionState.MODULE2_IN_PROGRESS)
        await self.session_repo.record_module_result(session.id, 2, result)
        await self.session_repo.save_attempt(session.id, attempt)
        await self.session_repo.record_final_score(
            session.id, score, section_type=attempt.section_type
        )

        log.info(
            "section_scored",
            session_id=session.id,
            section=attempt.section_type.value,
            raw_score=attempt.module_one.raw_score + result.raw_score,
            hard_module_2=attempt.decision.qualifies_for_hard_module_2,
            scaled_score=score.value,
        )

        submission = ModuleSubmission(
            section_type=attempt.section_type,
            module_number=2,
            result=result,
            decision=attempt.decision,
            pool=attempt.pool,
            scaled_score=score,
        )

        attempts = await self.session_repo.get_attempts(session.id)
        if all(a.is_scored for a in attempts.values()):
            reading = attempts.get(SectionType.READING)
            math = attempts.get(SectionType.MATH)
            if reading is not None and math is not None:
                total = composite(reading.scaled_score, math.scaled_score)
                await self.session_repo.record_final_score(session.id, total)
                submission.composite_score = total
            await self.session_repo.complete(session.id)
            submission.session_completed = True

            if self.progress_service is not None:
                await self._record_progress(session, attempts, submission.composite_score)

            log.info(
                "full_test_completed",
                session_id=session.id,
                composite=submission.composite_score.value
                if submission.composite_score
                else None,
            )

        return submission

    async def _record_progress(
        self,
        session: PracticeSession,
        attempts: Dict[SectionType, SectionAttempt],
        total: Optional[CompositeScore],
    ) -> None:
        reading = attempts.get(SectionType.READING)
        math = attempts.get(SectionType.MATH)
        if reading is not None and math is not None:
            section = ResultSection.BOTH
        else:
            section = ResultSection(next(iter(attempts)).value)

        elapsed = datetime.now(timezone.utc) - session.started_at
        await self.progress_service.record_result(
            user_id=session.user_id,
            result_type=ResultType.FULL,
            section=section,
            total_questions=sum(
                a.module_one.total_questions + a.module_two.total_questions
                for a in attempts.values()
            ),
            correct_answers=sum(
                a.module_one.raw_score + a.module_two.raw_score
                for a in attempts.values()
            ),
            reading_score=reading.scaled_score.value if reading else None,
            math_score=math.scaled_score.value if math else None,
            total_score=total.value if total else None,
            time_spent=max(0, int(elapsed.total_seconds())),
        )

    # ============ HELPERS ============

    async def _load_session(self, session_id: str) -> PracticeSession:
        session = await self.session_repo.get(session_id)
        if session is None or session.session_type != SessionType.FULL_TEST:
            raise SessionNotFoundError(f"Full test {session_id} not found")
        return session

    async def _load_attempt(
        self, session_id: str, section_type: SectionType
    ) -> Tuple[PracticeSession, SectionAttempt]:
        session = await self._load_session(session_id)
        if session.status == SessionStatus.COMPLETED:
            raise SessionCompletedError(f"Full test {session_id} is already completed")

        try:
            section = SectionType(section_type)
        except ValueError:
            raise ValidationError(f"Unknown section type: {section_type!r}")

        attempts = await self.session_repo.get_attempts(session_id)
        if section not in attempts:
            raise ValidationError(
                f"Section {section.value} is not part of full test {session_id}"
            )
        return session, attempts[section]

    async def _claim(
        self, session: PracticeSession, attempt: SectionAttempt, previous: SectionState
    ) -> None:
        """Persist the attempt's new state only if storage still holds `previous`."""
        claimed = await self.session_repo.claim_state(
            session.id, attempt.section_type, previous, attempt.state
        )
        if not claimed:
            raise InvalidTransitionError(
                f"{attempt.section_type.value} section already left "
                f"{previous.value}"
            )

    @staticmethod
    def _check_module_number(module_number: int) -> None:
        if module_number not in (1, 2):
            raise ValidationError(f"Module number must be 1 or 2, got {module_number}")

    @staticmethod
    def _difficulty_label(attempt: SectionAttempt, module_number: int) -> str:
        if module_number == 1 or attempt.decision is None:
            return "Mixed"
        return "Hard" if attempt.decision.qualifies_for_hard_module_2 else "Easy"

    async def _draw_by_blueprint(
        self,
        session: PracticeSession,
        section_type: SectionType,
        difficulties: Optional[Tuple[Difficulty, ...]],
    ) -> List[Question]:
        """One unused question per blueprint position.

        Positions with nothing left at all are logged and skipped.
        """
        blueprint = await self.question_repo.get_blueprint(section_type)
        expected = policy_for(section_type).module_size
        if len(blueprint) != expected:
            log.warning(
                "blueprint_size_mismatch",
                section=SectionType(section_type).value,
                positions=len(blueprint),
                expected=expected,
            )

        used: Set[str] = set(
            await self.question_repo.used_question_ids(session.id, session.user_id)
        )
        questions: List[Question] = []
        for item in blueprint:
            try:
                question = await self._draw_one(item, difficulties, used)
            except PoolExhaustionError as e:
                log.warning(
                    "blueprint_position_skipped",
                    session_id=session.id,
                    question_number=item.question_number,
                    reason=e.message,
                )
                continue
            used.add(question.id)
            questions.append(question)
        return questions

    async def _draw_one(
        self,
        item: BlueprintItem,
        difficulties: Optional[Tuple[Difficulty, ...]],
        used: Set[str],
    ) -> Question:
        found = await self.question_repo.fetch(
            item.domain_id, item.subunit_id, difficulties, used, 1
        )
        if not found and difficulties is not None:
            log.info(
                "pool_widened",
                question_number=item.question_number,
                difficulties=[d.value for d in difficulties],
            )
            found = await self.question_repo.fetch(
                item.domain_id, item.subunit_id, None, used, 1
            )
        if not found:
            raise PoolExhaustionError(
                f"No unused questions for blueprint position {item.question_number}"
            )
        return found[0]
