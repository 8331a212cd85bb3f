"""
Sectional practice service.

Serves randomized, unused questions for a domain/subunit at a requested
difficulty, broadening to the other difficulties when the requested tier
runs short. Finished sets are graded against the served questions and
kept for answer review and retrying missed questions.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

import structlog

from satprep.core.exceptions import (
    SessionCompletedError,
    SessionNotFoundError,
    ValidationError,
)
from satprep.domain.models.progress import ResultSection, ResultType, UserProgress
from satprep.domain.models.question import AnswerReview, Question
from satprep.domain.models.scoring import Difficulty
from satprep.domain.models.session import PracticeSession, SessionStatus, SessionType
from satprep.persistence.repositories.question_repo import QuestionRepository
from satprep.persistence.repositories.session_repo import SessionRepository
from satprep.services.progress_service import ProgressService

log = structlog.get_logger(__name__)

MAX_QUESTION_COUNT = 50


@dataclass
class PracticeOutcome:
    """A graded practice set."""

    session: PracticeSession
    review: List[AnswerReview]
    progress: Optional[UserProgress]
    xp_earned: int


class PracticeService:
    """Runs sectional practice sets."""

    def __init__(
        self,
        session_repo: SessionRepository,
        question_repo: QuestionRepository,
        progress_service: Optional[ProgressService] = None,
    ):
        self.session_repo = session_repo
        self.question_repo = question_repo
        self.progress_service = progress_service

    async def start(
        self,
        user_id: str,
        domain_id: str,
        subunit_id: str,
        difficulty: Optional[Difficulty],
        question_count: int,
    ) -> Tuple[PracticeSession, List[Question]]:
        """Create a practice session and serve its questions.

        Args:
            difficulty: Requested tier, or None for mixed difficulty
            question_count: Number of questions wanted (1-50)

        Returns:
            (session, questions). Fewer questions than requested are served
            only when the subunit itself runs out.
        """
        if not 1 <= question_count <= MAX_QUESTION_COUNT:
            raise ValidationError(
                f"question_count must be between 1 and {MAX_QUESTION_COUNT}, "
                f"got {question_count}"
            )

        session = await self.session_repo.create(
            PracticeSession(
                id=str(uuid4()),
                user_id=user_id,
                session_type=SessionType.SECTIONAL,
                domain_id=domain_id,
                subunit_id=subunit_id,
                difficulty=difficulty,
                started_at=datetime.now(timezone.utc),
            )
        )

        requested = [Difficulty(difficulty)] if difficulty else None
        questions = await self.question_repo.fetch(
            domain_id, subunit_id, requested, [], question_count
        )

        if len(questions) < question_count and requested is not None:
            others = [d for d in Difficulty if d not in requested]
            log.info(
                "practice_pool_broadened",
                session_id=session.id,
                requested=requested[0].value,
                found=len(questions),
                wanted=question_count,
            )
            questions += await self.question_repo.fetch(
                domain_id,
                subunit_id,
                others,
                [q.id for q in questions],
                question_count - len(questions),
            )

        await self.question_repo.record_usage(
            user_id, [q.id for q in questions], session.id, SessionType.SECTIONAL.value
        )

        log.info(
            "practice_started",
            session_id=session.id,
            user_id=user_id,
            domain_id=domain_id,
            subunit_id=subunit_id,
            served=len(questions),
        )
        return session, questions

    async def complete(
        self,
        session_id: str,
        answers: Dict[str, Optional[int]],
        time_spent: int = 0,
    ) -> PracticeOutcome:
        """Grade a practice set against the questions served for it.

        Args:
            answers: Question ID -> chosen choice index (None if skipped).
                Served questions missing from the map count as incorrect.

        Raises:
            ValidationError: An answer names a question that was not served,
                or a choice index outside the question's choices.
        """
        session = await self._load_session(session_id)
        if session.status == SessionStatus.COMPLETED:
            raise SessionCompletedError(f"Practice session {session_id} is already completed")

        served = [q for q, _ in await self.question_repo.session_questions(session_id)]
        if not served:
            raise ValidationError(f"Practice session {session_id} has no questions to grade")

        by_id = {q.id: q for q in served}
        unknown = sorted(set(answers) - set(by_id))
        if unknown:
            raise ValidationError(
                f"Answers for questions not served in session {session_id}: "
                f"{', '.join(unknown)}"
            )
        for qid, choice in answers.items():
            if choice is not None and not 0 <= choice < len(by_id[qid].choices):
                raise ValidationError(f"Choice {choice} out of range for question {qid}")

        selected = {q.id: answers.get(q.id) for q in served}
        review = [AnswerReview.grade(q, selected[q.id]) for q in served]
        total_questions = len(review)
        correct_answers = sum(1 for r in review if r.is_correct)
        percentage = round(correct_answers / total_questions * 100, 2)

        await self.question_repo.record_answers(session_id, selected)
        await self.session_repo.complete(
            session_id,
            total_questions=total_questions,
            correct_answers=correct_answers,
            score_percentage=percentage,
        )

        progress = None
        earned = 0
        if self.progress_service is not None:
            domain = (
                await self.question_repo.get_domain(session.domain_id)
                if session.domain_id
                else None
            )
            result, progress = await self.progress_service.record_result(
                user_id=session.user_id,
                result_type=ResultType.SECTIONAL,
                section=ResultSection(domain.section_type.value)
                if domain
                else ResultSection.BOTH,
                total_questions=total_questions,
                correct_answers=correct_answers,
                domain=domain.name if domain else None,
                time_spent=time_spent,
            )
            earned = result.xp_earned

        log.info(
            "practice_completed",
            session_id=session_id,
            correct=correct_answers,
            total=total_questions,
            score_percentage=percentage,
            xp_earned=earned,
        )
        return PracticeOutcome(
            session=await self.session_repo.get(session_id),
            review=review,
            progress=progress,
            xp_earned=earned,
        )

    async def review(self, session_id: str) -> List[AnswerReview]:
        """Graded answers of a completed practice set, in serving order."""
        await self._load_completed(session_id)
        return [
            AnswerReview.grade(q, selected)
            for q, selected in await self.question_repo.session_questions(session_id)
        ]

    async def retry_incorrect(
        self, session_id: str
    ) -> Tuple[PracticeSession, List[Question]]:
        """Start a new practice set from the questions missed in a completed one."""
        original = await self._load_completed(session_id)
        missed = [
            q
            for q, selected in await self.question_repo.session_questions(session_id)
            if not q.is_correct(selected)
        ]
        if not missed:
            raise ValidationError(f"Practice session {session_id} has no incorrect answers")

        session = await self.session_repo.create(
            PracticeSession(
                id=str(uuid4()),
                user_id=original.user_id,
                session_type=SessionType.SECTIONAL,
                domain_id=original.domain_id,
                subunit_id=original.subunit_id,
                difficulty=original.difficulty,
                started_at=datetime.now(timezone.utc),
            )
        )
        await self.question_repo.record_usage(
            original.user_id, [q.id for q in missed], session.id, SessionType.SECTIONAL.value
        )

        log.info(
            "practice_retry_started",
            session_id=session.id,
            retry_of=session_id,
            served=len(missed),
        )
        return session, missed

    async def _load_session(self, session_id: str) -> PracticeSession:
        session = await self.session_repo.get(session_id)
        if session is None or session.session_type != SessionType.SECTIONAL:
            raise SessionNotFoundError(f"Practice session {session_id} not found")
        return session

    async def _load_completed(self, session_id: str) -> PracticeSession:
        session = await self._load_session(session_id)
        if session.status != SessionStatus.COMPLETED:
            raise ValidationError(f"Practice session {session_id} is not completed yet")
        return session
