"""
Progress dashboard service.

Records finished activities (awarding XP and streaks) and aggregates a
user's results into dashboard views: recent full-test scores, weekly
activity, overall and per-domain accuracy.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import structlog

from satprep.domain.models.progress import (
    DomainAccuracy,
    RecentScore,
    ResultSection,
    ResultType,
    TestResult,
    UserProgress,
    WeeklyData,
)
from satprep.persistence.repositories.progress_repo import ProgressRepository
from satprep.services import gamification

log = structlog.get_logger(__name__)

DOMAIN_NAMES: Dict[str, str] = {
    "information-ideas": "Information and Ideas",
    "craft-structure": "Craft and Structure",
    "expression-ideas": "Expression of Ideas",
    "standard-conventions": "Standard English Conventions",
    "algebra": "Algebra",
    "advanced-math": "Advanced Math",
    "problem-solving": "Problem-Solving and Data Analysis",
    "geometry": "Geometry and Trigonometry",
}

WEEKS_SHOWN = 5


def _percentage(correct: int, total: int) -> int:
    return round(correct / total * 100) if total > 0 else 0


class ProgressService:
    """Records results and builds dashboard aggregates for a user."""

    def __init__(self, progress_repo: ProgressRepository):
        self.progress_repo = progress_repo

    async def get_progress(self, user_id: str) -> UserProgress:
        """Current progress, defaulting to a fresh level-1 record."""
        progress = await self.progress_repo.get_progress(user_id)
        return progress or UserProgress(user_id=user_id)

    async def record_result(
        self,
        user_id: str,
        result_type: ResultType,
        section: ResultSection,
        total_questions: int,
        correct_answers: int,
        domain: Optional[str] = None,
        reading_score: Optional[int] = None,
        math_score: Optional[int] = None,
        total_score: Optional[int] = None,
        time_spent: int = 0,
        completed_at: Optional[datetime] = None,
    ) -> Tuple[TestResult, UserProgress]:
        """Persist a finished activity and award XP.

        Returns:
            (stored result with xp_earned, updated progress)
        """
        completed_at = completed_at or datetime.now(timezone.utc)
        progress = await self.get_progress(user_id)

        progress, earned = gamification.award(
            progress,
            total_questions,
            correct_answers,
            result_type,
            today=completed_at.date(),
        )

        result = TestResult(
            id=str(uuid.uuid4()),
            user_id=user_id,
            result_type=result_type,
            section=section,
            domain=domain,
            total_questions=total_questions,
            correct_answers=correct_answers,
            reading_score=reading_score,
            math_score=math_score,
            total_score=total_score,
            time_spent=time_spent,
            xp_earned=earned,
            completed_at=completed_at,
        )
        await self.progress_repo.add_test_result(result)
        await self.progress_repo.save_progress(progress)

        log.info(
            "result_recorded",
            user_id=user_id,
            result_type=ResultType(result_type).value,
            xp_earned=earned,
            level=progress.level,
            streak=progress.streak,
        )
        return result, progress

    async def recent_scores(self, user_id: str, limit: int = 3) -> List[RecentScore]:
        """Most recent scored full tests, newest first."""
        results = await self.progress_repo.list_test_results(user_id)
        full = [
            r
            for r in results
            if r.result_type == ResultType.FULL and r.total_score is not None
        ]
        full.sort(key=lambda r: r.completed_at, reverse=True)

        return [
            RecentScore(
                completed_at=r.completed_at,
                score_range=f"{max(r.total_score - 100, 400)}-{min(r.total_score + 100, 1600)}",
                reading_score=r.reading_score or 400,
                math_score=r.math_score or 400,
                total_score=r.total_score,
            )
            for r in full[:limit]
        ]

    async def weekly_data(
        self, user_id: str, now: Optional[datetime] = None
    ) -> List[WeeklyData]:
        """Trailing seven-day windows with activity, oldest first."""
        now = now or datetime.now(timezone.utc)
        results = await self.progress_repo.list_test_results(user_id)

        weeks: List[WeeklyData] = []
        for i in range(WEEKS_SHOWN - 1, -1, -1):
            end = now - timedelta(days=7 * i)
            start = end - timedelta(days=7)
            in_window = [r for r in results if start <= r.completed_at < end]

            attempted = sum(r.total_questions for r in in_window)
            correct = sum(r.correct_answers for r in in_window)
            if attempted > 0:
                weeks.append(
                    WeeklyData(
                        period=f"{start:%m/%d}-{end:%m/%d}",
                        attempted=attempted,
                        correct=correct,
                        percentage=_percentage(correct, attempted),
                    )
                )
        return weeks

    async def overall_accuracy(self, user_id: str) -> Dict[str, int]:
        results = await self.progress_repo.list_test_results(user_id)
        total = sum(r.total_questions for r in results)
        correct = sum(r.correct_answers for r in results)
        return {
            "total_questions": total,
            "total_correct": correct,
            "percentage": _percentage(correct, total),
        }

    async def domain_accuracy(self, user_id: str) -> List[DomainAccuracy]:
        """Accuracy per domain, highest first."""
        results = await self.progress_repo.list_test_results(user_id)

        totals: Dict[str, List[int]] = {}
        for r in results:
            if not r.domain:
                continue
            bucket = totals.setdefault(r.domain, [0, 0])
            bucket[0] += r.correct_answers
            bucket[1] += r.total_questions

        accuracies = [
            DomainAccuracy(
                domain=DOMAIN_NAMES.get(domain, domain),
                accuracy=_percentage(correct, total),
                total_questions=total,
                correct_answers=correct,
            )
            for domain, (correct, total) in totals.items()
        ]
        accuracies.sort(key=lambda d: d.accuracy, reverse=True)
        return accuracies

    async def strongest_and_weakest(
        self, user_id: str
    ) -> Dict[str, Optional[DomainAccuracy]]:
        """Best and worst domains, or None for both with no domain data."""
        accuracies = await self.domain_accuracy(user_id)
        if not accuracies:
            return {"strongest": None, "weakest": None}
        return {"strongest": accuracies[0], "weakest": accuracies[-1]}
