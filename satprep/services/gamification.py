"""XP, level, badge and streak rules.

Pure functions over UserProgress. The caller passes `today` explicitly so
streak handling never reads the clock.
"""

from datetime import date
from typing import Optional, Tuple

from satprep.core.config import GamificationConfig, gamification_config
from satprep.domain.models.progress import ResultType, UserProgress


def calculate_xp(
    total_questions: int,
    correct_answers: int,
    result_type: ResultType,
    config: Optional[GamificationConfig] = None,
) -> int:
    """XP for a finished activity, before any streak bonus."""
    rules = (config or gamification_config).xp
    xp = total_questions * rules.answered_question
    xp += correct_answers * rules.correct_answer_bonus

    if ResultType(result_type) == ResultType.FULL:
        xp += rules.finish_full_test
    else:
        xp += rules.finish_practice_set
    return xp


def badge_for(level: int, config: Optional[GamificationConfig] = None) -> str:
    """Highest badge whose minimum level has been reached."""
    badges = (config or gamification_config).badges
    earned = badges[1]
    for min_level, badge in badges.items():
        if level >= min_level:
            earned = badge
    return earned


def level_for(
    progress: UserProgress, total_xp: int, config: Optional[GamificationConfig] = None
) -> UserProgress:
    """Recompute level, XP within the level and badge from total XP."""
    cfg = config or gamification_config
    level = total_xp // cfg.xp_per_level + 1
    return progress.model_copy(
        update={
            "level": level,
            "current_xp": total_xp % cfg.xp_per_level,
            "total_xp": total_xp,
            "badge": badge_for(level, cfg),
        }
    )


def update_streak(
    progress: UserProgress, today: date, config: Optional[GamificationConfig] = None
) -> Tuple[UserProgress, int]:
    """Advance the daily streak for activity on `today`.

    Returns:
        (updated progress, streak bonus XP). Activity the day after the last
        activity extends the streak; the same day leaves it unchanged; any
        longer gap (or no prior activity) restarts it at 1.
    """
    rules = (config or gamification_config).xp
    last = progress.last_activity_date

    if last is not None and (today - last).days == 0:
        return progress, 0

    if last is not None and (today - last).days == 1:
        streak = progress.streak + 1
        bonus = rules.streak_bonus if streak >= rules.streak_bonus_min_days else 0
    else:
        streak = 1
        bonus = 0

    updated = progress.model_copy(update={"streak": streak, "last_activity_date": today})
    return updated, bonus


def award(
    progress: UserProgress,
    total_questions: int,
    correct_answers: int,
    result_type: ResultType,
    today: date,
    config: Optional[GamificationConfig] = None,
) -> Tuple[UserProgress, int]:
    """Apply a finished activity to a user's progress.

    Returns:
        (updated progress, total XP earned including any streak bonus)
    """
    cfg = config or gamification_config
    xp = calculate_xp(total_questions, correct_answers, result_type, cfg)
    progress, bonus = update_streak(progress, today, cfg)
    earned = xp + bonus
    return level_for(progress, progress.total_xp + earned, cfg), earned
