"""Tests for XP, level, badge and streak rules."""

from datetime import date

from satprep.core.config import GamificationConfig, XPRules
from satprep.domain.models.progress import ResultType, UserProgress
from satprep.services import gamification

TODAY = date(2026, 3, 10)


def progress(**kwargs) -> UserProgress:
    return UserProgress(user_id="user-1", **kwargs)


# ============ XP ============


def test_xp_for_practice_set():
    # 10 answered * 10 + 7 correct * 5 + 50
    assert gamification.calculate_xp(10, 7, ResultType.SECTIONAL) == 185


def test_xp_for_daily_challenge_uses_practice_bonus():
    assert gamification.calculate_xp(5, 5, ResultType.DAILY) == 50 + 25 + 50


def test_xp_for_full_test():
    # 98 answered * 10 + 60 correct * 5 + 100
    assert gamification.calculate_xp(98, 60, ResultType.FULL) == 1380


def test_xp_rules_come_from_config():
    config = GamificationConfig(xp=XPRules(answered_question=1, correct_answer_bonus=0))
    assert gamification.calculate_xp(10, 10, ResultType.SECTIONAL, config) == 60


# ============ LEVELS AND BADGES ============


def test_level_from_total_xp():
    updated = gamification.level_for(progress(), 1250)
    assert updated.level == 3
    assert updated.current_xp == 250
    assert updated.total_xp == 1250
    assert updated.badge == "SAT Explorer"


def test_level_boundary():
    assert gamification.level_for(progress(), 499).level == 1
    assert gamification.level_for(progress(), 500).level == 2


def test_badges_by_level():
    assert gamification.badge_for(1) == "SAT Rookie"
    assert gamification.badge_for(2) == "SAT Rookie"
    assert gamification.badge_for(5) == "SAT Warrior"
    assert gamification.badge_for(11) == "SAT Master"
    assert gamification.badge_for(12) == "SAT Legend"
    assert gamification.badge_for(40) == "SAT Champion"


# ============ STREAKS ============


def test_first_activity_starts_streak():
    updated, bonus = gamification.update_streak(progress(), TODAY)
    assert updated.streak == 1
    assert updated.last_activity_date == TODAY
    assert bonus == 0


def test_same_day_keeps_streak():
    current = progress(streak=4, last_activity_date=TODAY)
    updated, bonus = gamification.update_streak(current, TODAY)
    assert updated.streak == 4
    assert bonus == 0


def test_next_day_extends_streak():
    current = progress(streak=1, last_activity_date=date(2026, 3, 9))
    updated, bonus = gamification.update_streak(current, TODAY)
    assert updated.streak == 2
    assert bonus == 0


def test_streak_bonus_from_three_days():
    current = progress(streak=2, last_activity_date=date(2026, 3, 9))
    updated, bonus = gamification.update_streak(current, TODAY)
    assert updated.streak == 3
    assert bonus == 25


def test_gap_resets_streak():
    current = progress(streak=6, last_activity_date=date(2026, 3, 7))
    updated, bonus = gamification.update_streak(current, TODAY)
    assert updated.streak == 1
    assert bonus == 0


# ============ AWARD ============


def test_award_combines_xp_streak_and_level():
    current = progress(
        total_xp=400, current_xp=400, streak=2, last_activity_date=date(2026, 3, 9)
    )
    updated, earned = gamification.award(current, 10, 7, ResultType.SECTIONAL, TODAY)

    assert earned == 185 + 25
    assert updated.total_xp == 610
    assert updated.level == 2
    assert updated.current_xp == 110
    assert updated.streak == 3


def test_award_does_not_mutate_input():
    current = progress()
    gamification.award(current, 10, 10, ResultType.DAILY, TODAY)
    assert current.total_xp == 0
    assert current.streak == 0
