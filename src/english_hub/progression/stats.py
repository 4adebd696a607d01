"""Derived profile statistics and weekly goal tracking."""

from pydantic import BaseModel

from english_hub.models.plan import LearningPlan
from english_hub.models.progress import ActivityType, ReadingLog, UserData
from english_hub.progression.catalog import (
    READING_MCQ_CORRECT_XP,
    READING_OPEN_CORRECT_XP,
    VOCAB_CORRECT_XP,
    WRITING_SUBMIT_XP,
    XP_PER_LEVEL,
)
from english_hub.progression.word_memory import mastered_words

# XP a learner is expected to earn by following one suggestion of each type.
SUGGESTION_XP = {
    ActivityType.VOCABULARY: 10 * VOCAB_CORRECT_XP,
    ActivityType.READING: 2 * READING_MCQ_CORRECT_XP + READING_OPEN_CORRECT_XP,
    ActivityType.WRITING: WRITING_SUBMIT_XP,
}


class ProfileStats(BaseModel):
    level: int
    xp: int
    xp_in_level: int
    level_progress_percent: float
    words_mastered: int
    quizzes_completed: int
    essays_reviewed: int
    reading_accuracy: float | None
    goal_xp: int | None = None
    goal_progress_percent: float | None = None


def goal_xp(data: UserData) -> int | None:
    """XP earned since the current goal started, or None without a goal."""
    if data.goal is None:
        return None
    return sum(log.xp for log in data.logs if log.date >= data.goal.start_date)


def goal_progress_percent(data: UserData) -> float | None:
    earned = goal_xp(data)
    if earned is None:
        return None
    return min(earned / data.goal.target * 100, 100.0)


def profile_stats(data: UserData) -> ProfileStats:
    reading = [log for log in data.logs if isinstance(log, ReadingLog)]
    mcq_correct = sum(log.details.mcq_score for log in reading)
    mcq_total = sum(log.details.mcq_total for log in reading)
    xp_in_level = data.xp % XP_PER_LEVEL

    return ProfileStats(
        level=data.level,
        xp=data.xp,
        xp_in_level=xp_in_level,
        level_progress_percent=xp_in_level / XP_PER_LEVEL * 100,
        words_mastered=len(mastered_words(data)),
        quizzes_completed=sum(
            1 for log in data.logs
            if log.type in (ActivityType.VOCABULARY, ActivityType.READING)
        ),
        essays_reviewed=sum(1 for log in data.logs if log.type == ActivityType.WRITING),
        reading_accuracy=round(mcq_correct / mcq_total * 100, 1) if mcq_total else None,
        goal_xp=goal_xp(data),
        goal_progress_percent=goal_progress_percent(data),
    )


def recommended_weekly_xp(plan: LearningPlan) -> int:
    """Weekly XP target implied by following every suggestion of a plan once."""
    return sum(SUGGESTION_XP.get(s.type, 0) for s in plan.suggestions)
