"""Badge rule evaluation over the aggregate state."""

from collections.abc import Callable

from english_hub.models.progress import (
    ActivityType,
    ReadingLog,
    UserData,
    VocabularyLog,
)
from english_hub.progression.catalog import BADGES


def _count(data: UserData, activity_type: ActivityType) -> int:
    return sum(1 for log in data.logs if log.type == activity_type)


def _vocabulary_score(data: UserData) -> int:
    return sum(log.details.score for log in data.logs if isinstance(log, VocabularyLog))


def _is_perfect(log) -> bool:
    if isinstance(log, VocabularyLog):
        return log.details.total > 0 and log.details.score == log.details.total
    if isinstance(log, ReadingLog):
        d = log.details
        total = d.mcq_total + d.open_total
        return total > 0 and d.mcq_score + d.open_correct == total
    return False


def _all_types_seen(data: UserData) -> bool:
    return {log.type for log in data.logs} >= set(ActivityType)


BADGE_RULES: dict[str, Callable[[UserData], bool]] = {
    "first_steps": lambda d: len(d.logs) > 0,
    "vocab_wiz_1": lambda d: _vocabulary_score(d) >= 10,
    "vocab_wiz_2": lambda d: _vocabulary_score(d) >= 50,
    "word_smith_1": lambda d: _count(d, ActivityType.WRITING) >= 1,
    "word_smith_2": lambda d: _count(d, ActivityType.WRITING) >= 5,
    "bookworm_1": lambda d: _count(d, ActivityType.READING) >= 3,
    "bookworm_2": lambda d: _count(d, ActivityType.READING) >= 10,
    "dedicated_learner": lambda d: d.login_streak >= 3,
    "committed_learner": lambda d: d.login_streak >= 7,
    "sharp_shooter": lambda d: any(_is_perfect(log) for log in d.logs),
    "polymath": _all_types_seen,
    "unstoppable": lambda d: d.level >= 5,
}


def evaluate_badges(data: UserData) -> list[str]:
    """Names of badges newly satisfied by `data`, in catalog order.

    Owned badges are skipped, so a badge is never re-reported or revoked.
    """
    owned = set(data.badges)
    unlocked = []
    for badge in BADGES:
        if badge.id in owned:
            continue
        rule = BADGE_RULES.get(badge.id)
        if rule is not None and rule(data):
            unlocked.append(badge.name)
    return unlocked


def grant_badges(data: UserData, names: list[str]) -> UserData:
    """Merge the ids of the named badges into `data.badges` without duplicates."""
    if not names:
        return data
    ids = [badge.id for badge in BADGES if badge.name in names]
    merged = list(dict.fromkeys([*data.badges, *ids]))
    return data.model_copy(update={"badges": merged})
