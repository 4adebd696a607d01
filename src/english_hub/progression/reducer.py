"""Pure activity reducer: folds one activity log into the aggregate."""

from english_hub.models.progress import ReadingLog, UserData, VocabularyLog, WritingLog
from english_hub.progression.catalog import level_for_xp


def apply_activity(
    data: UserData, log: VocabularyLog | ReadingLog | WritingLog
) -> UserData:
    """Add the log's XP, append it to history and recompute the level.

    No other field changes, and `log.details` is stored untouched.
    """
    xp = data.xp + log.xp
    return data.model_copy(
        update={
            "xp": xp,
            "level": level_for_xp(xp),
            "logs": [*data.logs, log],
        }
    )


def add_bonus_xp(data: UserData, amount: int) -> UserData:
    xp = data.xp + amount
    return data.model_copy(update={"xp": xp, "level": level_for_xp(xp)})
