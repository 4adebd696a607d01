"""Daily mission lifecycle: rotation, progress accrual and completion bonus."""

import random
from dataclasses import dataclass
from datetime import datetime

import structlog

from english_hub.models.progress import (
    ActivityType,
    DailyMission,
    MissionType,
    ReadingLog,
    UserData,
    VocabularyLog,
    WritingLog,
)
from english_hub.progression.calendar import is_same_calendar_day
from english_hub.progression.catalog import DAILY_MISSION_BONUS_XP, MISSION_TEMPLATES
from english_hub.progression.reducer import add_bonus_xp

logger = structlog.get_logger()


def generate_mission(rng: random.Random) -> DailyMission:
    """Pick a mission template uniformly at random. New missions start pending."""
    template = rng.choice(MISSION_TEMPLATES)
    return DailyMission(
        type=template.type,
        target=template.target,
        progress=0,
        completed=False,
        description=template.description,
    )


def rotate_mission(data: UserData, now: datetime, rng: random.Random) -> UserData:
    """Replace the mission when it is missing or was generated on another day."""
    if data.daily_mission is not None and is_same_calendar_day(data.last_mission_date, now):
        return data

    mission = generate_mission(rng)
    logger.info("daily_mission_rotated", mission_type=mission.type, target=mission.target)
    return data.model_copy(update={"daily_mission": mission, "last_mission_date": now})


def mission_increment(
    mission: DailyMission, log: VocabularyLog | ReadingLog | WritingLog
) -> int:
    """How far one activity moves a mission, based on its pre-bonus XP."""
    if mission.type == MissionType.EARN_XP:
        return log.xp
    if mission.type == MissionType.VOCAB_CORRECT:
        return log.details.score if log.type == ActivityType.VOCABULARY else 0
    if mission.type == MissionType.COMPLETE_READING:
        return 1 if log.type == ActivityType.READING else 0
    return 0


@dataclass(frozen=True)
class MissionOutcome:
    data: UserData
    bonus_xp: int = 0

    @property
    def completed_now(self) -> bool:
        return self.bonus_xp > 0


def accrue_mission(
    data: UserData, log: VocabularyLog | ReadingLog | WritingLog
) -> MissionOutcome:
    """Advance the daily mission for one activity.

    A completed mission is frozen: its progress no longer moves and the
    bonus is never awarded a second time.
    """
    mission = data.daily_mission
    if mission is None or mission.completed:
        return MissionOutcome(data)

    increment = mission_increment(mission, log)
    if increment <= 0:
        return MissionOutcome(data)

    progress = mission.progress + increment
    if progress < mission.target:
        updated = mission.model_copy(update={"progress": progress})
        return MissionOutcome(data.model_copy(update={"daily_mission": updated}))

    updated = mission.model_copy(update={"progress": progress, "completed": True})
    data = data.model_copy(update={"daily_mission": updated})
    data = add_bonus_xp(data, DAILY_MISSION_BONUS_XP)
    logger.info(
        "daily_mission_completed",
        mission_type=mission.type,
        bonus_xp=DAILY_MISSION_BONUS_XP,
    )
    return MissionOutcome(data, bonus_xp=DAILY_MISSION_BONUS_XP)
