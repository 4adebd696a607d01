"""User progress models: the persisted aggregate and the activity event surface."""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import ConfigDict, Field

from english_hub.models.common import CamelModel, LocalDatetime
from english_hub.models.reading import ReadingHistoryItem

CURRENT_SCHEMA_VERSION = 3


class ActivityType(StrEnum):
    VOCABULARY = "vocabulary"
    READING = "reading"
    WRITING = "writing"


class MissionType(StrEnum):
    VOCAB_CORRECT = "vocab_correct"
    EARN_XP = "earn_xp"
    COMPLETE_READING = "complete_reading"


class MemoryState(StrEnum):
    LEARNING = "learning"
    MASTERED = "mastered"


# --- Activity details (one variant per activity type) ---

class VocabularyDetails(CamelModel):
    category: str = ""
    score: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)


class ReadingDetails(CamelModel):
    topic: str = ""
    level: str = ""
    mcq_score: int = Field(default=0, ge=0)
    mcq_total: int = Field(default=0, ge=0)
    open_correct: int = Field(default=0, ge=0)
    open_total: int = Field(default=0, ge=0)


class WritingDetails(CamelModel):
    topic: str = ""
    word_count: int = Field(default=0, ge=0)


# --- Activity events (input contract) ---

class VocabularyEvent(CamelModel):
    type: Literal["vocabulary"] = "vocabulary"
    xp: int = Field(ge=0)
    details: VocabularyDetails = Field(default_factory=VocabularyDetails)


class ReadingEvent(CamelModel):
    type: Literal["reading"] = "reading"
    xp: int = Field(ge=0)
    details: ReadingDetails = Field(default_factory=ReadingDetails)


class WritingEvent(CamelModel):
    type: Literal["writing"] = "writing"
    xp: int = Field(ge=0)
    details: WritingDetails = Field(default_factory=WritingDetails)


ActivityEvent = Annotated[
    VocabularyEvent | ReadingEvent | WritingEvent,
    Field(discriminator="type"),
]


# --- Activity logs (persisted, immutable once appended) ---

class VocabularyLog(VocabularyEvent):
    model_config = ConfigDict(frozen=True)

    id: str
    date: LocalDatetime


class ReadingLog(ReadingEvent):
    model_config = ConfigDict(frozen=True)

    id: str
    date: LocalDatetime


class WritingLog(WritingEvent):
    model_config = ConfigDict(frozen=True)

    id: str
    date: LocalDatetime


ActivityLog = Annotated[
    VocabularyLog | ReadingLog | WritingLog,
    Field(discriminator="type"),
]

_LOG_TYPES: dict[ActivityType, type] = {
    ActivityType.VOCABULARY: VocabularyLog,
    ActivityType.READING: ReadingLog,
    ActivityType.WRITING: WritingLog,
}


def stamp_event(
    event: VocabularyEvent | ReadingEvent | WritingEvent,
    log_id: str,
    date: datetime,
) -> VocabularyLog | ReadingLog | WritingLog:
    """Turn an activity event into a log entry with an id and date."""
    log_cls = _LOG_TYPES[event.type]
    return log_cls(id=log_id, date=date, xp=event.xp, details=event.details)


# --- Aggregate ---

class UserGoal(CamelModel):
    type: Literal["xp"] = "xp"
    target: int = Field(gt=0)
    timeframe: Literal["weekly"] = "weekly"
    start_date: LocalDatetime


class Preferences(CamelModel):
    level: str = "Intermediate"
    learning_goal: str = "General English Improvement"


class WordMemoryStatus(CamelModel):
    model_config = ConfigDict(frozen=True)

    status: MemoryState = MemoryState.LEARNING
    consecutive_correct: int = Field(default=0, ge=0)


class DailyMission(CamelModel):
    model_config = ConfigDict(frozen=True)

    type: MissionType
    target: int = Field(gt=0)
    progress: int = Field(default=0, ge=0)
    completed: bool = False
    description: str = ""


class UserData(CamelModel):
    """The sole persisted aggregate of a learner's progress."""

    model_config = ConfigDict(frozen=True)

    schema_version: int = CURRENT_SCHEMA_VERSION
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    last_login: LocalDatetime = Field(default_factory=datetime.now)
    login_streak: int = Field(default=1, ge=1)
    goal: UserGoal | None = None
    badges: list[str] = Field(default_factory=list)
    logs: list[ActivityLog] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    word_memory: dict[str, WordMemoryStatus] = Field(default_factory=dict)
    reading_history: list[ReadingHistoryItem] = Field(default_factory=list)
    daily_mission: DailyMission | None = None
    last_mission_date: LocalDatetime = Field(default_factory=datetime.now)

    def to_blob(self) -> str:
        """Serialize to the JSON blob persisted by the progress store."""
        return self.model_dump_json(by_alias=True)


class ProgressResult(CamelModel):
    """Summary of one recorded activity, returned for UI feedback."""

    xp_earned: int
    unlocked_badges: list[str] = Field(default_factory=list)
    leveled_up: bool = False
    new_level: int
    mission_completed: bool = False
