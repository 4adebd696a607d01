"""Progress store: owns the UserData snapshot, runs the progression pipeline
and persists after every mutation."""

import json
import random
import threading
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime

import structlog
from pydantic import ValidationError

from english_hub.models.progress import (
    Preferences,
    ProgressResult,
    ReadingEvent,
    UserData,
    UserGoal,
    VocabularyEvent,
    WritingEvent,
    stamp_event,
)
from english_hub.models.reading import ReadingHistoryItem
from english_hub.progression.badges import evaluate_badges, grant_badges
from english_hub.progression.calendar import is_same_calendar_day, update_login_streak
from english_hub.progression.catalog import level_for_xp
from english_hub.progression.missions import accrue_mission, generate_mission, rotate_mission
from english_hub.progression.reducer import apply_activity
from english_hub.progression.word_memory import update_word_memory
from english_hub.storage.blob import BlobStore
from english_hub.storage.migrations import UnsupportedSchemaError, salvage, upgrade

logger = structlog.get_logger()

DEFAULT_STORAGE_KEY = "english-hub-user"


class ProgressStore:
    """Single owner of a learner's progress.

    Construct once at application start, call `load()`, then hand the
    instance to whatever records activity. Mutators are serialized by one
    lock so concurrent requests cannot clobber each other's increments.

    Args:
        blob_store: Key-value store the aggregate is persisted to.
        key: Blob key holding the serialized aggregate.
        clock: Source of the current local time.
        rng: Random source for mission selection.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ):
        self.blob_store = blob_store
        self.key = key
        self.clock = clock
        self.rng = rng or random.Random()
        self._lock = threading.Lock()
        self._data: UserData | None = None

    @property
    def snapshot(self) -> UserData:
        with self._lock:
            return self._current()

    def default_data(self) -> UserData:
        now = self.clock()
        return UserData(
            last_login=now,
            last_mission_date=now,
            daily_mission=generate_mission(self.rng),
        )

    # --- Loading ---

    def _read(self) -> tuple[UserData | None, bool]:
        """Return the saved aggregate and whether the saved blob may be overwritten."""
        try:
            blob = self.blob_store.get(self.key)
        except OSError:
            logger.warning("progress_read_failed", key=self.key, exc_info=True)
            return None, False
        if blob is None:
            return None, True

        try:
            raw = salvage(upgrade(json.loads(blob)))
            data = UserData.model_validate(raw)
        except (json.JSONDecodeError, UnsupportedSchemaError, ValidationError) as e:
            logger.warning("progress_blob_unreadable", key=self.key, error=str(e))
            self._back_up(blob)
            return None, False
        return data, True

    def _back_up(self, blob: str) -> None:
        backup_key = f"{self.key}.unreadable"
        try:
            self.blob_store.set(backup_key, blob)
        except OSError:
            logger.exception("progress_backup_failed", key=backup_key)
            return
        logger.warning("progress_blob_backed_up", key=backup_key)

    def _start_day(self, data: UserData, now: datetime) -> UserData:
        data = update_login_streak(data, now)
        return rotate_mission(data, now, self.rng)

    def _load_unlocked(self) -> tuple[UserData, bool]:
        now = self.clock()
        data, writable = self._read()
        if data is None:
            logger.info("progress_defaults_used", key=self.key)
            return self.default_data(), writable

        data = data.model_copy(update={"level": level_for_xp(data.xp)})
        return self._start_day(data, now), True

    def load(self) -> UserData:
        """Read, migrate and return the persisted aggregate.

        A missing or unreadable blob starts a fresh learner. An unreadable
        blob is copied to `<key>.unreadable` and left in place until the
        next mutation. Loading also updates the login streak and rotates a
        stale daily mission.
        """
        with self._lock:
            data, writable = self._load_unlocked()
            if writable:
                self._commit(data)
            else:
                self._data = data
            return data

    # --- Persistence ---

    def _commit(self, data: UserData) -> None:
        self._data = data
        try:
            self.blob_store.set(self.key, data.to_blob())
        except OSError:
            # In-memory state stays authoritative for the session.
            logger.exception("progress_persist_failed", key=self.key)

    def _current(self) -> UserData:
        # Callers hold the lock.
        if self._data is None:
            self._data, _ = self._load_unlocked()
        data = self._data
        now = self.clock()
        if not (
            is_same_calendar_day(data.last_login, now)
            and is_same_calendar_day(data.last_mission_date, now)
        ):
            # The process outlived the day it loaded on.
            self._commit(self._start_day(data, now))
        return self._data

    def _mutate(self, fn: Callable[[UserData], UserData]) -> UserData:
        with self._lock:
            data = fn(self._current())
            self._commit(data)
            return data

    # --- Mutators ---

    def record_activity(
        self, event: VocabularyEvent | ReadingEvent | WritingEvent
    ) -> ProgressResult:
        """Fold one activity into the aggregate and persist it.

        Runs the reducer, mission accrual, level recompute and badge
        evaluation in that order so every step sees the post-bonus XP.
        """
        with self._lock:
            before = self._current()
            log = stamp_event(event, log_id=str(uuid.uuid4()), date=self.clock())

            data = apply_activity(before, log)
            outcome = accrue_mission(data, log)
            data = outcome.data
            data = data.model_copy(update={"level": level_for_xp(data.xp)})
            unlocked = evaluate_badges(data)
            data = grant_badges(data, unlocked)

            self._commit(data)

        result = ProgressResult(
            xp_earned=log.xp + outcome.bonus_xp,
            unlocked_badges=unlocked,
            leveled_up=data.level > before.level,
            new_level=data.level,
            mission_completed=outcome.completed_now,
        )
        logger.info(
            "activity_recorded",
            activity_type=log.type,
            xp_earned=result.xp_earned,
            level=result.new_level,
            leveled_up=result.leveled_up,
        )
        if unlocked:
            logger.info("badges_unlocked", badges=unlocked)
        return result

    def set_goal(self, goal: UserGoal | None) -> UserData:
        return self._mutate(lambda d: d.model_copy(update={"goal": goal}))

    def update_preferences(self, changes: dict[str, str]) -> UserData:
        """Merge a partial preferences update (snake_case or camelCase keys)."""
        def apply(d: UserData) -> UserData:
            merged = Preferences.model_validate({**d.preferences.model_dump(), **changes})
            return d.model_copy(update={"preferences": merged})

        return self._mutate(apply)

    def update_word_memory(self, word: str, is_correct: bool) -> UserData:
        return self._mutate(lambda d: update_word_memory(d, word, is_correct))

    def record_word_answers(self, answers: Iterable[tuple[str, bool]]) -> UserData:
        answers = list(answers)

        def apply(d: UserData) -> UserData:
            for word, is_correct in answers:
                d = update_word_memory(d, word, is_correct)
            return d

        return self._mutate(apply)

    def append_reading_history(self, item: ReadingHistoryItem) -> UserData:
        """Reading history is kept newest first."""
        return self._mutate(
            lambda d: d.model_copy(update={"reading_history": [item, *d.reading_history]})
        )

