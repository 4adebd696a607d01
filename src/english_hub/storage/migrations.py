"""Versioned schema upgrades for the persisted progress blob.

Each step takes the raw decoded blob of version N and returns version N+1.
Steps only fill in or reshape fields and tolerate blobs that were already
partially upgraded, so re-running a step is harmless.
"""

from collections.abc import Callable
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from english_hub.models.progress import (
    CURRENT_SCHEMA_VERSION,
    ActivityLog,
    UserData,
    WordMemoryStatus,
)
from english_hub.models.reading import AnswerEvaluation, ReadingHistoryItem

logger = structlog.get_logger()

SCHEMA_VERSION_KEY = "schemaVersion"

_TOP_LEVEL_DEFAULTS: dict[str, Callable[[], Any]] = {
    "xp": lambda: 0,
    "loginStreak": lambda: 1,
    "goal": lambda: None,
    "badges": list,
    "logs": list,
    "preferences": dict,
    "wordMemory": dict,
    "readingHistory": list,
}


class UnsupportedSchemaError(ValueError):
    """The blob cannot be upgraded to the current schema."""


def _dedupe(badges: Any) -> list:
    # Badge ids form a set; keep first occurrences in saved order.
    return list(dict.fromkeys(b for b in _as_list(badges) if isinstance(b, str)))


def _v0_to_v1(raw: dict) -> dict:
    for key, default in _TOP_LEVEL_DEFAULTS.items():
        if key not in raw or (raw[key] is None and key != "goal"):
            raw[key] = default()
    raw["badges"] = _dedupe(raw["badges"])
    return raw


def _v1_to_v2(raw: dict) -> dict:
    raw.setdefault("dailyMission", None)
    if raw.get("lastMissionDate") is None:
        # Null missions are rotated on load, so any date works here.
        raw.pop("lastMissionDate", None)
        if raw.get("lastLogin") is not None:
            raw["lastMissionDate"] = raw["lastLogin"]
    return raw


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _upgrade_reading_item(item: Any) -> Any:
    if not isinstance(item, dict):
        return item
    content = item.get("content")
    if isinstance(content, dict) and "openQuestions" not in content:
        content["openQuestions"] = _as_list(content.pop("openQuestion", None))
    if "userOpenAnswers" not in item:
        item["userOpenAnswers"] = _as_list(item.pop("userOpenAnswer", None))
    if "evaluations" not in item:
        item["evaluations"] = _as_list(item.pop("evaluation", None))
    return item


def _upgrade_reading_log(log: Any) -> Any:
    if not isinstance(log, dict) or log.get("type") != "reading":
        return log
    details = log.get("details")
    if isinstance(details, dict) and "openAnswerCorrect" in details:
        correct = details.pop("openAnswerCorrect")
        details.setdefault("openCorrect", 1 if correct else 0)
        details.setdefault("openTotal", 1)
    return log


def _v2_to_v3(raw: dict) -> dict:
    history = _as_list(raw.get("readingHistory"))
    raw["readingHistory"] = [_upgrade_reading_item(i) for i in history]
    raw["logs"] = [_upgrade_reading_log(log) for log in _as_list(raw.get("logs"))]
    return raw


UPGRADES: dict[int, Callable[[dict], dict]] = {
    0: _v0_to_v1,
    1: _v1_to_v2,
    2: _v2_to_v3,
}


def schema_version(raw: dict) -> int:
    version = raw.get(SCHEMA_VERSION_KEY, 0)
    if not isinstance(version, int) or isinstance(version, bool) or version < 0:
        raise UnsupportedSchemaError(f"Invalid schema version: {version!r}")
    return version


def upgrade(raw: dict) -> dict:
    """Upgrade a decoded blob to CURRENT_SCHEMA_VERSION.

    Raises:
        UnsupportedSchemaError: The blob is not a mapping, or its version is
            newer than this code understands.
    """
    if not isinstance(raw, dict):
        raise UnsupportedSchemaError(f"Expected a JSON object, got {type(raw).__name__}")

    start = version = schema_version(raw)
    if version > CURRENT_SCHEMA_VERSION:
        raise UnsupportedSchemaError(
            f"Schema version {version} is newer than {CURRENT_SCHEMA_VERSION}"
        )

    while version < CURRENT_SCHEMA_VERSION:
        raw = UPGRADES[version](raw)
        version += 1
        raw[SCHEMA_VERSION_KEY] = version

    if start != version:
        logger.info("progress_schema_upgraded", from_version=start, to_version=version)
    return raw


# --- Salvage of upgraded blobs ---

_LOG_ADAPTER = TypeAdapter(ActivityLog)

# Top-level fields reset to their default when their saved value is invalid.
_RESETTABLE_FIELDS = (
    "level",
    "lastLogin",
    "loginStreak",
    "goal",
    "preferences",
    "dailyMission",
    "lastMissionDate",
)


def _validates(validate: Callable[[Any], Any], value: Any) -> bool:
    try:
        validate(value)
    except ValidationError:
        return False
    return True


def _field_validates(key: str, value: Any) -> bool:
    # Every UserData field has a default, so a one-key payload checks only that field.
    return _validates(UserData.model_validate, {key: value})


def _salvage_reading_item(item: Any) -> Any | None:
    if isinstance(item, dict) and isinstance(item.get("evaluations"), list):
        item["evaluations"] = [
            e if e is None or _validates(AnswerEvaluation.model_validate, e) else None
            for e in item["evaluations"]
        ]
    if _validates(ReadingHistoryItem.model_validate, item):
        return item
    return None


def _salvage_list(raw: dict, key: str, salvage_item: Callable[[Any], Any | None]) -> None:
    kept = []
    for item in _as_list(raw.get(key)):
        salvaged = salvage_item(item)
        if salvaged is None:
            logger.warning("progress_entry_dropped", field=key, entry=repr(item)[:120])
        else:
            kept.append(salvaged)
    raw[key] = kept


def salvage(raw: dict) -> dict:
    """Coerce an upgraded blob field by field so one bad value loses only itself.

    Invalid reading history entries and logs are dropped. Invalid top-level
    fields fall back to their defaults; for the daily mission that is None,
    which rotates on load.

    Raises:
        UnsupportedSchemaError: The XP total is unrecoverable.
    """
    if not _field_validates("xp", raw.get("xp", 0)):
        raise UnsupportedSchemaError(f"Unrecoverable xp value: {raw.get('xp')!r}")

    _salvage_list(raw, "readingHistory", _salvage_reading_item)
    _salvage_list(
        raw, "logs", lambda log: log if _validates(_LOG_ADAPTER.validate_python, log) else None
    )

    memory = raw.get("wordMemory")
    if not isinstance(memory, dict):
        memory = {}
    raw["wordMemory"] = {
        word: status
        for word, status in memory.items()
        if _validates(WordMemoryStatus.model_validate, status)
    }
    raw["badges"] = _dedupe(raw.get("badges"))

    for key in _RESETTABLE_FIELDS:
        if key in raw and not _field_validates(key, raw[key]):
            logger.warning("progress_field_reset", field=key, value=repr(raw[key])[:120])
            raw.pop(key)
    return raw
