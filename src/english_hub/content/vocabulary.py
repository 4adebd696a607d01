"""Vocabulary bank loaded from config/vocabulary.yaml."""

from functools import lru_cache
from pathlib import Path

import yaml

from english_hub.progression.word_memory import VocabQuestion


@lru_cache(maxsize=4)
def load_vocabulary(path: Path) -> dict[str, list[VocabQuestion]]:
    """Load vocabulary questions grouped by category."""
    if not path.exists():
        raise FileNotFoundError(f"Vocabulary file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return {
        category: [VocabQuestion(**item) for item in items or []]
        for category, items in data.get("categories", {}).items()
    }
