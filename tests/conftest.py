"""Shared fixtures: controllable clock, deterministic mission picks, stores."""

import random
from datetime import datetime, timedelta

import pytest

from english_hub.models.progress import MissionType
from english_hub.storage.blob import MemoryBlobStore
from english_hub.storage.progress_store import ProgressStore


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class MissionPicker(random.Random):
    """Random source whose choice() always returns the template of one mission type."""

    def __init__(self, mission_type: MissionType, seed: int = 0):
        super().__init__(seed)
        self.mission_type = mission_type

    def choice(self, seq):
        for item in seq:
            if getattr(item, "type", None) == self.mission_type:
                return item
        return super().choice(seq)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 10, 9, 30))


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


@pytest.fixture
def make_store(blob_store, clock):
    def _make(mission_type: MissionType = MissionType.VOCAB_CORRECT, store=None):
        return ProgressStore(
            store if store is not None else blob_store,
            clock=clock,
            rng=MissionPicker(mission_type),
        )

    return _make
