"""Tests for badge rule evaluation."""

from datetime import datetime

from english_hub.models.progress import (
    ReadingDetails,
    ReadingLog,
    UserData,
    VocabularyDetails,
    VocabularyLog,
    WritingDetails,
    WritingLog,
)
from english_hub.progression.badges import evaluate_badges, grant_badges
from english_hub.progression.catalog import BADGES, BADGES_BY_ID

NOW = datetime(2026, 3, 10, 12)


def vocab(score: int, total: int = 10) -> VocabularyLog:
    return VocabularyLog(
        id=f"v-{score}-{total}", date=NOW, xp=score * 15,
        details=VocabularyDetails(score=score, total=total),
    )


def reading(mcq_score=1, mcq_total=2, open_correct=0, open_total=1) -> ReadingLog:
    return ReadingLog(
        id="r", date=NOW, xp=20,
        details=ReadingDetails(
            mcq_score=mcq_score, mcq_total=mcq_total,
            open_correct=open_correct, open_total=open_total,
        ),
    )


def writing() -> WritingLog:
    return WritingLog(id="w", date=NOW, xp=75, details=WritingDetails(topic="t", word_count=40))


def names(*ids: str) -> list[str]:
    return [BADGES_BY_ID[i].name for i in ids]


class TestEvaluateBadges:
    def test_fresh_user_earns_nothing(self):
        assert evaluate_badges(UserData()) == []

    def test_first_vocabulary_round(self):
        data = UserData(logs=[vocab(10)], xp=150)
        assert evaluate_badges(data) == names("first_steps", "vocab_wiz_1", "sharp_shooter")

    def test_vocabulary_score_is_cumulative(self):
        unlocked = evaluate_badges(UserData(logs=[vocab(6), vocab(4)]))
        assert names("vocab_wiz_1")[0] in unlocked
        assert names("vocab_wiz_2")[0] not in unlocked
        data = UserData(logs=[vocab(9)] * 5 + [vocab(5)])
        assert names("vocab_wiz_2")[0] in evaluate_badges(data)

    def test_writing_badges(self):
        assert names("word_smith_1")[0] in evaluate_badges(UserData(logs=[writing()]))
        five = evaluate_badges(UserData(logs=[writing()] * 5))
        assert names("word_smith_2")[0] in five

    def test_reading_badges(self):
        two = evaluate_badges(UserData(logs=[reading()] * 2))
        assert names("bookworm_1")[0] not in two
        three = evaluate_badges(UserData(logs=[reading()] * 3))
        assert names("bookworm_1")[0] in three
        ten = evaluate_badges(UserData(logs=[reading()] * 10))
        assert names("bookworm_2")[0] in ten

    def test_streak_badges(self):
        assert evaluate_badges(UserData(login_streak=3)) == names("dedicated_learner")
        assert evaluate_badges(UserData(login_streak=7)) == names(
            "dedicated_learner", "committed_learner"
        )

    def test_level_badge(self):
        assert evaluate_badges(UserData(level=5, xp=4000)) == names("unstoppable")

    def test_polymath_needs_all_three_types(self):
        partial = evaluate_badges(UserData(logs=[vocab(1), writing()]))
        assert names("polymath")[0] not in partial
        full = evaluate_badges(UserData(logs=[vocab(1), writing(), reading()]))
        assert names("polymath")[0] in full

    def test_perfect_reading_counts_as_sharp_shooter(self):
        perfect = reading(mcq_score=2, mcq_total=2, open_correct=1, open_total=1)
        assert names("sharp_shooter")[0] in evaluate_badges(UserData(logs=[perfect]))

    def test_writing_and_empty_rounds_are_not_perfect(self):
        data = UserData(logs=[writing(), vocab(0, total=0), reading(2, 2, 0, 1)])
        assert names("sharp_shooter")[0] not in evaluate_badges(data)

    def test_owned_badges_are_skipped(self):
        data = UserData(logs=[vocab(10)], badges=["first_steps", "sharp_shooter"])
        assert evaluate_badges(data) == names("vocab_wiz_1")

    def test_results_follow_catalog_order(self):
        data = UserData(logs=[vocab(10), writing(), reading()], login_streak=7, level=5, xp=4000)
        unlocked = evaluate_badges(data)
        order = [b.name for b in BADGES]
        assert unlocked == sorted(unlocked, key=order.index)


class TestGrantBadges:
    def test_merges_ids_without_duplicates(self):
        data = UserData(badges=["first_steps"])
        updated = grant_badges(data, names("first_steps", "polymath"))
        assert updated.badges == ["first_steps", "polymath"]

    def test_badges_are_never_revoked(self):
        # A streak reset does not take the streak badge away.
        data = grant_badges(UserData(login_streak=3), names("dedicated_learner"))
        later = data.model_copy(update={"login_streak": 1})
        later = grant_badges(later, evaluate_badges(later))
        assert "dedicated_learner" in later.badges
