"""Build activity events from finished learning rounds."""

from english_hub.models.progress import (
    ReadingDetails,
    ReadingEvent,
    VocabularyDetails,
    VocabularyEvent,
    WritingDetails,
    WritingEvent,
)
from english_hub.models.reading import AnswerEvaluation, ReadingMCQ
from english_hub.progression.catalog import (
    READING_MCQ_CORRECT_XP,
    READING_OPEN_CORRECT_XP,
    VOCAB_CORRECT_XP,
    WRITING_SUBMIT_XP,
)


def vocabulary_event(category: str, score: int, total: int) -> VocabularyEvent:
    if not 0 <= score <= total:
        raise ValueError(f"score {score} out of range for {total} questions")
    return VocabularyEvent(
        xp=score * VOCAB_CORRECT_XP,
        details=VocabularyDetails(category=category, score=score, total=total),
    )


def reading_event(
    topic: str,
    level: str,
    mcqs: list[ReadingMCQ],
    mcq_answers: list[int | None],
    evaluations: list[AnswerEvaluation | None],
) -> ReadingEvent:
    """Score a reading quiz. Unanswered questions and ungraded answers earn nothing."""
    mcq_score = sum(
        1
        for mcq, answer in zip(mcqs, mcq_answers)
        if answer is not None and answer == mcq.correct_answer_index
    )
    open_correct = sum(1 for e in evaluations if e is not None and e.is_correct)
    return ReadingEvent(
        xp=mcq_score * READING_MCQ_CORRECT_XP + open_correct * READING_OPEN_CORRECT_XP,
        details=ReadingDetails(
            topic=topic,
            level=level,
            mcq_score=mcq_score,
            mcq_total=len(mcqs),
            open_correct=open_correct,
            open_total=len(evaluations),
        ),
    )


def writing_event(topic: str, essay: str) -> WritingEvent:
    words = essay.split()
    if not words:
        raise ValueError("essay is empty")
    return WritingEvent(
        xp=WRITING_SUBMIT_XP,
        details=WritingDetails(topic=topic, word_count=len(words)),
    )
