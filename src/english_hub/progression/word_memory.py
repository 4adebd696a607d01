"""Per-word exposure tracking and quiz queue selection."""

import random
from enum import StrEnum

from pydantic import BaseModel, Field

from english_hub.models.progress import MemoryState, UserData, WordMemoryStatus
from english_hub.progression.catalog import QUIZ_LENGTH

MASTERY_THRESHOLD = 3


class VocabQuestion(BaseModel):
    word: str
    correct_answer: str
    options: list[str] = Field(min_length=2)


class SessionType(StrEnum):
    LEARNING = "learning"
    REVIEW = "review"


class QuizQueue(BaseModel):
    session_type: SessionType
    questions: list[VocabQuestion]


def next_word_status(current: WordMemoryStatus | None, is_correct: bool) -> WordMemoryStatus:
    """Advance one word's status after an answer.

    Any incorrect answer resets the word to learning with a zero run.
    """
    if not is_correct:
        return WordMemoryStatus(status=MemoryState.LEARNING, consecutive_correct=0)

    current = current or WordMemoryStatus()
    count = current.consecutive_correct + 1
    if count >= MASTERY_THRESHOLD:
        return WordMemoryStatus(status=MemoryState.MASTERED, consecutive_correct=count)
    return WordMemoryStatus(status=current.status, consecutive_correct=count)


def update_word_memory(data: UserData, word: str, is_correct: bool) -> UserData:
    status = next_word_status(data.word_memory.get(word), is_correct)
    return data.model_copy(update={"word_memory": {**data.word_memory, word: status}})


def mastered_words(data: UserData) -> list[str]:
    return [
        word
        for word, status in data.word_memory.items()
        if status.status == MemoryState.MASTERED
    ]


def _shuffled(items: list[VocabQuestion], rng: random.Random) -> list[VocabQuestion]:
    items = list(items)
    rng.shuffle(items)
    return items


def build_quiz_queue(
    data: UserData,
    words: list[VocabQuestion],
    rng: random.Random,
    length: int = QUIZ_LENGTH,
) -> QuizQueue:
    """Choose the questions for one vocabulary round.

    Words still being learned come first, topped up with mastered words.
    When every word is mastered the round becomes a review session.
    """
    mastered = set(mastered_words(data))
    learning = [q for q in words if q.word not in mastered]
    review = [q for q in words if q.word in mastered]

    if learning:
        queue = _shuffled(learning, rng)
        if len(queue) < length:
            queue.extend(_shuffled(review, rng)[: length - len(queue)])
        return QuizQueue(session_type=SessionType.LEARNING, questions=queue[:length])
    if review:
        return QuizQueue(session_type=SessionType.REVIEW, questions=_shuffled(review, rng)[:length])
    return QuizQueue(session_type=SessionType.LEARNING, questions=[])
