"""Reading comprehension quiz content and reading history models."""

import re
from datetime import datetime
from enum import StrEnum
from typing import Annotated

from pydantic import BeforeValidator, Field

from english_hub.models.common import CamelModel, LocalDatetime


class Verdict(StrEnum):
    """Grading verdict for an open-ended answer."""

    CORRECT = "Correct"
    INCORRECT = "Incorrect"
    PARTIALLY_CORRECT = "Partially Correct"


def _normalize_verdict(value: object) -> object:
    # Accept "correct", "PartiallyCorrect", "partially_correct", ...
    if isinstance(value, str):
        key = re.sub(r"[\s_-]", "", value).lower()
        for verdict in Verdict:
            if verdict.value.replace(" ", "").lower() == key:
                return verdict
    return value


class AnswerEvaluation(CamelModel):
    verdict: Annotated[Verdict, BeforeValidator(_normalize_verdict)]
    explanation: str = ""

    @property
    def is_correct(self) -> bool:
        """Only a full 'Correct' verdict earns credit."""
        return self.verdict == Verdict.CORRECT


class ReadingMCQ(CamelModel):
    question: str
    options: list[str] = Field(min_length=2)
    correct_answer_index: int = Field(ge=0)


class ReadingOpenQuestion(CamelModel):
    question: str


class ReadingQuizContent(CamelModel):
    passage: str = Field(min_length=1)
    mcqs: list[ReadingMCQ] = Field(default_factory=list)
    open_questions: list[ReadingOpenQuestion] = Field(default_factory=list)


class ReadingHistoryItem(CamelModel):
    """Snapshot of a finished reading quiz with the learner's answers."""

    id: str
    date: LocalDatetime = Field(default_factory=datetime.now)
    topic: str = ""
    level: str = ""
    content: ReadingQuizContent
    user_mcq_answers: list[int | None] = Field(default_factory=list)
    user_open_answers: list[str] = Field(default_factory=list)
    evaluations: list[AnswerEvaluation | None] = Field(default_factory=list)
