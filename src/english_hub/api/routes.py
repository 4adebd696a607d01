"""REST API routes for progress tracking and content generation."""

import asyncio
import uuid
from collections.abc import Awaitable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import Field

from english_hub.api.dependencies import (
    get_content_generator,
    get_progress_store,
    get_vocabulary,
)
from english_hub.content.generator import ContentGenerator
from english_hub.content.parsing import GenerationError
from english_hub.models.common import CamelModel
from english_hub.models.progress import ReadingEvent, UserGoal, VocabularyEvent, WritingEvent
from english_hub.models.reading import (
    AnswerEvaluation,
    ReadingHistoryItem,
    ReadingQuizContent,
)
from english_hub.progression.activities import reading_event, vocabulary_event, writing_event
from english_hub.progression.calendar import activity_calendar
from english_hub.progression.catalog import BADGES
from english_hub.progression.stats import profile_stats, recommended_weekly_xp
from english_hub.progression.word_memory import VocabQuestion, build_quiz_queue
from english_hub.storage.progress_store import ProgressStore

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

T = TypeVar("T")


# --- Request bodies ---

class WordAnswer(CamelModel):
    word: str = Field(min_length=1)
    is_correct: bool


class VocabularyRound(CamelModel):
    category: str
    answers: list[WordAnswer] = Field(min_length=1)


class ReadingSubmission(CamelModel):
    topic: str
    level: str
    content: ReadingQuizContent
    mcq_answers: list[int | None] = Field(default_factory=list)
    open_answers: list[str] = Field(default_factory=list)


class WritingSubmission(CamelModel):
    topic: str
    essay: str = Field(min_length=1)


class QuizRequest(CamelModel):
    topic: str = Field(min_length=1)
    level: str = "Intermediate (B1)"


class GradeRequest(CamelModel):
    passage: str
    question: str
    answer: str


class PreferencesUpdate(CamelModel):
    level: str | None = None
    learning_goal: str | None = None


async def _generated(awaitable: Awaitable[T]) -> T:
    """Await a generation call, mapping failures to a retryable 502."""
    try:
        return await awaitable
    except GenerationError as e:
        logger.warning("generation_request_failed", error=str(e))
        raise HTTPException(
            status_code=502, detail="Content generation failed, please try again"
        ) from e


# --- Progress ---

@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/progress")
def get_progress(store: ProgressStore = Depends(get_progress_store)) -> dict:
    return store.snapshot.model_dump(mode="json", by_alias=True)


@router.get("/progress/stats")
def get_stats(store: ProgressStore = Depends(get_progress_store)) -> dict:
    return profile_stats(store.snapshot).model_dump(mode="json")


@router.get("/progress/calendar")
def get_calendar(store: ProgressStore = Depends(get_progress_store)) -> list[dict]:
    days = activity_calendar(store.snapshot, store.clock())
    return [d.model_dump(mode="json") for d in days]


@router.get("/badges")
def list_badges(store: ProgressStore = Depends(get_progress_store)) -> list[dict]:
    owned = set(store.snapshot.badges)
    return [{**badge.model_dump(), "unlocked": badge.id in owned} for badge in BADGES]


@router.post("/activities")
def record_activity(
    event: VocabularyEvent | ReadingEvent | WritingEvent,
    store: ProgressStore = Depends(get_progress_store),
) -> dict:
    return store.record_activity(event).model_dump(by_alias=True)


@router.post("/activities/vocabulary")
def record_vocabulary_round(
    round_: VocabularyRound, store: ProgressStore = Depends(get_progress_store)
) -> dict:
    """Record every answer of a vocabulary round, then the round itself."""
    store.record_word_answers((a.word, a.is_correct) for a in round_.answers)
    score = sum(1 for a in round_.answers if a.is_correct)
    event = vocabulary_event(round_.category, score, len(round_.answers))
    return store.record_activity(event).model_dump(by_alias=True)


@router.post("/activities/reading")
async def submit_reading_quiz(
    submission: ReadingSubmission,
    store: ProgressStore = Depends(get_progress_store),
    generator: ContentGenerator = Depends(get_content_generator),
) -> dict:
    """Grade open answers, then record the quiz and save it to history.

    Progress is only touched after every grading call succeeded.
    """
    questions = submission.content.open_questions
    answers = submission.open_answers + [""] * (len(questions) - len(submission.open_answers))

    async def grade(question: str, answer: str) -> AnswerEvaluation | None:
        if not answer.strip():
            return None
        return await generator.evaluate_open_answer(
            submission.content.passage, question, answer
        )

    evaluations = await _generated(
        asyncio.gather(*(grade(q.question, a) for q, a in zip(questions, answers)))
    )

    event = reading_event(
        topic=submission.topic,
        level=submission.level,
        mcqs=submission.content.mcqs,
        mcq_answers=submission.mcq_answers,
        evaluations=evaluations,
    )
    result = await run_in_threadpool(store.record_activity, event)
    item = ReadingHistoryItem(
        id=str(uuid.uuid4()),
        date=store.clock(),
        topic=submission.topic,
        level=submission.level,
        content=submission.content,
        user_mcq_answers=submission.mcq_answers,
        user_open_answers=answers[: len(questions)],
        evaluations=evaluations,
    )
    await run_in_threadpool(store.append_reading_history, item)
    return {
        "result": result.model_dump(by_alias=True),
        "evaluations": [e.model_dump(by_alias=True) if e else None for e in evaluations],
    }


@router.post("/activities/writing")
async def submit_essay(
    submission: WritingSubmission,
    store: ProgressStore = Depends(get_progress_store),
    generator: ContentGenerator = Depends(get_content_generator),
) -> dict:
    try:
        event = writing_event(submission.topic, submission.essay)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    feedback = await _generated(generator.get_writing_feedback(submission.topic, submission.essay))
    result = await run_in_threadpool(store.record_activity, event)
    return {"result": result.model_dump(by_alias=True), "feedback": feedback}


@router.put("/goal")
def set_goal(
    goal: UserGoal | None = Body(default=None),
    store: ProgressStore = Depends(get_progress_store),
) -> dict:
    data = store.set_goal(goal)
    return {"goal": data.goal.model_dump(mode="json", by_alias=True) if data.goal else None}


@router.patch("/preferences")
def update_preferences(
    update: PreferencesUpdate, store: ProgressStore = Depends(get_progress_store)
) -> dict:
    data = store.update_preferences(update.model_dump(exclude_none=True))
    return data.preferences.model_dump(by_alias=True)


@router.post("/word-memory")
def update_word_memory(
    answer: WordAnswer, store: ProgressStore = Depends(get_progress_store)
) -> dict:
    data = store.update_word_memory(answer.word, answer.is_correct)
    return data.word_memory[answer.word].model_dump(by_alias=True)


@router.post("/reading-history")
def append_reading_history(
    item: ReadingHistoryItem, store: ProgressStore = Depends(get_progress_store)
) -> dict:
    data = store.append_reading_history(item)
    return {"count": len(data.reading_history)}


@router.get("/vocabulary/{category}/queue")
def get_quiz_queue(
    category: str,
    store: ProgressStore = Depends(get_progress_store),
    vocabulary: dict[str, list[VocabQuestion]] = Depends(get_vocabulary),
) -> dict:
    words = vocabulary.get(category)
    if words is None:
        raise HTTPException(status_code=404, detail="Unknown vocabulary category")
    queue = build_quiz_queue(store.snapshot, words, store.rng)
    return queue.model_dump(mode="json")


# --- Generation (never mutates progress) ---

@router.post("/generate/reading-quiz")
async def generate_reading_quiz(
    request: QuizRequest, generator: ContentGenerator = Depends(get_content_generator)
) -> dict:
    quiz = await _generated(generator.generate_reading_quiz(request.topic, request.level))
    return quiz.model_dump(by_alias=True)


@router.post("/generate/grade")
async def grade_open_answer(
    request: GradeRequest, generator: ContentGenerator = Depends(get_content_generator)
) -> dict:
    evaluation = await _generated(
        generator.evaluate_open_answer(request.passage, request.question, request.answer)
    )
    return evaluation.model_dump(by_alias=True)


@router.post("/generate/plan")
async def generate_plan(
    store: ProgressStore = Depends(get_progress_store),
    generator: ContentGenerator = Depends(get_content_generator),
) -> dict:
    data = store.snapshot
    plan = await _generated(generator.generate_learning_plan(data.preferences, data.logs))
    return {"plan": plan.model_dump(mode="json"), "recommendedXp": recommended_weekly_xp(plan)}
