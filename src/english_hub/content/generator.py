"""Client for the generative content service (quizzes, grading, plans, feedback)."""

import openai
import structlog
from openai import AsyncOpenAI

from english_hub.content.parsing import GenerationError, parse_model
from english_hub.content.prompts import (
    build_grading_prompt,
    build_plan_prompt,
    build_reading_quiz_prompt,
    build_writing_feedback_prompt,
)
from english_hub.models.plan import LearningPlan
from english_hub.models.progress import Preferences, ReadingLog, VocabularyLog, WritingLog
from english_hub.models.reading import AnswerEvaluation, ReadingQuizContent

logger = structlog.get_logger()


class ContentGenerator:
    """Generates learning content with an LLM.

    Nothing here touches learner progress: callers apply XP only after a
    call returns a fully parsed result.

    Args:
        api_key: OpenAI API key.
        model: Model used for structured (JSON) generation.
        feedback_model: Model used for free-form essay feedback.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        feedback_model: str = "gpt-4o",
        timeout: float = 60.0,
    ):
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.model = model
        self.feedback_model = feedback_model

    async def _complete(self, prompt: str, model: str, json_mode: bool) -> str:
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.7,
                **kwargs,
            )
        except openai.OpenAIError as e:
            logger.exception("content_generation_failed", model=model)
            raise GenerationError(f"Content service request failed: {e}") from e

        if not response.choices:
            raise GenerationError("Content service returned no choices")
        return response.choices[0].message.content or ""

    async def generate_reading_quiz(self, topic: str, level: str) -> ReadingQuizContent:
        text = await self._complete(
            build_reading_quiz_prompt(topic, level), self.model, json_mode=True
        )
        quiz = parse_model(text, ReadingQuizContent)
        for mcq in quiz.mcqs:
            if mcq.correct_answer_index >= len(mcq.options):
                raise GenerationError("Quiz answer index points past its options")
        logger.info(
            "reading_quiz_generated",
            topic=topic,
            mcqs=len(quiz.mcqs),
            open_questions=len(quiz.open_questions),
        )
        return quiz

    async def evaluate_open_answer(
        self, passage: str, question: str, answer: str
    ) -> AnswerEvaluation:
        text = await self._complete(
            build_grading_prompt(passage, question, answer), self.model, json_mode=True
        )
        evaluation = parse_model(text, AnswerEvaluation)
        logger.info("open_answer_evaluated", verdict=evaluation.verdict)
        return evaluation

    async def generate_learning_plan(
        self,
        preferences: Preferences,
        logs: list[VocabularyLog | ReadingLog | WritingLog],
    ) -> LearningPlan:
        text = await self._complete(
            build_plan_prompt(preferences, logs), self.model, json_mode=True
        )
        return parse_model(text, LearningPlan)

    async def get_writing_feedback(self, topic: str, essay: str) -> str:
        """Markdown feedback on an essay."""
        text = await self._complete(
            build_writing_feedback_prompt(topic, essay), self.feedback_model, json_mode=False
        )
        feedback = text.strip()
        if not feedback:
            raise GenerationError("Empty feedback from content service")
        return feedback
