"""Tests for response parsing, prompt building, the vocabulary bank and the generator."""

import json
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest

from english_hub.content.generator import ContentGenerator
from english_hub.content.parsing import GenerationError, parse_model, strip_fences
from english_hub.content.prompts import (
    build_grading_prompt,
    build_plan_prompt,
    summarize_recent_activity,
)
from english_hub.content.vocabulary import load_vocabulary
from english_hub.models.plan import LearningPlan
from english_hub.models.progress import Preferences, VocabularyDetails, VocabularyLog
from english_hub.models.reading import AnswerEvaluation, Verdict

QUIZ = {
    "passage": "The Moon orbits the Earth.",
    "mcqs": [{"question": "What orbits?", "options": ["Moon", "Sun"], "correctAnswerIndex": 0}],
    "openQuestions": [{"question": "Why does it orbit?"}],
}


class TestStripFences:
    def test_json_fence(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_text_untouched(self):
        assert strip_fences('  {"a": 1} ') == '{"a": 1}'


class TestParseModel:
    def test_parses_fenced_json(self):
        text = '```json\n{"verdict": "Correct", "explanation": "Good."}\n```'
        evaluation = parse_model(text, AnswerEvaluation)
        assert evaluation.verdict == Verdict.CORRECT

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_text(self, text):
        with pytest.raises(GenerationError):
            parse_model(text, AnswerEvaluation)

    def test_invalid_json(self):
        with pytest.raises(GenerationError, match="not valid JSON"):
            parse_model("{verdict: Correct", AnswerEvaluation)

    def test_missing_fields(self):
        with pytest.raises(GenerationError, match="LearningPlan"):
            parse_model('{"weekFocus": "x"}', LearningPlan)


class TestPrompts:
    def test_grading_prompt_includes_inputs(self):
        prompt = build_grading_prompt("A passage.", "A question?", "An answer.")
        for part in ("A passage.", "A question?", "An answer."):
            assert part in prompt

    def test_no_recent_activity(self):
        assert summarize_recent_activity([]) == "No recent activity."

    def test_recent_activity_keeps_last_five(self):
        logs = [
            VocabularyLog(id=str(i), date=datetime(2026, 3, 10), xp=i,
                          details=VocabularyDetails(category=f"cat-{i}", score=i, total=10))
            for i in range(7)
        ]
        summary = summarize_recent_activity(logs)
        assert len(summary.splitlines()) == 5
        assert "cat-0" not in summary
        assert "cat-6" in summary

    def test_plan_prompt_includes_preferences(self):
        prefs = Preferences(level="Advanced", learning_goal="Business English")
        prompt = build_plan_prompt(prefs, [])
        assert "Advanced" in prompt
        assert "Business English" in prompt
        assert "No recent activity." in prompt


class TestVocabularyBank:
    def test_bundled_bank_loads(self):
        from english_hub.config import Settings

        bank = load_vocabulary(Settings().vocabulary_path)
        assert "words-basic" in bank
        for questions in bank.values():
            for q in questions:
                assert q.correct_answer in q.options

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_vocabulary(tmp_path / "missing.yaml")

    def test_custom_file(self, tmp_path):
        path = tmp_path / "vocab.yaml"
        path.write_text(
            "categories:\n"
            "  demo:\n"
            "    - {word: cat, correct_answer: 猫, options: [猫, 犬]}\n",
            encoding="utf-8",
        )
        bank = load_vocabulary(path)
        assert [q.word for q in bank["demo"]] == ["cat"]


def completion(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def generator():
    gen = ContentGenerator(api_key="test-key")
    gen.client = MagicMock()
    gen.client.chat.completions.create = AsyncMock()
    return gen


class TestContentGenerator:
    async def test_reading_quiz(self, generator):
        generator.client.chat.completions.create.return_value = completion(json.dumps(QUIZ))
        quiz = await generator.generate_reading_quiz("Space", "Intermediate (B1)")
        assert quiz.mcqs[0].options == ["Moon", "Sun"]
        kwargs = generator.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["response_format"] == {"type": "json_object"}

    async def test_reading_quiz_bad_answer_index(self, generator):
        broken = {**QUIZ, "mcqs": [{**QUIZ["mcqs"][0], "correctAnswerIndex": 5}]}
        generator.client.chat.completions.create.return_value = completion(json.dumps(broken))
        with pytest.raises(GenerationError):
            await generator.generate_reading_quiz("Space", "B1")

    async def test_evaluate_open_answer(self, generator):
        generator.client.chat.completions.create.return_value = completion(
            '{"verdict": "partially_correct", "explanation": "Close."}'
        )
        evaluation = await generator.evaluate_open_answer("P", "Q", "A")
        assert evaluation.verdict == Verdict.PARTIALLY_CORRECT

    async def test_learning_plan(self, generator):
        generator.client.chat.completions.create.return_value = completion(json.dumps({
            "week_focus": "Reading fluency",
            "suggestions": [{"type": "reading", "topic": "Space", "reason": "Build speed."}],
        }))
        plan = await generator.generate_learning_plan(Preferences(), [])
        assert plan.suggestions[0].topic == "Space"

    async def test_writing_feedback_uses_feedback_model(self, generator):
        generator.client.chat.completions.create.return_value = completion("## Great work\n")
        feedback = await generator.get_writing_feedback("Travel", "I like trains.")
        assert feedback == "## Great work"
        kwargs = generator.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert "response_format" not in kwargs

    async def test_empty_feedback(self, generator):
        generator.client.chat.completions.create.return_value = completion(None)
        with pytest.raises(GenerationError):
            await generator.get_writing_feedback("Travel", "I like trains.")

    async def test_no_choices(self, generator):
        response = MagicMock()
        response.choices = []
        generator.client.chat.completions.create.return_value = response
        with pytest.raises(GenerationError):
            await generator.evaluate_open_answer("P", "Q", "A")

    async def test_service_error_is_wrapped(self, generator):
        generator.client.chat.completions.create.side_effect = openai.OpenAIError("boom")
        with pytest.raises(GenerationError):
            await generator.generate_reading_quiz("Space", "B1")
