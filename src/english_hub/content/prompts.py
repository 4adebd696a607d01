"""Prompt templates for the generative content service."""

import json

from english_hub.models.progress import Preferences, ReadingLog, VocabularyLog, WritingLog

RECENT_ACTIVITY_LIMIT = 5

READING_QUIZ_PROMPT = """\
Generate a complete English reading comprehension quiz for an English learner.
The learner's level is {level}.
The topic is "{topic}". Write a passage and questions related to this topic.

To ensure variety, consider these themes based on level:
- Beginner (A2): daily routines, hobbies, family, or simple travel stories.
- Intermediate (B1): technology in everyday life, cultural events, environmental issues, work.
- Advanced (C1): scientific breakthroughs, economic trends, social commentary, literary analysis.

Respond ONLY with a JSON object:
{{
    "passage": "<reading passage of about 150-200 words for the specified level>",
    "mcqs": [
        {{
            "question": "<multiple-choice question about the passage>",
            "options": ["<A>", "<B>", "<C>", "<D>"],
            "correctAnswerIndex": <0-3>
        }}
    ],
    "openQuestions": [
        {{"question": "<open-ended question answerable from the passage>"}}
    ]
}}

Include {mcq_count} multiple-choice questions and {open_count} open-ended questions.
"""

GRADING_PROMPT = """\
Based on the provided English text, evaluate the user's answer to a question.

Text:
---
{passage}
---

Question: "{question}"

User's Answer: "{answer}"

Is the user's answer correct based *only* on the information in the text?
Respond ONLY with a JSON object:
{{
    "verdict": "Correct" | "Incorrect" | "Partially Correct",
    "explanation": "<brief explanation of the verdict>"
}}
"""

PLAN_PROMPT = """\
You are an expert English learning coach. A user with the proficiency level \
"{level}" wants to achieve the goal: "{learning_goal}".
Their recent activity is:
{recent_activity}

Create a personalized, one-week learning plan with 3-4 concrete suggestions.
Respond ONLY with a JSON object:
{{
    "week_focus": "<short, encouraging summary of this week's focus>",
    "suggestions": [
        {{
            "type": "vocabulary" | "reading" | "writing",
            "category": "<for vocabulary, e.g. 'Business'>",
            "topic": "<for reading or writing, e.g. 'The History of Coffee'>",
            "level": "<for reading, e.g. 'Intermediate (B1)'>",
            "reason": "<why this helps the user's goal>"
        }}
    ]
}}
"""

WRITING_FEEDBACK_PROMPT = """\
You are an expert English teacher. Provide constructive feedback on the \
following essay written by an English learner.

Topic: "{topic}"

Essay:
---
{essay}
---

Your feedback should be encouraging and helpful. Focus on:
1. Grammar and sentence structure errors.
2. Vocabulary choice and usage.
3. Clarity and organization of ideas.
4. Overall positive reinforcement.

Format your feedback using Markdown with headings, bold text and bullet points.
"""


def build_reading_quiz_prompt(
    topic: str, level: str, mcq_count: int = 2, open_count: int = 1
) -> str:
    return READING_QUIZ_PROMPT.format(
        topic=topic, level=level, mcq_count=mcq_count, open_count=open_count
    )


def build_grading_prompt(passage: str, question: str, answer: str) -> str:
    return GRADING_PROMPT.format(passage=passage, question=question, answer=answer)


def summarize_recent_activity(
    logs: list[VocabularyLog | ReadingLog | WritingLog],
    limit: int = RECENT_ACTIVITY_LIMIT,
) -> str:
    """One line per recent activity, oldest first."""
    lines = [
        f"- Type: {log.type}, Details: "
        f"{json.dumps(log.details.model_dump(by_alias=True), ensure_ascii=False)}"
        for log in logs[-limit:]
    ]
    return "\n".join(lines) or "No recent activity."


def build_plan_prompt(
    preferences: Preferences, logs: list[VocabularyLog | ReadingLog | WritingLog]
) -> str:
    return PLAN_PROMPT.format(
        level=preferences.level,
        learning_goal=preferences.learning_goal,
        recent_activity=summarize_recent_activity(logs),
    )


def build_writing_feedback_prompt(topic: str, essay: str) -> str:
    return WRITING_FEEDBACK_PROMPT.format(topic=topic, essay=essay)
