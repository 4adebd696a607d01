"""FastAPI dependencies resolving the objects created at application start."""

from fastapi import HTTPException, Request

from english_hub.content.generator import ContentGenerator
from english_hub.progression.word_memory import VocabQuestion
from english_hub.storage.progress_store import ProgressStore


def get_progress_store(request: Request) -> ProgressStore:
    return request.app.state.progress_store


def get_content_generator(request: Request) -> ContentGenerator:
    generator = getattr(request.app.state, "content_generator", None)
    if generator is None:
        raise HTTPException(status_code=503, detail="Content generation is not configured")
    return generator


def get_vocabulary(request: Request) -> dict[str, list[VocabQuestion]]:
    return getattr(request.app.state, "vocabulary", {})
