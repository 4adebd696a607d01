"""Parsing of structured text returned by the generative service."""

import json
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE = re.compile(r"^\s*```(?:json|JSON)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class GenerationError(Exception):
    """Content generation failed; the caller may retry."""


def strip_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    match = _FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_model(text: str | None, model: type[ModelT]) -> ModelT:
    """Parse JSON text into `model`, validating required fields.

    Raises:
        GenerationError: The text is empty, not JSON, or missing fields.
    """
    if not text or not text.strip():
        raise GenerationError("Empty response from content service")
    try:
        payload = json.loads(strip_fences(text))
    except json.JSONDecodeError as e:
        raise GenerationError(f"Response is not valid JSON: {e}") from e
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise GenerationError(
            f"Response does not match {model.__name__}: {e.error_count()} errors"
        ) from e
