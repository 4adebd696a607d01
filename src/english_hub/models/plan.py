"""Learning plan returned by the generative content service."""

from pydantic import BaseModel, Field

from english_hub.models.progress import ActivityType


class PlanSuggestion(BaseModel):
    type: ActivityType
    category: str | None = None
    topic: str | None = None
    level: str | None = None
    reason: str


class LearningPlan(BaseModel):
    week_focus: str = Field(min_length=1)
    suggestions: list[PlanSuggestion] = Field(min_length=1)
