"""Shared model bases and field types."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _to_local_naive(value: datetime) -> datetime:
    # Saved data may carry UTC ("...Z") timestamps; calendar logic works on local time.
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


LocalDatetime = Annotated[datetime, AfterValidator(_to_local_naive)]


class CamelModel(BaseModel):
    """Base model persisted with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
