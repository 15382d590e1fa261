"""Shared schema building blocks for the hotel backend's camelCase JSON."""

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

DiscountType = Literal["percentage", "fixed"]


def _to_calendar_date(value: object) -> object:
    """Reduce ISO datetimes (``2025-05-01T00:00:00.000Z``) to their calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value


CalendarDate = Annotated[date, BeforeValidator(_to_calendar_date)]


class CamelModel(BaseModel):
    """Base model that reads and writes the backend's camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
