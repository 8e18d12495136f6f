"""Pydantic models for sleep records"""
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from uuid import UUID

# Plain ASCII decimal notation; Python's int()/float() would also take
# "1_0" and non-ASCII digits
NUMBER_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


def is_decimal_number(text: str) -> bool:
    """True if text (surrounding whitespace ignored) is a plain decimal number"""
    return NUMBER_PATTERN.fullmatch(text.strip()) is not None


class SleepRecordCreate(BaseModel):
    """Fields supplied by the client when logging sleep

    Numeric strings are cast the way the storage schema casts them
    ("7" -> 7), anything else fails validation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: int
    hours: float = Field(allow_inf_nan=False)  # no range check, 0 and negatives pass

    @field_validator("user_id", "hours", mode="before")
    @classmethod
    def reject_non_decimal_strings(cls, value):
        if isinstance(value, str) and not is_decimal_number(value):
            raise ValueError("must be a plain decimal number")
        return value


class SleepRecord(BaseModel):
    """A persisted sleep record, serialized in camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: UUID
    user_id: int
    hours: float
    created_at: datetime
    updated_at: datetime
