"""
schemas.py — Interchange models
Pydantic models for everything that crosses the JSON boundary: problems, tags,
filters, statistics and the response envelope.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from algotracker.database import utcnow

TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
)


def parse_timestamp(value: Any) -> datetime:
    """
    Lenient timestamp parsing for imported and client-supplied records.

    Accepts datetimes, ISO-8601 strings (with or without offset, up to
    nanosecond fractions) and the formats in TIMESTAMP_FORMATS. Anything that
    cannot be parsed becomes the current time instead of an error. Aware
    values are converted to naive UTC.
    """
    parsed = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        # datetime only keeps microseconds
        text = re.sub(r"(\.\d{6})\d+", r"\1", text)
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            for fmt in TIMESTAMP_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue

    if parsed is None:
        return utcnow()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class TagSchema(BaseModel):
    id: int = 0
    name: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {"from_attributes": True}

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, value):
        return parse_timestamp(value)


class ProblemSchema(BaseModel):
    id: int = 0
    name: str = ""
    link: str = ""
    platform: str = ""
    difficulty: str = ""
    solve_time: int = 0  # minutes
    notes: str = ""
    code_snippet: str = ""
    tags: List[TagSchema] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def parse_timestamps(cls, value):
        return parse_timestamp(value)

    @field_validator("id", "solve_time", mode="before")
    @classmethod
    def null_to_zero(cls, value):
        return 0 if value is None else value

    @field_validator("name", "link", "platform", "difficulty", "notes", "code_snippet", mode="before")
    @classmethod
    def null_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value):
        # Clients may send plain tag names instead of tag objects
        if value is None:
            return []
        return [{"name": item} if isinstance(item, str) else item for item in value]

    @property
    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.tags]


class ProblemFilter(BaseModel):
    difficulty: Optional[str] = None
    platform: Optional[str] = None
    tags: Optional[List[str]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    search_query: Optional[str] = None


class Statistics(BaseModel):
    total_problems: int = 0
    by_difficulty: Dict[str, int] = Field(default_factory=dict)
    by_platform: Dict[str, int] = Field(default_factory=dict)
    by_tag: Dict[str, int] = Field(default_factory=dict)
    average_solve_time: float = 0.0


class Response(BaseModel):
    success: bool
    message: str = ""
    data: Any = None
