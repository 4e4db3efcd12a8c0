"""Persisted document models."""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ModuleType(IntEnum):
    """Closed set of supported module types"""

    LED_STRIP = 0
    SHUTTER = 1
    WEATHER = 2
    TEST = 3

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").capitalize()


class Access(IntEnum):
    """Guirlande access modes"""

    PUBLIC = 0
    PRIVATE = 1


class Document(BaseModel):
    """Base persisted document, id and timestamps are managed by the store"""

    id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ModuleDocument(Document):
    type: ModuleType
    name: Optional[str] = Field(default=None, max_length=50)
    validated: bool = False
    token: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class GuirlandeDocument(Document):
    access: Access = Access.PRIVATE
    code: str

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError("Code must be numeric")
        return v


class ProjectDocument(Document):
    name: str = Field(min_length=3, max_length=30)
    description: Optional[str] = Field(default=None, max_length=500)
    href: str = Field(min_length=1, max_length=3000)
