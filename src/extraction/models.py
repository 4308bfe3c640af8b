"""
Data models for extracted candidate records.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.utils.url_utils import LINKEDIN_BASE

# Placeholder the site shows when a member's name is hidden
REDACTED_NAME = "LinkedIn Member"


class ExtractionSource(str, Enum):
    """Which pipeline stage produced a candidate."""
    STRUCTURED_DATA = "structured-data"
    STRUCTURAL_HEURISTIC = "structural-heuristic"


class Candidate(BaseModel):
    """
    One extracted person record.

    Immutable once built. profile_url is the canonical deduplication key.
    """

    name: str = Field(REDACTED_NAME, description="Display name or the redaction placeholder")
    profile_url: str = Field(..., min_length=1, description="Canonical absolute profile URL")
    title: Optional[str] = Field(None, description="Headline or current role as shown")
    company: Optional[str] = Field(None, description="Employer as stated by the source")
    location: Optional[str] = Field(None, description="Free-text location")
    extraction_source: ExtractionSource = Field(..., description="Producing strategy")

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Optional[str]) -> str:
        """Empty names become the redaction placeholder."""
        if v is None or not str(v).strip():
            return REDACTED_NAME
        return " ".join(str(v).split())

    @field_validator("title", "company", "location", mode="before")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Collapse whitespace; blank strings become None."""
        if v is None:
            return None
        text = " ".join(str(v).split())
        return text or None

    @property
    def is_redacted(self) -> bool:
        return self.name == REDACTED_NAME


class RenderedPage(BaseModel):
    """HTML of a page the session already fetched, plus where it came from."""

    html: str = ""
    url: str = LINKEDIN_BASE

    model_config = ConfigDict(frozen=True)
