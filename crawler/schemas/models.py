"""
Pydantic models for raw crawler outputs.
These are what strategies hand over before ranking and link building happen.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, field_validator

DESCRIPTION_LIMIT = 200


class FeedEntry(BaseModel):
    title: str
    link: str = ""
    description: str = ""
    pub_date: str = ""

    @field_validator("title", "link", "pub_date", mode="before")
    @classmethod
    def _strip(cls, value: Optional[str]) -> str:
        return (value or "").strip()

    @field_validator("description", mode="before")
    @classmethod
    def _clip_description(cls, value: Optional[str]) -> str:
        return (value or "").strip()[:DESCRIPTION_LIMIT]


class TrendRecord(BaseModel):
    """
    One raw trending entry as extracted from a feed, API payload or page.

    `hot_value` is a raw magnitude (views, heat score); `hot_text` is an
    already human-readable value some vendors send instead.
    """

    title: str
    url: Optional[str] = None
    hot_value: Optional[float] = None
    hot_text: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _trim_title(cls, value) -> str:
        # vendors occasionally send numeric titles
        return "" if value is None else str(value).strip()

    @field_validator("url", "hot_text", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("hot_value", mode="before")
    @classmethod
    def _coerce_magnitude(cls, value):
        if value in (None, ""):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
