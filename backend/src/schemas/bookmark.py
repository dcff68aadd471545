"""Pydantic schemas for bookmark endpoints."""
import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationInfo, field_validator

from core.config import Settings, get_settings
from schemas.validators import validate_title_length, validate_url_length


def _settings(info: ValidationInfo) -> Settings:
    """Settings from the validation context, else the environment."""
    if info.context and info.context.get("settings") is not None:
        return info.context["settings"]
    return get_settings()


class BookmarkWrite(BaseModel):
    """
    Body of create and update requests. Both fields are required.

    Length limits are read from ``context={"settings": ...}`` when given.
    """

    title: str = Field(min_length=1)
    # HttpUrl only accepts absolute http/https URLs and normalizes them
    # (example.com -> example.com/, host lowercased).
    url: HttpUrl

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str, info: ValidationInfo) -> str:
        """Validate title length."""
        return validate_title_length(v, _settings(info).max_title_length)

    @field_validator("url", mode="before")
    @classmethod
    def check_url_length(cls, v: Any, info: ValidationInfo) -> Any:
        """Validate raw URL length before parsing."""
        if isinstance(v, str):
            return validate_url_length(v, _settings(info).max_url_length)
        return v


class BookmarkCreated(BaseModel):
    """Returned by POST /api/bookmarks."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    created_at: datetime


class BookmarkUpdated(BaseModel):
    """Returned by PUT /api/bookmarks/:id."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    updated_at: datetime


class BookmarkResponse(BaseModel):
    """Schema for single and listed bookmarks."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(serialization_alias="pageSize")
    total: int
    total_pages: int = Field(serialization_alias="totalPages")
    has_next: bool = Field(serialization_alias="hasNext")
    has_prev: bool = Field(serialization_alias="hasPrev")

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> "Pagination":
        """Compute page counts; an empty result has zero pages."""
        total_pages = math.ceil(total / page_size)
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages,
            has_next=page * page_size < total,
            has_prev=page > 1,
        )


class BookmarkListResponse(BaseModel):
    """Schema for paginated bookmark list responses."""

    data: list[BookmarkResponse]
    pagination: Pagination
