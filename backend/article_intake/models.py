from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Article(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    author: Optional[str] = None
    summary: str = ""
    notes: Optional[str] = None
    doi: Optional[str] = None
    file: Optional[str] = None  # blob ref, set once at creation
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ArticleFields(BaseModel):
    """User-submitted form fields for a new article."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    author: Optional[str] = None
    summary: Optional[str] = None
    notes: Optional[str] = None
    doi: Optional[str] = None


class Upload(BaseModel):
    filename: str
    data: bytes


class DoiLookupRequest(BaseModel):
    doi: str


class DoiLookupResponse(BaseModel):
    title: str
    authors: str
    summary: str
    doi: str


class ExtractSummaryResponse(BaseModel):
    summary: str
    detail: Optional[str] = None


class DeleteResponse(BaseModel):
    success: bool
