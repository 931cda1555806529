"""Pydantic v2 schemas for the blog endpoints."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field


class BlogIn(BaseModel):
    """Payload for creating or replacing a blog post."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=100)
    published: bool = False


class BlogSummary(BaseModel):
    """List view — no content."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    slug: str
    created_at: datetime.datetime


class BlogOut(BlogSummary):
    """Full post."""

    content: str
    published: bool


class BlogSummaryList(BaseModel):
    blogs: list[BlogSummary]


class BlogList(BaseModel):
    blogs: list[BlogOut]


class BlogDetail(BaseModel):
    blog: BlogOut


class BlogCreated(BaseModel):
    success: bool = True
    id: int
