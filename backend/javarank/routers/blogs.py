"""
Blogs router — public reading plus admin management.

Public:
  GET /api/blogs               — published posts (summaries), newest first
  GET /api/blogs/{slug}        — one published post

Admin (mutations are CSRF protected):
  GET    /api/blogs/admin/all  — every post, drafts included
  POST   /api/blogs/admin      — create (5 per 5 minutes per IP)
  PUT    /api/blogs/admin/{id} — replace
  DELETE /api/blogs/admin/{id} — delete

Title, content and author are stored HTML-escaped; the slug is derived
from the raw title.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from javarank.auth.dependencies import require_csrf_token
from javarank.auth.rate_limit import rate_limit
from javarank.core.database import STORE_ERRORS, get_db_session
from javarank.core.errors import store_error
from javarank.models.blog import Blog
from javarank.schemas.blog import (
    BlogCreated,
    BlogDetail,
    BlogIn,
    BlogList,
    BlogOut,
    BlogSummary,
    BlogSummaryList,
)
from javarank.schemas.challenge import SuccessResponse
from javarank.services.rate_limiter import BLOG_CREATE_LIMIT
from javarank.services.sanitizer import sanitize_html, sanitize_input, slugify

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Blogs"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def _blog_fields(payload: BlogIn) -> dict:
    return {
        "title": sanitize_html(payload.title),
        "content": sanitize_html(payload.content),
        "author": sanitize_html(payload.author),
        "slug": slugify(payload.title),
        "published": payload.published,
    }


# ── Admin ───────────────────────────────────────────────────
# Declared before /{slug} so "admin" is never read as a slug.
@router.get("/admin/all", response_model=BlogList, summary="All posts, drafts included")
async def list_all_blogs(session: DbSession) -> BlogList:
    try:
        result = await session.execute(select(Blog).order_by(Blog.created_at.desc(), Blog.id.desc()))
        rows = result.scalars().all()
    except STORE_ERRORS as exc:
        logger.exception("Failed to fetch blogs")
        raise store_error(exc, "Failed to fetch blogs") from exc
    return BlogList(blogs=[BlogOut.model_validate(row) for row in rows])


@router.post(
    "/admin",
    response_model=BlogCreated,
    summary="Create a blog post",
    dependencies=[
        Depends(require_csrf_token),
        Depends(rate_limit("blog_create", BLOG_CREATE_LIMIT)),
    ],
)
async def create_blog(payload: BlogIn, session: DbSession) -> BlogCreated:
    blog = Blog(**_blog_fields(payload))
    try:
        session.add(blog)
        await session.commit()
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Failed to create blog")
        raise store_error(exc, "Failed to create blog") from exc

    logger.info("Created blog %d (%s)", blog.id, blog.slug)
    return BlogCreated(id=blog.id)


@router.put(
    "/admin/{blog_id}",
    response_model=SuccessResponse,
    summary="Replace a blog post",
    dependencies=[Depends(require_csrf_token)],
)
async def update_blog(blog_id: int, payload: BlogIn, session: DbSession) -> SuccessResponse:
    try:
        blog = await session.get(Blog, blog_id)
        if blog is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found")
        for name, value in _blog_fields(payload).items():
            setattr(blog, name, value)
        await session.commit()
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Failed to update blog %d", blog_id)
        raise store_error(exc, "Failed to update blog") from exc
    return SuccessResponse()


@router.delete(
    "/admin/{blog_id}",
    response_model=SuccessResponse,
    summary="Delete a blog post",
    dependencies=[Depends(require_csrf_token)],
)
async def delete_blog(blog_id: int, session: DbSession) -> SuccessResponse:
    try:
        await session.execute(delete(Blog).where(Blog.id == blog_id))
        await session.commit()
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Failed to delete blog %d", blog_id)
        raise store_error(exc, "Failed to delete blog") from exc
    return SuccessResponse()


# ── Public ──────────────────────────────────────────────────
@router.get("", response_model=BlogSummaryList, summary="Published posts")
async def list_published_blogs(session: DbSession) -> BlogSummaryList:
    stmt = (
        select(Blog)
        .where(Blog.published.is_(True))
        .order_by(Blog.created_at.desc(), Blog.id.desc())
    )
    try:
        result = await session.execute(stmt)
        rows = result.scalars().all()
    except STORE_ERRORS as exc:
        logger.exception("Failed to fetch blogs")
        raise store_error(exc, "Failed to fetch blogs") from exc
    return BlogSummaryList(blogs=[BlogSummary.model_validate(row) for row in rows])


@router.get("/{slug}", response_model=BlogDetail, summary="One published post")
async def get_blog(slug: str, session: DbSession) -> BlogDetail:
    stmt = select(Blog).where(Blog.slug == sanitize_input(slug), Blog.published.is_(True))
    try:
        result = await session.execute(stmt)
        blog = result.scalars().first()
    except STORE_ERRORS as exc:
        logger.exception("Failed to fetch blog %r", slug)
        raise store_error(exc, "Failed to fetch blog") from exc

    if blog is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found")
    return BlogDetail(blog=BlogOut.model_validate(blog))
