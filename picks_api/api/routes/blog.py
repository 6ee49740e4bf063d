"""
Blog API routes.

Base path: /api/blog
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from picks_api.api.schemas import BlogPostCreate, BlogPostResponse
from picks_api.core.auth import (
    RequestContext,
    get_request_context,
    require_content_editor,
    require_user,
)
from picks_api.core.config import settings
from picks_api.core.database import get_db
from picks_api.repositories import BlogPostRepository
from picks_api.utils.slugs import slugify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blog", tags=["blog"])


def slug_conflict(slug: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"A blog post with slug '{slug}' already exists"
    )


def _author_name(ctx: RequestContext) -> str:
    user = ctx.user
    full_name = " ".join(part for part in (user.first_name, user.last_name) if part)
    return full_name or user.email or user.id


@router.get("", response_model=List[BlogPostResponse])
def list_posts(
    published: Optional[bool] = Query(None, description="false includes drafts (admins only)"),
    limit: Optional[int] = Query(None, ge=1),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
) -> List[BlogPostResponse]:
    """Newest posts first. Drafts are only ever listed for admins."""
    published_only = published is not False or not ctx.is_admin
    posts = BlogPostRepository(db).list_posts(
        published_only=published_only,
        limit=settings.clamp_limit(limit, settings.DEFAULT_BLOG_LIMIT),
    )
    return [BlogPostResponse.model_validate(p) for p in posts]


@router.get("/{slug}", response_model=BlogPostResponse)
def get_post(
    slug: str,
    ctx: RequestContext = Depends(require_user),
    db: Session = Depends(get_db),
) -> BlogPostResponse:
    """Single post by slug; drafts are reported as missing to non-admins."""
    post = BlogPostRepository(db).find_by_slug(slug)
    if post is None or (not post.published and not ctx.is_admin):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    return BlogPostResponse.model_validate(post)


@router.post("", response_model=BlogPostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: BlogPostCreate,
    ctx: RequestContext = Depends(require_content_editor),
    db: Session = Depends(get_db),
) -> BlogPostResponse:
    repo = BlogPostRepository(db)
    data = payload.model_dump()
    data["slug"] = payload.slug or slugify(payload.title)
    data["author"] = payload.author or _author_name(ctx)

    if repo.slug_exists(data["slug"]):
        raise slug_conflict(data["slug"])

    try:
        post = repo.create(**data)
        repo.save()
    except IntegrityError:
        # a concurrent request took the slug first
        repo.rollback()
        raise slug_conflict(data["slug"])
    except SQLAlchemyError:
        repo.rollback()
        logger.exception("Failed to create blog post")
        raise

    logger.info(f"Blog post {post.id} created ({post.slug})", extra={"post_id": post.id})
    return BlogPostResponse.model_validate(repo.refresh(post))
