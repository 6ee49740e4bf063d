"""
Admin blog routes.

Base path: /api/admin/blog
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from picks_api.api.routes.blog import slug_conflict
from picks_api.api.schemas import BlogPostResponse, BlogPostUpdate, MessageResponse
from picks_api.core.auth import RequestContext, require_admin
from picks_api.core.database import get_db
from picks_api.core.metrics import record_admin_action
from picks_api.repositories import BlogPostRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blog", tags=["admin"])


@router.put("/{post_id}", response_model=BlogPostResponse)
def update_post(
    post_id: int,
    payload: BlogPostUpdate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> BlogPostResponse:
    """Partial update; publishing a draft is ``{"published": true}``."""
    repo = BlogPostRepository(db)
    changes = payload.model_dump(exclude_unset=True)

    if "slug" in changes and repo.slug_exists(changes["slug"], exclude_id=post_id):
        raise slug_conflict(changes["slug"])

    try:
        post = repo.update(post_id, changes)
        if post is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
        repo.save()
    except IntegrityError:
        repo.rollback()
        raise slug_conflict(changes["slug"])
    except SQLAlchemyError:
        repo.rollback()
        logger.exception(f"Failed to update blog post {post_id}")
        raise

    record_admin_action("blog_post", "update")
    return BlogPostResponse.model_validate(repo.refresh(post))


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MessageResponse:
    repo = BlogPostRepository(db)
    if not repo.delete(post_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    repo.save()

    record_admin_action("blog_post", "delete")
    logger.info(f"Blog post {post_id} deleted", extra={"post_id": post_id})
    return MessageResponse(message="Blog post deleted successfully")
