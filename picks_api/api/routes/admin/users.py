"""
Admin user management routes.

Base path: /api/admin/users
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from picks_api.api.schemas import AdminUserUpdate, MessageResponse, UserResponse
from picks_api.core.auth import RequestContext, require_admin
from picks_api.core.config import settings
from picks_api.core.database import get_db
from picks_api.core.metrics import record_admin_action
from picks_api.repositories import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["admin"])


@router.get("", response_model=List[UserResponse])
def list_users(
    limit: Optional[int] = Query(None, ge=1),
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> List[UserResponse]:
    users = UserRepository(db).list_users(
        limit=settings.clamp_limit(limit, settings.DEFAULT_USER_LIMIT)
    )
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> UserResponse:
    user = UserRepository(db).find_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    payload: AdminUserUpdate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Edit profile, tier, expiry or role of any user."""
    repo = UserRepository(db)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("email") and repo.email_taken(changes["email"], exclude_id=user_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")

    try:
        user = repo.update(user_id, changes)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        repo.save()
    except SQLAlchemyError:
        repo.rollback()
        logger.exception(f"Failed to update user {user_id}")
        raise

    record_admin_action("user", "update")
    logger.info(
        f"User {user_id} updated by admin",
        extra={"target_user": user_id, "fields": sorted(changes)},
    )
    return UserResponse.model_validate(repo.refresh(user))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Hard-delete a user and their access grants. Admins cannot delete themselves."""
    if user_id == ctx.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account"
        )

    repo = UserRepository(db)
    try:
        if not repo.delete(user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        repo.save()
    except SQLAlchemyError:
        repo.rollback()
        logger.exception(f"Failed to delete user {user_id}")
        raise

    record_admin_action("user", "delete")
    logger.info(f"User {user_id} deleted by admin", extra={"target_user": user_id})
    return MessageResponse(message="User deleted successfully")
