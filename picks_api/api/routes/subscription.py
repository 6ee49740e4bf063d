"""
Subscription routes.

Base path: /api/subscription
"""
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from picks_api.api.schemas import CamelModel, SubscriptionUpgradeRequest
from picks_api.core.auth import RequestContext, require_user
from picks_api.core.database import get_db
from picks_api.repositories import UserRepository
from picks_api.services.subscription_service import InvalidTierError, SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["subscription"])


class SubscriptionUpgradeResponse(CamelModel):
    message: str
    subscription_tier: str
    subscription_expiry: datetime


@router.post("/upgrade", response_model=SubscriptionUpgradeResponse)
def upgrade_subscription(
    payload: SubscriptionUpgradeRequest,
    ctx: RequestContext = Depends(require_user),
    db: Session = Depends(get_db),
) -> SubscriptionUpgradeResponse:
    """
    Move the caller to the ``pro`` or ``expert`` tier for one month.

    Any other tier value is rejected with 400.
    """
    users = UserRepository(db)
    try:
        user = SubscriptionService(users).upgrade(ctx.user_id, payload.tier)
        users.save()
    except InvalidTierError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid subscription tier") from exc

    return SubscriptionUpgradeResponse(
        message="Subscription updated successfully",
        subscription_tier=user.subscription_tier,
        subscription_expiry=user.subscription_expiry,
    )
