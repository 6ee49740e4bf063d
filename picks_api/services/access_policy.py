"""
Premium access policy.

Decides whether a requester may see the full detail of a prediction:

- free predictions are visible to everyone, anonymous included;
- premium predictions are hidden from anonymous requesters;
- any paid tier (pro, expert) sees every premium prediction;
- a free-tier user sees a premium prediction only with an access grant.

The subscription expiry date is not consulted: the tier alone drives the
decision.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from picks_api.core import metrics
from picks_api.models import Prediction, User
from picks_api.repositories.access_repository import AccessGrantRepository

logger = logging.getLogger(__name__)

# Withheld from list rows the requester may not fully see
LOCKED_FIELDS = ("prediction", "analysis")


def access_reason(
    user: Optional[User],
    prediction: Prediction,
    grants: AccessGrantRepository
) -> Tuple[bool, str]:
    """
    Evaluate the policy and report which rule decided it.

    Returns:
        (allowed, reason) where reason is one of
        "free_content", "anonymous", "subscription", "grant", "no_grant"
    """
    if not prediction.is_premium:
        return True, "free_content"
    if user is None:
        return False, "anonymous"
    if user.subscription_tier != "free":
        return True, "subscription"
    if grants.has_grant(user.id, prediction.id):
        return True, "grant"
    return False, "no_grant"


def can_view_prediction(
    user: Optional[User],
    prediction: Prediction,
    grants: AccessGrantRepository
) -> bool:
    """True if ``user`` (None for anonymous) may see the full prediction."""
    allowed, reason = access_reason(user, prediction, grants)
    if prediction.is_premium:
        metrics.record_access_decision(allowed, reason)
        logger.debug(
            f"Premium access {'allowed' if allowed else 'denied'} for prediction {prediction.id}",
            extra={"prediction_id": prediction.id, "reason": reason},
        )
    return allowed


def visible_prediction_ids(
    user: Optional[User],
    predictions: Iterable[Prediction],
    grants: AccessGrantRepository
) -> set:
    """
    Ids of the predictions in ``predictions`` the user may fully see.

    Same rules as ``can_view_prediction``, evaluated with a single grant
    lookup for the whole page.
    """
    predictions = list(predictions)
    visible = {p.id for p in predictions if not p.is_premium}
    premium_ids: List[int] = [p.id for p in predictions if p.is_premium]

    if not premium_ids or user is None:
        return visible
    if user.subscription_tier != "free":
        return visible | set(premium_ids)
    return visible | grants.granted_prediction_ids(user.id, premium_ids)
