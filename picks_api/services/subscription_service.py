"""
Subscription upgrades.

No payment processor is involved: an upgrade sets the tier and an expiry one
calendar month ahead.
"""
import calendar
import logging
from datetime import datetime
from typing import Optional

from picks_api.core import metrics
from picks_api.models import PAID_TIERS, User
from picks_api.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class InvalidTierError(ValueError):
    """Raised when an upgrade targets a tier outside the paid allow-list."""


def add_one_month(moment: datetime) -> datetime:
    """
    Same day and time next month, clamped to the last day of that month.

    >>> add_one_month(datetime(2024, 1, 31))
    datetime.datetime(2024, 2, 29, 0, 0)
    """
    year, month = (moment.year + 1, 1) if moment.month == 12 else (moment.year, moment.month + 1)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class SubscriptionService:
    """Applies tier changes to user accounts."""

    def __init__(self, users: UserRepository):
        self.users = users

    def upgrade(self, user_id: str, tier: str, now: Optional[datetime] = None) -> User:
        """
        Move a user to a paid tier for one month.

        Raises:
            InvalidTierError: tier is not one of PAID_TIERS
            LookupError: the user does not exist
        """
        if tier not in PAID_TIERS:
            raise InvalidTierError(f"Invalid subscription tier: {tier!r}")

        expiry = add_one_month(now or datetime.utcnow())
        user = self.users.set_subscription(user_id, tier, expiry)
        if user is None:
            raise LookupError(f"User {user_id} not found")

        metrics.subscription_upgrades_total.labels(tier=tier).inc()
        logger.info(
            f"Subscription upgraded to {tier}",
            extra={"tier": tier, "expires": expiry.isoformat()},
        )
        return user
