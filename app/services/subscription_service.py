"""
Subscription Service

Reads/writes premium subscription rows and answers the access questions
the premium guards ask:
- has_active_subscription: is there a live, paid-up subscription right now?
- has_feature_access: does the newest live subscription's plan unlock a named feature?

Feature access is exact plan equality: an enterprise plan does NOT unlock
a feature tagged "premium". There is no tier ordering.

Status changes all go through transition(), which enforces
    pending -> active | expired
    active  -> cancelled | expired
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, List, Union

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, InvalidTransitionError
from app.db.repositories import SubscriptionRepository, FeatureRepository
from app.models import Subscription, PremiumFeature, utcnow
from app.schemas.schemas import PlanType, SubscriptionStatus, PaymentStatus

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS = {
    SubscriptionStatus.pending.value: {SubscriptionStatus.active.value, SubscriptionStatus.expired.value},
    SubscriptionStatus.active.value: {SubscriptionStatus.cancelled.value, SubscriptionStatus.expired.value},
    SubscriptionStatus.cancelled.value: set(),
    SubscriptionStatus.expired.value: set(),
}


def can_transition(current: str, new: str) -> bool:
    """Re-writing the current status is allowed (no-op)."""
    return current == new or new in ALLOWED_TRANSITIONS.get(current, set())


def transition(subscription: Subscription, new_status: Union[str, SubscriptionStatus]) -> bool:
    """
    Move a subscription to new_status.

    Returns True if the status changed, False if it already had it.
    Raises InvalidTransitionError for backwards moves.
    """
    new_status = SubscriptionStatus(new_status).value
    current = subscription.status
    if not can_transition(current, new_status):
        raise InvalidTransitionError(
            f"Cannot move subscription {subscription.subscription_id} from {current} to {new_status}",
            subscription_id=subscription.subscription_id,
        )
    if current == new_status:
        return False
    subscription.status = new_status
    return True


class SubscriptionService:
    """
    Premium subscription operations over an injected Session.
    """

    def __init__(self, db: Session):
        self.db = db
        self.subscriptions = SubscriptionRepository(db)
        self.features = FeatureRepository(db)

    # ---------------- queries ----------------

    def has_active_subscription(self, user_id: int) -> bool:
        return self.subscriptions.find_active_by_user(user_id, utcnow()) is not None

    def get_user_subscription(self, user_id: int) -> Optional[Subscription]:
        """Most recently created subscription, or None."""
        return self.subscriptions.find_latest_by_user(user_id)

    def has_feature_access(self, user_id: int, feature_name: str) -> bool:
        """
        True when the plan of the user's newest live subscription equals the
        plan the feature is tagged with. Newer pending or failed checkouts do
        not hide a subscription that is still running.
        """
        subscription = self.subscriptions.find_active_by_user(user_id, utcnow())
        if subscription is None:
            return False

        feature = self.features.find_by_name(feature_name)
        if feature is None:
            logger.warning("Feature access check for unknown feature %r", feature_name)
            return False

        return feature.plan_type == subscription.plan_type

    def get_all_premium_features(self) -> List[PremiumFeature]:
        return self.features.list_all()

    def get_features_by_plan(self, plan_type: Union[str, PlanType]) -> List[PremiumFeature]:
        return self.features.list_by_plan(PlanType(plan_type).value)

    # ---------------- commands ----------------

    def create_subscription(self, user_id: int, plan_type: Union[str, PlanType], duration_days: int) -> Subscription:
        """
        Grant a subscription directly (no payment), active immediately.
        """
        start_date = utcnow()
        subscription = Subscription(
            user_id=user_id,
            plan_type=PlanType(plan_type).value,
            start_date=start_date,
            end_date=start_date + timedelta(days=duration_days),
            status=SubscriptionStatus.active.value,
            payment_status=PaymentStatus.success.value,
            created_at=start_date,
        )
        self.subscriptions.add(subscription)
        self.db.commit()
        logger.info(
            "Created %s subscription %s for user %s (%s days)",
            subscription.plan_type, subscription.subscription_id, user_id, duration_days,
        )
        return subscription

    def cancel_subscription(self, user_id: int) -> List[Subscription]:
        """
        Cancel every live subscription of the user, so none keeps granting
        access. Payment transactions are left untouched.
        """
        live = self.subscriptions.list_active_by_user(user_id, utcnow())
        if not live:
            raise NotFoundError("No active subscription to cancel")

        for subscription in live:
            transition(subscription, SubscriptionStatus.cancelled)
        self.db.commit()
        logger.info(
            "Cancelled subscriptions %s for user %s",
            [s.subscription_id for s in live], user_id,
        )
        return live

    def expire_lapsed_subscriptions(self, now: Optional[datetime] = None) -> int:
        """Mark active subscriptions past their end date as expired."""
        now = now or utcnow()
        lapsed = self.subscriptions.list_lapsed(now)
        for subscription in lapsed:
            transition(subscription, SubscriptionStatus.expired)
        self.db.commit()
        if lapsed:
            logger.info("Expired %d lapsed subscriptions", len(lapsed))
        return len(lapsed)
