"""
Premium access guards - FastAPI dependencies placed in front of routes.

    @router.get("/chat/messages")
    def chat(user: dict = Depends(require_active_subscription)): ...

    @router.get("/recommendations")
    def recs(user: dict = Depends(require_premium_feature("Job Recommendations"))): ...

Both re-query the store on every request (no caching). A missing or
invalid token is a 401 from get_current_user; a user without access gets
403 with an upgrade link. Guards and the routes behind them are plain def,
so FastAPI runs their blocking database calls in its threadpool.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.core.config import get_settings
from app.core.exceptions import Forbidden
from app.db.postgres import get_db
from app.services.subscription_service import SubscriptionService


def require_active_subscription(
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Dependency - Require an active, unexpired subscription."""
    if not SubscriptionService(db).has_active_subscription(user["user_id"]):
        raise Forbidden("Subscription required", upgradeUrl=get_settings().upgrade_url)
    return user


def require_premium_feature(feature_name: str):
    """Dependency factory - Require a plan that unlocks feature_name."""

    def _require_feature(
        user: dict = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> dict:
        if not SubscriptionService(db).has_feature_access(user["user_id"], feature_name):
            raise Forbidden(
                "Premium feature required",
                feature=feature_name,
                upgradeUrl=get_settings().upgrade_url,
            )
        return user

    return _require_feature
