"""
Premium Routes

GET /premium/features - Premium feature catalog (optionally by plan)
GET /premium/subscription - Current user's latest subscription
POST /premium/subscribe - Grant a subscription directly (no payment)
POST /premium/cancel - Cancel every active subscription
GET /premium/chat/messages - Chat (any active subscription)
GET /premium/recommendations - Job recommendations ("Job Recommendations" feature)
POST /premium/admin/expire - Expire lapsed subscriptions (admin only)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.db.postgres import get_db
from app.core.auth import get_current_user, get_current_admin
from app.core.premium_guard import require_active_subscription, require_premium_feature
from app.services.subscription_service import SubscriptionService
from app.schemas.schemas import (
    PlanType, SubscribeRequest, SubscriptionResponse, PremiumFeatureResponse, MessageResponse
)

router = APIRouter(prefix="/premium", tags=["Premium"])


@router.get("/features", response_model=List[PremiumFeatureResponse])
def list_features(
    plan_type: Optional[PlanType] = Query(None, description="Only features unlocked by this plan"),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List premium features and the plan each one belongs to."""
    service = SubscriptionService(db)
    if plan_type:
        return service.get_features_by_plan(plan_type)
    return service.get_all_premium_features()


@router.get("/subscription", response_model=Optional[SubscriptionResponse])
def get_subscription(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Latest subscription (any status), or null if the user never subscribed."""
    return SubscriptionService(db).get_user_subscription(user["user_id"])


@router.post("/subscribe", response_model=SubscriptionResponse, status_code=201)
def subscribe(request: SubscribeRequest, user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Create an active subscription without going through payment.

    Paid subscriptions go through POST /payment/create instead.
    """
    return SubscriptionService(db).create_subscription(user["user_id"], request.plan_type, request.duration)


@router.post("/cancel", response_model=MessageResponse)
def cancel(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Cancel every active subscription of the user."""
    SubscriptionService(db).cancel_subscription(user["user_id"])
    return MessageResponse(message="Subscription cancelled successfully")


@router.get("/chat/messages", response_model=MessageResponse)
def chat_messages(user: dict = Depends(require_active_subscription)):
    """Chat with recruiters. Requires any active subscription."""
    return MessageResponse(message="Chat messages retrieved")


@router.get("/recommendations", response_model=MessageResponse)
def recommendations(user: dict = Depends(require_premium_feature("Job Recommendations"))):
    """Personalised job recommendations. Requires the plan tagged on "Job Recommendations"."""
    return MessageResponse(message="Job recommendations retrieved")


@router.post("/admin/expire", response_model=MessageResponse)
def expire_lapsed(admin: dict = Depends(get_current_admin), db: Session = Depends(get_db)):
    """Flip active subscriptions past their end date to expired."""
    count = SubscriptionService(db).expire_lapsed_subscriptions()
    return MessageResponse(message=f"Expired {count} subscriptions")
