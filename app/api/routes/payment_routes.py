"""
Payment Routes

POST /payment/create - Start a paid subscription (Midtrans Snap)
POST /payment/notification - Midtrans webhook
GET /payment/status/{order_id} - Transaction status and history
GET /payment/history - Current user's transactions
GET /payment/promos - Promo codes currently redeemable (optionally by plan)
GET /payment/promos/history - Current user's promo redemptions
"""

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.db.postgres import get_db
from app.core.auth import get_current_user
from app.services.midtrans_client import MidtransClient, get_midtrans_client
from app.services.payment_history_service import PaymentHistoryService, get_payment_history_service
from app.services.payment_service import PaymentService
from app.services.promo_service import PromoService
from app.schemas.schemas import (
    PlanType, PaymentCreateRequest, PaymentCreateResponse, PaymentNotification, TransactionResponse,
    TransactionStatusResponse, PaymentHistoryEntry, PromoCodeResponse, PromoUsageResponse, MessageResponse
)

router = APIRouter(prefix="/payment", tags=["Payment"])


def get_payment_service(
    db: Session = Depends(get_db),
    gateway: MidtransClient = Depends(get_midtrans_client),
    history: PaymentHistoryService = Depends(get_payment_history_service),
) -> PaymentService:
    return PaymentService(db, gateway=gateway, history=history)


@router.post("/create", response_model=PaymentCreateResponse, status_code=201)
def create_payment(
    request: PaymentCreateRequest,
    user: dict = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    """
    Create a pending subscription and a Midtrans Snap session.

    Redirect the browser to redirect_url; the subscription turns active when
    Midtrans confirms the payment through /payment/notification.
    An optional promoCode discounts the amount (400 if it cannot be used).
    """
    result = service.create_payment_transaction(
        user["user_id"], request.plan_type, request.duration, promo_code=request.promo_code
    )
    return PaymentCreateResponse(
        transaction_id=result["transaction_id"],
        order_id=result["order_id"],
        amount=result["amount"],
        discount_amount=result["discount_amount"],
        token=result["token"],
        redirect_url=result.get("redirect_url")
    )


@router.post("/notification", response_model=MessageResponse)
def payment_notification(
    notification: PaymentNotification,
    x_signature_key: Optional[str] = Header(None),
    service: PaymentService = Depends(get_payment_service)
):
    """
    Midtrans HTTP notification.

    Signature is only checked when MIDTRANS_VERIFY_SIGNATURE is enabled.
    """
    service.handle_payment_notification(notification.model_dump(exclude_unset=True), signature=x_signature_key)
    return MessageResponse(message="Notification processed")


@router.get("/status/{order_id}", response_model=TransactionStatusResponse)
def payment_status(
    order_id: str,
    user: dict = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    """Status of one of the user's transactions, with gateway history (newest first)."""
    result = service.get_transaction_status(user["user_id"], order_id)
    transaction = TransactionResponse.model_validate(result["transaction"])
    return TransactionStatusResponse(
        **transaction.model_dump(),
        history=[PaymentHistoryEntry(**entry) for entry in result["history"]]
    )


@router.get("/history", response_model=List[TransactionResponse])
def payment_history(
    user: dict = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    """All of the user's payment transactions, newest first."""
    return service.get_user_transactions(user["user_id"])


@router.get("/promos", response_model=List[PromoCodeResponse])
def list_promos(
    plan_type: Optional[PlanType] = Query(None, description="Only codes for this plan"),
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Promo codes that are active and inside their validity window."""
    return PromoService(db).get_available_promos(plan_type)


@router.get("/promos/history", response_model=List[PromoUsageResponse])
def promo_history(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Promo codes the user has redeemed, newest first."""
    return PromoService(db).get_user_promo_history(user["user_id"])
