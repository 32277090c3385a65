"""
Payment Service

Buying a plan:
1. Price the plan (per-day tier price x duration), minus any promo discount
2. Insert a pending subscription + pending transaction
3. Ask Midtrans Snap for a checkout session
4. Store the Snap token/redirect URL on the transaction, record promo usage

Steps 2-4 are one unit of work: nothing is committed until Midtrans has
answered. If Midtrans fails, the attempt is closed out (transaction
"failed", subscription "expired"/"failed") and GatewayError propagates, so
no pending subscription is left dangling. History entries are written only
once the relational side has been committed.

Reconciling:
Midtrans later POSTs a notification. The transaction takes the gateway's
status verbatim; the subscription only moves on a capture with an accepted
fraud check (-> active) or an expiry (-> expired). Notifications are NOT
deduplicated: a replay re-applies the same writes and adds another history
entry.
"""

import logging
import time
import uuid
from datetime import timedelta
from typing import Optional, List, Union

from sqlalchemy.orm import Session

from app.core.config import get_settings, Settings
from app.core.exceptions import GatewayError, NotFoundError, Forbidden
from app.db.repositories import SubscriptionRepository, TransactionRepository
from app.models import Subscription, PaymentTransaction, utcnow
from app.schemas.schemas import PlanType, SubscriptionStatus, PaymentStatus
from app.services.midtrans_client import MidtransClient, get_midtrans_client, verify_signature
from app.services.payment_history_service import PaymentHistoryService
from app.services.promo_service import PromoService
from app.services.subscription_service import can_transition, transition

logger = logging.getLogger(__name__)


# Price per day, IDR
PLAN_PRICES = {
    PlanType.basic.value: 50000,
    PlanType.premium.value: 150000,
    PlanType.enterprise.value: 500000,
}

CAPTURE_STATUS = "capture"
FRAUD_ACCEPT = "accept"
EXPIRED_STATUS = "expire"


def calculate_amount(plan_type: Union[str, PlanType], duration_days: int) -> int:
    return PLAN_PRICES[PlanType(plan_type).value] * duration_days


def generate_order_id(user_id: int) -> str:
    """ORDER-<user>-<epoch millis>-<8 hex chars>"""
    timestamp = int(time.time() * 1000)
    return f"ORDER-{user_id}-{timestamp}-{uuid.uuid4().hex[:8]}"


def is_successful_payment(transaction_status: str, fraud_status: Optional[str]) -> bool:
    """Only a capture that passed the fraud check activates a subscription."""
    return transaction_status == CAPTURE_STATUS and fraud_status == FRAUD_ACCEPT


class PaymentService:
    """
    Premium payments over an injected Session, gateway and history log.
    """

    def __init__(
        self,
        db: Session,
        gateway: Optional[MidtransClient] = None,
        history: Optional[PaymentHistoryService] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.gateway = gateway or get_midtrans_client()
        self.history = history or PaymentHistoryService()
        self.settings = settings or get_settings()
        self.subscriptions = SubscriptionRepository(db)
        self.transactions = TransactionRepository(db)
        self.promos = PromoService(db)

    def create_payment_transaction(
        self,
        user_id: int,
        plan_type: Union[str, PlanType],
        duration_days: int,
        promo_code: Optional[str] = None,
    ) -> dict:
        """
        Start a paid subscription.

        Returns the Snap response plus transaction_id, order_id, amount and
        discount_amount. Raises InvalidPromoError for an unusable promo code
        (nothing is written) and GatewayError if Midtrans could not create
        the session.
        """
        plan_type = PlanType(plan_type).value
        order_id = generate_order_id(user_id)
        amount = calculate_amount(plan_type, duration_days)
        discount = 0
        promo_id = None
        if promo_code:
            quote = self.promos.validate_and_apply(promo_code, amount, plan_type)
            amount = quote["final_amount"]
            discount = quote["discount_amount"]
            promo_id = quote["promo_id"]
        now = utcnow()
        requested = {
            "plan_type": plan_type,
            "duration": duration_days,
            "amount": amount,
            "promo_code": promo_code,
            "discount_amount": discount,
        }

        try:
            subscription = self.subscriptions.add(Subscription(
                user_id=user_id,
                plan_type=plan_type,
                start_date=now,
                end_date=now + timedelta(days=duration_days),
                status=SubscriptionStatus.pending.value,
                payment_status=PaymentStatus.pending.value,
                order_id=order_id,
                created_at=now,
            ))
            transaction = self.transactions.add(PaymentTransaction(
                user_id=user_id,
                subscription_id=subscription.subscription_id,
                order_id=order_id,
                amount=amount,
                status="pending",
                expires_at=now + timedelta(hours=self.settings.payment_expiry_hours),
                created_at=now,
            ))

            try:
                response = self.gateway.create_transaction(
                    order_id=order_id,
                    gross_amount=amount,
                    customer_details={"user_id": str(user_id)},
                    expiry_hours=self.settings.payment_expiry_hours,
                )
            except GatewayError as e:
                self._close_failed_attempt(subscription, transaction, requested, e)
                raise

            transaction.payment_token = response.get("token")
            transaction.payment_url = response.get("redirect_url")
            if promo_id is not None:
                self.promos.record_usage(user_id, promo_id, transaction.transaction_id, discount)
            self.db.commit()
        except GatewayError:
            raise
        except Exception:
            self.db.rollback()
            raise

        self.history.record(transaction.transaction_id, order_id, "requested", requested)
        self.history.record(transaction.transaction_id, order_id, "pending", response)
        logger.info(
            "Created payment %s for user %s: %s x %s days = %s (discount %s)",
            order_id, user_id, plan_type, duration_days, amount, discount,
        )
        return {
            **response,
            "transaction_id": transaction.transaction_id,
            "order_id": order_id,
            "amount": amount,
            "discount_amount": discount,
        }

    def _close_failed_attempt(
        self,
        subscription: Subscription,
        transaction: PaymentTransaction,
        requested: dict,
        error: GatewayError,
    ):
        transaction.status = "failed"
        transition(subscription, SubscriptionStatus.expired)
        subscription.payment_status = PaymentStatus.failed.value
        self.db.commit()
        self.history.record(transaction.transaction_id, transaction.order_id, "requested", requested)
        self.history.record(
            transaction.transaction_id, transaction.order_id, "failed",
            {"error": error.message, **error.extra},
        )
        logger.error("Payment %s failed at the gateway: %s", transaction.order_id, error.extra or error.message)

    def handle_payment_notification(self, payload: dict, signature: Optional[str] = None) -> dict:
        """
        Apply a Midtrans notification.

        Raises Forbidden if signature checking is enabled and the signature
        does not match, NotFoundError if the order id is unknown.
        """
        if self.settings.midtrans_verify_signature:
            signature = signature or payload.get("signature_key")
            if not verify_signature(payload, signature, self.settings.midtrans_server_key):
                logger.warning("Rejected notification for %s: bad signature", payload.get("order_id"))
                raise Forbidden("Invalid webhook signature")

        order_id = payload.get("order_id")
        transaction = self.transactions.find_by_order_id(order_id)
        if transaction is None:
            raise NotFoundError("Transaction not found", order_id=order_id)

        transaction_status = payload.get("transaction_status")
        fraud_status = payload.get("fraud_status")
        logger.info("Notification for %s: %s (fraud=%s)", order_id, transaction_status, fraud_status)

        self.history.record(transaction.transaction_id, order_id, transaction_status, payload)

        transaction.status = transaction_status
        transaction.payment_method = payload.get("payment_type")
        transaction.gateway_metadata = dict(payload)

        subscription = transaction.subscription
        if is_successful_payment(transaction_status, fraud_status):
            self._move_subscription(subscription, SubscriptionStatus.active, PaymentStatus.success)
        elif transaction_status == EXPIRED_STATUS:
            self._move_subscription(subscription, SubscriptionStatus.expired, PaymentStatus.expired)

        self.db.commit()
        return {"success": True}

    def _move_subscription(self, subscription: Subscription, status: SubscriptionStatus, payment_status: PaymentStatus):
        if not can_transition(subscription.status, status.value):
            logger.warning(
                "Ignoring %s -> %s for subscription %s",
                subscription.status, status.value, subscription.subscription_id,
            )
            return
        transition(subscription, status)
        subscription.payment_status = payment_status.value

    def get_transaction_status(self, user_id: int, order_id: str) -> dict:
        """The user's transaction and its history, newest entry first."""
        transaction = self.transactions.find_by_order_id(order_id)
        if transaction is None or transaction.user_id != user_id:
            raise NotFoundError("Transaction not found", order_id=order_id)
        return {
            "transaction": transaction,
            "history": self.history.get_by_transaction(transaction.transaction_id),
        }

    def get_user_transactions(self, user_id: int) -> List[PaymentTransaction]:
        return self.transactions.list_by_user(user_id)
