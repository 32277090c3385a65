"""
Promo Service

Prices a checkout with a promo code and records redemptions.

A code applies when it is active, tagged with the plan being bought and
inside its start/end window. It is refused once current_uses reaches
max_uses, or when the undiscounted amount is below min_purchase.

Discounts:
- percentage: amount * value / 100, capped at max_discount when set
- fixed: value in IDR
Either way the discount never exceeds the amount.
"""

import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidPromoError
from app.db.repositories import PromoRepository
from app.models import PromoCode, PromoUsage, utcnow
from app.schemas.schemas import DiscountType, PlanType

logger = logging.getLogger(__name__)


def calculate_discount(promo: PromoCode, amount: int) -> int:
    if promo.discount_type == DiscountType.percentage.value:
        discount = amount * promo.discount_value // 100
        if promo.max_discount is not None:
            discount = min(discount, promo.max_discount)
    else:
        discount = promo.discount_value
    return max(0, min(discount, amount))


class PromoService:

    def __init__(self, db: Session):
        self.db = db
        self.promos = PromoRepository(db)

    def validate_and_apply(self, code: str, amount: int, plan_type: Union[str, PlanType]) -> dict:
        """
        Returns {"promo_id", "discount_amount", "final_amount"}.
        Raises InvalidPromoError when the code cannot be used for this purchase.
        """
        promo = self.promos.find_redeemable(code, PlanType(plan_type).value, utcnow())
        if promo is None:
            raise InvalidPromoError("Invalid promo code", promoCode=code)

        if promo.max_uses is not None and promo.current_uses >= promo.max_uses:
            raise InvalidPromoError("Promo code has reached maximum usage", promoCode=code)

        if promo.min_purchase and amount < promo.min_purchase:
            raise InvalidPromoError(f"Minimum purchase of {promo.min_purchase} required", promoCode=code)

        discount = calculate_discount(promo, amount)
        return {
            "promo_id": promo.promo_id,
            "discount_amount": discount,
            "final_amount": amount - discount,
        }

    def record_usage(self, user_id: int, promo_id: int, transaction_id: int, discount_amount: int) -> PromoUsage:
        """
        Add a usage row and bump the code's counter. Flushes only; the
        caller's unit of work commits.
        """
        usage = self.promos.add_usage(PromoUsage(
            user_id=user_id,
            promo_id=promo_id,
            transaction_id=transaction_id,
            discount_amount=discount_amount,
        ))
        # Atomic increment in SQL
        self.db.query(PromoCode).filter(PromoCode.promo_id == promo_id).update(
            {PromoCode.current_uses: PromoCode.current_uses + 1}, synchronize_session="fetch"
        )
        logger.info("Promo %s used by user %s on transaction %s", promo_id, user_id, transaction_id)
        return usage

    def get_available_promos(self, plan_type: Optional[Union[str, PlanType]] = None) -> List[PromoCode]:
        plan = PlanType(plan_type).value if plan_type else None
        return self.promos.list_available(utcnow(), plan)

    def get_user_promo_history(self, user_id: int) -> List[PromoUsage]:
        return self.promos.list_usages_by_user(user_id)
