"""
Promo code tables.

A promo code discounts one plan type within a date window. Each redemption
is a PromoUsage row tied to the payment transaction it discounted.
"""

from sqlalchemy import Column, Integer, BigInteger, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.models.base import Base, utcnow
from app.schemas.schemas import DiscountType


class PromoCode(Base):
    __tablename__ = "promo_codes"

    promo_id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    plan_type = Column(String(20), nullable=False)
    discount_type = Column(String(20), nullable=False, default=DiscountType.percentage.value)
    # Percent (0-100) or IDR, depending on discount_type
    discount_value = Column(BigInteger, nullable=False)
    max_discount = Column(BigInteger, nullable=True)
    min_purchase = Column(BigInteger, nullable=True)
    max_uses = Column(Integer, nullable=True)  # NULL = unlimited
    current_uses = Column(Integer, nullable=False, default=0)
    start_date = Column(DateTime, nullable=False, default=utcnow)
    end_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    usages = relationship("PromoUsage", back_populates="promo")

    def __repr__(self):
        return f"<PromoCode {self.code} {self.plan_type} {self.current_uses}/{self.max_uses}>"


class PromoUsage(Base):
    __tablename__ = "promo_usages"

    usage_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    promo_id = Column(Integer, ForeignKey("promo_codes.promo_id", ondelete="CASCADE"), nullable=False)
    transaction_id = Column(
        Integer, ForeignKey("payment_transactions.transaction_id", ondelete="CASCADE"), nullable=False
    )
    discount_amount = Column(BigInteger, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    promo = relationship("PromoCode", back_populates="usages")
