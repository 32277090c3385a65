"""
Premium subscription tables.

Subscription status only moves forward:
    pending -> active | expired
    active  -> cancelled | expired
Payment transaction status is whatever the gateway last reported.
"""

from sqlalchemy import (
    Column, Integer, BigInteger, String, Text, DateTime, ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship, Session

from app.models.base import Base, utcnow
from app.schemas.schemas import PlanType, SubscriptionStatus, PaymentStatus


class Subscription(Base):
    """A user's plan and validity window."""
    __tablename__ = "premium_subscriptions"

    subscription_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    plan_type = Column(String(20), nullable=False)
    start_date = Column(DateTime, nullable=False, default=utcnow)
    end_date = Column(DateTime, nullable=True)  # NULL = open-ended
    status = Column(String(20), nullable=False, default=SubscriptionStatus.pending.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.pending.value)
    order_id = Column(String(100), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    transactions = relationship("PaymentTransaction", back_populates="subscription")

    __table_args__ = (
        Index("ix_premium_subscriptions_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Subscription {self.subscription_id} user={self.user_id} {self.plan_type}/{self.status}>"


class PaymentTransaction(Base):
    """One payment attempt for a subscription."""
    __tablename__ = "payment_transactions"

    transaction_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(100), nullable=False, unique=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    subscription_id = Column(
        Integer, ForeignKey("premium_subscriptions.subscription_id", ondelete="CASCADE"), nullable=False
    )
    amount = Column(BigInteger, nullable=False)
    status = Column(String(30), nullable=False, default="pending")
    payment_method = Column(String(50), nullable=True)
    payment_token = Column(String(255), nullable=True)
    payment_url = Column(Text, nullable=True)
    # Raw gateway callback, stored verbatim ("metadata" is reserved on declarative classes)
    gateway_metadata = Column("metadata", JSON, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    subscription = relationship("Subscription", back_populates="transactions")

    def __repr__(self):
        return f"<PaymentTransaction {self.order_id} {self.status}>"


class PremiumFeature(Base):
    """A named capability and the plan tier that unlocks it."""
    __tablename__ = "premium_features"

    feature_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    plan_type = Column(String(20), nullable=False)


DEFAULT_PREMIUM_FEATURES = [
    {"name": "Chat Support", "plan_type": PlanType.basic.value,
     "description": "Message recruiters and career advisors directly"},
    {"name": "Application Tracking", "plan_type": PlanType.basic.value,
     "description": "Follow every application through the hiring pipeline"},
    {"name": "Job Recommendations", "plan_type": PlanType.premium.value,
     "description": "Personalised job matches based on your profile"},
    {"name": "CV Review", "plan_type": PlanType.premium.value,
     "description": "Detailed feedback on your uploaded CV"},
    {"name": "Salary Insights", "plan_type": PlanType.premium.value,
     "description": "Compare salaries across companies and roles"},
    {"name": "Analytics Dashboard", "plan_type": PlanType.enterprise.value,
     "description": "Hiring funnel and job posting analytics"},
    {"name": "Featured Job Postings", "plan_type": PlanType.enterprise.value,
     "description": "Boost job postings to the top of search results"},
]


def seed_premium_features(db: Session) -> int:
    """Insert catalog entries that are missing. Returns number inserted."""
    existing = {name for (name,) in db.query(PremiumFeature.name).all()}
    added = 0
    for feature in DEFAULT_PREMIUM_FEATURES:
        if feature["name"] not in existing:
            db.add(PremiumFeature(**feature))
            added += 1
    db.commit()
    return added
