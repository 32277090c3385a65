"""
Repositories - explicit query contracts over the ORM models.

Each repository wraps a caller-owned Session. Repositories add/flush but
never commit; the service that opened the unit of work decides when to
commit or roll back.
"""

from datetime import datetime
from typing import Optional, List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import Subscription, PaymentTransaction, PremiumFeature, PromoCode, PromoUsage, User
from app.schemas.schemas import SubscriptionStatus


class UserRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user


class SubscriptionRepository:

    def __init__(self, db: Session):
        self.db = db

    def get(self, subscription_id: int) -> Optional[Subscription]:
        return self.db.get(Subscription, subscription_id)

    def find_latest_by_user(self, user_id: int) -> Optional[Subscription]:
        """Most recently created subscription for the user; ties go to the higher id."""
        return (
            self.db.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc(), Subscription.subscription_id.desc())
            .first()
        )

    def find_active_by_user(self, user_id: int, now: datetime) -> Optional[Subscription]:
        """An active subscription whose end date is open or still in the future."""
        return (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.active.value,
                or_(Subscription.end_date.is_(None), Subscription.end_date > now),
            )
            .order_by(Subscription.created_at.desc(), Subscription.subscription_id.desc())
            .first()
        )

    def list_active_by_user(self, user_id: int, now: datetime) -> List[Subscription]:
        """Every active subscription of the user that has not run out."""
        return (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.active.value,
                or_(Subscription.end_date.is_(None), Subscription.end_date > now),
            )
            .order_by(Subscription.created_at.desc(), Subscription.subscription_id.desc())
            .all()
        )

    def list_lapsed(self, now: datetime) -> List[Subscription]:
        """Active subscriptions whose end date has passed."""
        return (
            self.db.query(Subscription)
            .filter(
                Subscription.status == SubscriptionStatus.active.value,
                Subscription.end_date.isnot(None),
                Subscription.end_date <= now,
            )
            .all()
        )

    def add(self, subscription: Subscription) -> Subscription:
        self.db.add(subscription)
        self.db.flush()
        return subscription


class TransactionRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_order_id(self, order_id: str) -> Optional[PaymentTransaction]:
        return (
            self.db.query(PaymentTransaction)
            .filter(PaymentTransaction.order_id == order_id)
            .first()
        )

    def list_by_user(self, user_id: int) -> List[PaymentTransaction]:
        return (
            self.db.query(PaymentTransaction)
            .filter(PaymentTransaction.user_id == user_id)
            .order_by(PaymentTransaction.created_at.desc(), PaymentTransaction.transaction_id.desc())
            .all()
        )

    def add(self, transaction: PaymentTransaction) -> PaymentTransaction:
        self.db.add(transaction)
        self.db.flush()
        return transaction


class FeatureRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_name(self, name: str) -> Optional[PremiumFeature]:
        return self.db.query(PremiumFeature).filter(PremiumFeature.name == name).first()

    def list_all(self) -> List[PremiumFeature]:
        return self.db.query(PremiumFeature).order_by(PremiumFeature.feature_id).all()

    def list_by_plan(self, plan_type: str) -> List[PremiumFeature]:
        return (
            self.db.query(PremiumFeature)
            .filter(PremiumFeature.plan_type == plan_type)
            .order_by(PremiumFeature.feature_id)
            .all()
        )


class PromoRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_redeemable(self, code: str, plan_type: str, now: datetime) -> Optional[PromoCode]:
        """Active code for plan_type whose window contains now."""
        return (
            self.db.query(PromoCode)
            .filter(
                PromoCode.code == code,
                PromoCode.is_active.is_(True),
                PromoCode.plan_type == plan_type,
                PromoCode.start_date <= now,
                PromoCode.end_date >= now,
            )
            .first()
        )

    def list_available(self, now: datetime, plan_type: Optional[str] = None) -> List[PromoCode]:
        query = self.db.query(PromoCode).filter(
            PromoCode.is_active.is_(True),
            PromoCode.start_date <= now,
            PromoCode.end_date >= now,
        )
        if plan_type:
            query = query.filter(PromoCode.plan_type == plan_type)
        return query.order_by(PromoCode.end_date).all()

    def add_usage(self, usage: PromoUsage) -> PromoUsage:
        self.db.add(usage)
        self.db.flush()
        return usage

    def list_usages_by_user(self, user_id: int) -> List[PromoUsage]:
        return (
            self.db.query(PromoUsage)
            .filter(PromoUsage.user_id == user_id)
            .order_by(PromoUsage.created_at.desc(), PromoUsage.usage_id.desc())
            .all()
        )
