"""
Models module - SQLAlchemy ORM models for the relational store.

Tables:
- users
- premium_subscriptions
- payment_transactions
- premium_features
- promo_codes
- promo_usages
"""

from app.models.base import Base, utcnow
from app.models.user import User
from app.models.premium import (
    Subscription,
    PaymentTransaction,
    PremiumFeature,
    DEFAULT_PREMIUM_FEATURES,
    seed_premium_features,
)
from app.models.promo import PromoCode, PromoUsage

__all__ = [
    "Base",
    "utcnow",
    "User",
    "Subscription",
    "PaymentTransaction",
    "PremiumFeature",
    "PromoCode",
    "PromoUsage",
    "DEFAULT_PREMIUM_FEATURES",
    "seed_premium_features",
]
