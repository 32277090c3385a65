"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: ORM tables (app.models)
- Schemas: API contract (what client sends/receives) and shared enums
"""

from app.schemas.schemas import PlanType, SubscriptionStatus, PaymentStatus, UserRole

__all__ = ["PlanType", "SubscriptionStatus", "PaymentStatus", "UserRole"]
