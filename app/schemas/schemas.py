"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Request bodies for subscribe/payment accept the camelCase keys the web
client sends (planType, duration, promoCode).
"""

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from typing import Annotated, Optional, List, Any, Dict
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    job_seeker = "job_seeker"
    employer = "employer"
    admin = "admin"


class PlanType(str, Enum):
    basic = "basic"
    premium = "premium"
    enterprise = "enterprise"


class SubscriptionStatus(str, Enum):
    pending = "pending"
    active = "active"
    cancelled = "cancelled"
    expired = "expired"


class PaymentStatus(str, Enum):
    pending = "pending"
    success = "success"
    failed = "failed"
    expired = "expired"


class DiscountType(str, Enum):
    percentage = "percentage"
    fixed = "fixed"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.job_seeker

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    email: str
    role: str
    is_active: bool
    created_at: datetime


# ============================================================
# PREMIUM SCHEMAS
# ============================================================

class SubscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_type: PlanType = Field(..., alias="planType")
    duration: int = Field(..., ge=1, le=3650, description="Duration in days")

class PremiumFeatureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    feature_id: int
    name: str
    description: Optional[str] = None
    plan_type: str

class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subscription_id: int
    user_id: int
    plan_type: str
    start_date: datetime
    end_date: Optional[datetime] = None
    status: str
    payment_status: str
    order_id: Optional[str] = None
    created_at: datetime


# ============================================================
# PAYMENT SCHEMAS
# ============================================================

class PaymentCreateRequest(SubscribeRequest):
    promo_code: Optional[str] = Field(None, alias="promoCode", max_length=50)

class PaymentCreateResponse(BaseModel):
    transaction_id: int
    order_id: str
    amount: int
    discount_amount: int = 0
    token: str
    redirect_url: Optional[str] = None


def _as_text(value):
    if value is None or isinstance(value, str):
        return value
    return str(value)


# Signature input: gateways may send numbers where strings are documented
GatewayText = Annotated[Optional[str], BeforeValidator(_as_text)]

class PaymentNotification(BaseModel):
    """
    Gateway webhook payload. order_id and transaction_status are required;
    every other field (known or not) is kept and stored verbatim.
    """
    model_config = ConfigDict(extra="allow")

    order_id: str
    transaction_status: str
    fraud_status: Optional[str] = None
    payment_type: Optional[str] = None
    status_code: GatewayText = None
    gross_amount: GatewayText = None
    signature_key: Optional[str] = None

class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    transaction_id: int
    order_id: str
    user_id: int
    subscription_id: int
    amount: int
    status: str
    payment_method: Optional[str] = None
    payment_url: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: datetime

class PaymentHistoryEntry(BaseModel):
    status: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime

class TransactionStatusResponse(TransactionResponse):
    history: List[PaymentHistoryEntry] = []


# ============================================================
# PROMO SCHEMAS
# ============================================================

class PromoCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    promo_id: int
    code: str
    description: Optional[str] = None
    plan_type: str
    discount_type: str
    discount_value: int
    max_discount: Optional[int] = None
    min_purchase: Optional[int] = None
    start_date: datetime
    end_date: datetime

class PromoUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    usage_id: int
    promo_id: int
    transaction_id: int
    discount_amount: int
    created_at: datetime


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    message: str
