# tests/conftest.py
import os
from datetime import timedelta

# Keep the app off real servers while tests import it
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DEBUG", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.auth import create_access_token
from app.core.exceptions import GatewayError
from app.db.postgres import get_db
from app.main import app
from app.models import Base, PromoCode, User, seed_premium_features, utcnow
from app.services.midtrans_client import get_midtrans_client
from app.services.payment_history_service import PaymentHistoryService, get_payment_history_service


class FakeGateway:
    """Stands in for MidtransClient; records every create_transaction call."""

    def __init__(self):
        self.calls = []
        self.error = None

    def create_transaction(self, order_id, gross_amount, customer_details=None, expiry_hours=None):
        self.calls.append({
            "order_id": order_id,
            "gross_amount": gross_amount,
            "customer_details": customer_details,
            "expiry_hours": expiry_hours,
        })
        if self.error:
            raise self.error
        return {
            "token": f"snap-token-{len(self.calls)}",
            "redirect_url": f"https://app.sandbox.midtrans.com/snap/v4/redirection/snap-token-{len(self.calls)}",
        }

    def fail_with(self, message="Access denied due to unauthorized transaction"):
        self.error = GatewayError(detail=message)


class FakeCursor:

    def __init__(self, docs):
        self.docs = docs

    def sort(self, key, direction):
        return FakeCursor(sorted(self.docs, key=lambda d: d[key], reverse=direction < 0))

    def __iter__(self):
        return iter(self.docs)


class FakeCollection:
    """The slice of pymongo's Collection API PaymentHistoryService uses."""

    def __init__(self):
        self.docs = []

    def insert_one(self, doc):
        self.docs.append(dict(doc))

    def find(self, query, projection=None):
        matched = [d for d in self.docs if all(d.get(k) == v for k, v in query.items())]
        if projection:
            keep = [k for k, v in projection.items() if v]
            matched = [{k: d[k] for k in keep if k in d} for d in matched]
        return FakeCursor(matched)


@pytest.fixture(scope="function")
def db_session():
    """Isolated in-memory SQLite session with the feature catalog seeded."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = SessionLocal()
    seed_premium_features(session)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def history_collection():
    return FakeCollection()


@pytest.fixture
def history(history_collection):
    return PaymentHistoryService(collection=history_collection)


@pytest.fixture
def make_user(db_session):
    def _make_user(email="seeker@example.com", role="job_seeker", is_active=True):
        user = User(email=email, password_hash="not-a-real-hash", role=role, is_active=is_active)
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def make_promo(db_session):
    def _make_promo(code="HEMAT10", plan_type="premium", discount_type="percentage", discount_value=10, **fields):
        now = utcnow()
        fields.setdefault("start_date", now - timedelta(days=1))
        fields.setdefault("end_date", now + timedelta(days=30))
        promo = PromoCode(
            code=code, plan_type=plan_type, discount_type=discount_type,
            discount_value=discount_value, **fields
        )
        db_session.add(promo)
        db_session.commit()
        return promo
    return _make_promo


def auth_headers(user_id):
    token = create_access_token({"sub": str(user_id), "role": "job_seeker"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(db_session, gateway, history):
    """TestClient wired to the test session, fake gateway and fake history."""

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_midtrans_client] = lambda: gateway
    app.dependency_overrides[get_payment_history_service] = lambda: history
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    return auth_headers
