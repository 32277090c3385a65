"""
Subscription service: active checks, feature access, grants, cancellation,
and the forward-only status rules.
"""

from datetime import timedelta

import pytest

from app.core.exceptions import NotFoundError, InvalidTransitionError
from app.models import Subscription, utcnow
from app.services.subscription_service import SubscriptionService, transition, can_transition


def add_subscription(db, user_id, plan_type="basic", status="active", end_delta=timedelta(days=10), created_at=None):
    now = utcnow()
    subscription = Subscription(
        user_id=user_id,
        plan_type=plan_type,
        start_date=now,
        end_date=(now + end_delta) if end_delta is not None else None,
        status=status,
        payment_status="success",
        created_at=created_at or now,
    )
    db.add(subscription)
    db.commit()
    return subscription


class TestActiveSubscription:

    def test_no_rows_means_inactive(self, db_session, user):
        service = SubscriptionService(db_session)
        assert service.has_active_subscription(user.user_id) is False
        assert service.get_user_subscription(user.user_id) is None

    def test_active_with_future_end(self, db_session, user):
        add_subscription(db_session, user.user_id, end_delta=timedelta(days=5))
        assert SubscriptionService(db_session).has_active_subscription(user.user_id) is True

    def test_active_with_past_end_is_not_active(self, db_session, user):
        add_subscription(db_session, user.user_id, end_delta=timedelta(days=-1))
        assert SubscriptionService(db_session).has_active_subscription(user.user_id) is False

    def test_active_open_ended(self, db_session, user):
        add_subscription(db_session, user.user_id, end_delta=None)
        assert SubscriptionService(db_session).has_active_subscription(user.user_id) is True

    @pytest.mark.parametrize("status", ["pending", "cancelled", "expired"])
    def test_other_statuses_are_not_active(self, db_session, user, status):
        add_subscription(db_session, user.user_id, status=status)
        assert SubscriptionService(db_session).has_active_subscription(user.user_id) is False

    def test_other_users_subscription_does_not_count(self, db_session, make_user):
        alice = make_user("alice@example.com")
        bob = make_user("bob@example.com")
        add_subscription(db_session, alice.user_id)
        assert SubscriptionService(db_session).has_active_subscription(bob.user_id) is False


class TestLatestSubscription:

    def test_returns_most_recently_created(self, db_session, user):
        now = utcnow()
        add_subscription(db_session, user.user_id, plan_type="basic", created_at=now - timedelta(days=40))
        newest = add_subscription(db_session, user.user_id, plan_type="premium", created_at=now)
        add_subscription(db_session, user.user_id, plan_type="enterprise", created_at=now - timedelta(days=1))

        latest = SubscriptionService(db_session).get_user_subscription(user.user_id)
        assert latest.subscription_id == newest.subscription_id
        assert latest.plan_type == "premium"

    def test_same_timestamp_prefers_higher_id(self, db_session, user):
        now = utcnow()
        add_subscription(db_session, user.user_id, plan_type="basic", created_at=now)
        second = add_subscription(db_session, user.user_id, plan_type="premium", created_at=now)

        latest = SubscriptionService(db_session).get_user_subscription(user.user_id)
        assert latest.subscription_id == second.subscription_id


class TestFeatureAccess:

    def test_exact_plan_match_grants_access(self, db_session, user):
        add_subscription(db_session, user.user_id, plan_type="premium")
        assert SubscriptionService(db_session).has_feature_access(user.user_id, "Job Recommendations") is True

    @pytest.mark.parametrize("plan_type", ["basic", "enterprise"])
    def test_other_plans_do_not_match(self, db_session, user, plan_type):
        # No tier ordering: enterprise does not include premium features
        add_subscription(db_session, user.user_id, plan_type=plan_type)
        assert SubscriptionService(db_session).has_feature_access(user.user_id, "Job Recommendations") is False

    def test_no_subscription(self, db_session, user):
        assert SubscriptionService(db_session).has_feature_access(user.user_id, "Job Recommendations") is False

    def test_unknown_feature(self, db_session, user):
        add_subscription(db_session, user.user_id, plan_type="premium")
        assert SubscriptionService(db_session).has_feature_access(user.user_id, "Teleportation") is False

    def test_pending_subscription_does_not_unlock(self, db_session, user):
        add_subscription(db_session, user.user_id, plan_type="premium", status="pending")
        assert SubscriptionService(db_session).has_feature_access(user.user_id, "Job Recommendations") is False

    def test_uses_newest_live_subscription(self, db_session, user):
        now = utcnow()
        add_subscription(db_session, user.user_id, plan_type="premium", created_at=now - timedelta(days=2))
        add_subscription(db_session, user.user_id, plan_type="basic", created_at=now)
        assert SubscriptionService(db_session).has_feature_access(user.user_id, "Job Recommendations") is False

    @pytest.mark.parametrize("status", ["pending", "expired"])
    def test_newer_checkout_does_not_hide_running_plan(self, db_session, user, status):
        now = utcnow()
        add_subscription(db_session, user.user_id, plan_type="premium", created_at=now - timedelta(hours=1))
        add_subscription(db_session, user.user_id, plan_type="basic", status=status, created_at=now)

        service = SubscriptionService(db_session)
        assert service.get_user_subscription(user.user_id).status == status
        assert service.has_feature_access(user.user_id, "Job Recommendations") is True

    def test_cancelled_plan_does_not_unlock(self, db_session, user):
        add_subscription(db_session, user.user_id, plan_type="premium", status="cancelled")
        assert SubscriptionService(db_session).has_feature_access(user.user_id, "Job Recommendations") is False

    def test_features_by_plan(self, db_session):
        names = {f.name for f in SubscriptionService(db_session).get_features_by_plan("premium")}
        assert "Job Recommendations" in names
        assert "Chat Support" not in names


class TestCreateAndCancel:

    def test_create_subscription_scenario(self, db_session, user):
        service = SubscriptionService(db_session)
        before = utcnow()

        subscription = service.create_subscription(user.user_id, "basic", 30)

        assert subscription.status == "active"
        assert subscription.payment_status == "success"
        assert subscription.plan_type == "basic"
        expected_end = before + timedelta(days=30)
        assert abs((subscription.end_date - expected_end).total_seconds()) < 5
        assert service.has_active_subscription(user.user_id) is True

    def test_create_rejects_unknown_plan(self, db_session, user):
        with pytest.raises(ValueError):
            SubscriptionService(db_session).create_subscription(user.user_id, "platinum", 30)

    def test_cancel_scenario(self, db_session, user):
        service = SubscriptionService(db_session)
        service.create_subscription(user.user_id, "basic", 30)

        [cancelled] = service.cancel_subscription(user.user_id)

        assert cancelled.status == "cancelled"
        assert service.get_user_subscription(user.user_id).status == "cancelled"
        assert service.has_active_subscription(user.user_id) is False

    def test_cancel_covers_every_live_subscription(self, db_session, user):
        service = SubscriptionService(db_session)
        first = service.create_subscription(user.user_id, "basic", 30)
        second = service.create_subscription(user.user_id, "premium", 30)
        lapsed = add_subscription(db_session, user.user_id, end_delta=timedelta(days=-1))

        cancelled = service.cancel_subscription(user.user_id)

        assert {s.subscription_id for s in cancelled} == {first.subscription_id, second.subscription_id}
        assert service.has_active_subscription(user.user_id) is False
        assert service.has_feature_access(user.user_id, "Job Recommendations") is False
        db_session.refresh(lapsed)
        assert lapsed.status == "active"

    def test_cancel_without_active_subscription(self, db_session, user):
        with pytest.raises(NotFoundError):
            SubscriptionService(db_session).cancel_subscription(user.user_id)

    def test_expire_lapsed(self, db_session, user):
        lapsed = add_subscription(db_session, user.user_id, end_delta=timedelta(hours=-1))
        live = add_subscription(db_session, user.user_id, end_delta=timedelta(days=3))

        count = SubscriptionService(db_session).expire_lapsed_subscriptions()

        assert count == 1
        db_session.refresh(lapsed)
        db_session.refresh(live)
        assert lapsed.status == "expired"
        assert live.status == "active"


class TestTransitions:

    @pytest.mark.parametrize("current,new", [
        ("pending", "active"),
        ("pending", "expired"),
        ("active", "cancelled"),
        ("active", "expired"),
        ("active", "active"),
    ])
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize("current,new", [
        ("active", "pending"),
        ("cancelled", "active"),
        ("expired", "active"),
        ("expired", "pending"),
        ("pending", "cancelled"),
    ])
    def test_rejected(self, current, new):
        assert not can_transition(current, new)

    def test_transition_raises_on_reverse(self, db_session, user):
        subscription = add_subscription(db_session, user.user_id, status="expired")
        with pytest.raises(InvalidTransitionError):
            transition(subscription, "active")
        assert subscription.status == "expired"

    def test_same_status_is_noop(self, db_session, user):
        subscription = add_subscription(db_session, user.user_id, status="active")
        assert transition(subscription, "active") is False
