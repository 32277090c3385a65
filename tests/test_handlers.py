"""
Handlers that hit the database or the gateway must be plain functions so
FastAPI runs them in its threadpool instead of on the event loop.
"""

import inspect

import pytest
from fastapi.routing import APIRoute

from app.core.auth import get_current_user, get_current_admin
from app.core.premium_guard import require_active_subscription, require_premium_feature
from app.main import app


def blocking_routes():
    return [
        route for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api/")
    ]


@pytest.mark.parametrize("route", blocking_routes(), ids=lambda r: f"{sorted(r.methods)[0]} {r.path}")
def test_api_routes_are_sync(route):
    assert not inspect.iscoroutinefunction(route.endpoint)


@pytest.mark.parametrize("dependency", [
    get_current_user,
    get_current_admin,
    require_active_subscription,
    require_premium_feature("Job Recommendations"),
])
def test_auth_and_guard_dependencies_are_sync(dependency):
    assert not inspect.iscoroutinefunction(dependency)
