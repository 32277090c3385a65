"""
Application errors and their HTTP handlers.

Services raise these; app.main registers the handlers so every error leaves
the API as JSON: {"message": ..., **extra}.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class InvalidTransitionError(AppError):
    """Subscription status change that would move backwards."""
    status_code = 409
    default_message = "Invalid subscription status transition"


class InvalidPromoError(AppError):
    """Promo code unknown, out of its window, used up or below minimum purchase."""
    status_code = 400
    default_message = "Invalid promo code"


class GatewayError(AppError):
    """Payment gateway call failed (network, HTTP error or bad response)."""
    status_code = 500
    default_message = "Failed to create payment transaction"


async def app_error_handler(request: Request, exc: AppError):
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(level, "%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message, **exc.extra})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})
