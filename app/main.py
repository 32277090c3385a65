"""
Job Board Premium Backend - Main Application

FastAPI backend with:
- PostgreSQL for users, subscriptions, payment transactions, feature catalog
- MongoDB for payment history documents
- Midtrans Snap for hosted checkout
- JWT authentication

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.exceptions import AppError, app_error_handler, unhandled_error_handler
from app.core.logging import configure_logging
from app.db.mongodb import init_mongo_indexes
from app.db.postgres import get_db_session, init_db
from app.models import seed_premium_features

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Board Premium API",
    description="""
    Premium subscriptions for the job board.

    ## Features
    - **Authentication**: JWT-based auth for job seekers, employers and admins
    - **Premium**: Feature catalog, subscription status, direct grants, cancellation
    - **Payment**: Midtrans Snap checkout and webhook reconciliation
    - **Gated routes**: Chat (any active plan), job recommendations (feature-gated)

    ## Databases
    - PostgreSQL: Structured data (users, subscriptions, transactions, features)
    - MongoDB: Payment history (gateway responses and notifications)
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create tables, seed the feature catalog and MongoDB indexes."""
    init_db()
    with get_db_session() as db:
        added = seed_premium_features(db)
    if added:
        logger.info("Seeded %d premium features", added)

    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Job Board Premium API"}


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    from app.db.postgres import test_postgres_connection
    from app.db.mongodb import test_mongo_connection

    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
