"""
Authentication Routes

POST /auth/register - Register new user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from app.db.postgres import get_db
from app.db.repositories import UserRepository
from app.core.auth import hash_password, verify_password, create_access_token, get_current_user
from app.models import User
from app.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user account (job seeker, employer or admin).

    After registration, login to get access token.
    """
    users = UserRepository(db)
    if users.find_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    users.add(User(
        email=request.email,
        password_hash=hash_password(request.password),
        role=request.role.value
    ))
    db.commit()

    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = UserRepository(db).find_by_email(request.email)

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    if not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(data={"sub": str(user.user_id), "role": user.role})

    return TokenResponse(access_token=token, user_id=user.user_id, role=user.role)


@router.get("/me", response_model=UserResponse)
def get_me(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get current authenticated user's info."""
    return UserRepository(db).get(user["user_id"])
