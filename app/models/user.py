from sqlalchemy import Column, Integer, String, Boolean, DateTime

from app.models.base import Base, utcnow


class User(Base):
    """Job seeker, employer or admin account."""
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # job_seeker, employer, admin
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
