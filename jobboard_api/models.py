import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from .db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JobORM(Base):
    __tablename__ = "jobs"
    id = Column(String(36), primary_key=True, default=_uuid)
    employer_id = Column(String(36), nullable=False, index=True)
    title = Column(String(512), nullable=False)
    company = Column(String(256), nullable=False)
    location = Column(String(256), nullable=False)
    type = Column(String(32), nullable=False)                # full-time | part-time | contract | remote
    category = Column(String(128), nullable=False)
    experience_level = Column(String(32), nullable=False)    # entry | mid | senior | executive
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    currency = Column(String(8), nullable=False, default="$")
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=False)
    benefits = Column(Text, nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    status = Column(String(16), nullable=False, default="active", index=True)
    applications_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)


class ApplicationORM(Base):
    __tablename__ = "applications"
    id = Column(String(36), primary_key=True, default=_uuid)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False)
    candidate_id = Column(String(36), nullable=False, index=True)
    cover_letter = Column(Text, nullable=False)
    resume_url = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    __table_args__ = (
        UniqueConstraint("job_id", "candidate_id", name="uq_applications_job_candidate"),
    )


class UserORM(Base):
    """Credentials; the hosted service keeps these in its own auth schema."""
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(320), nullable=False, unique=True)
    password_hash = Column(String(256), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)


class ProfileORM(Base):
    __tablename__ = "profiles"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, unique=True)
    full_name = Column(String(256), nullable=True)
    email = Column(String(320), nullable=False)
    role = Column(String(16), nullable=False)                # candidate | employer
    company_name = Column(String(256), nullable=True)
    company_logo = Column(Text, nullable=True)
    phone = Column(String(64), nullable=True)
    location = Column(String(256), nullable=True)
    website = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    resume_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)


class AuthSessionORM(Base):
    __tablename__ = "auth_sessions"
    token = Column(String(128), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    expires_at = Column(DateTime(timezone=True), nullable=False)
