"""SQLAlchemy ORM models for the identity store."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Table,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class ApplicationUser(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_name = Column(String(256), nullable=False)
    normalized_user_name = Column(String(256), unique=True, nullable=False, index=True)
    email = Column(String(256), nullable=False)
    normalized_email = Column(String(256), unique=True, nullable=False, index=True)
    email_confirmed = Column(Boolean, default=False, nullable=False)
    password_hash = Column(String(255), nullable=False)
    security_stamp = Column(String(64), nullable=False, default=lambda: uuid.uuid4().hex)
    otp_secret = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    roles = relationship("Role", secondary=user_roles, back_populates="users", lazy="selectin")


class Role(Base):
    __tablename__ = "roles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(256), nullable=False)
    normalized_name = Column(String(256), unique=True, nullable=False, index=True)

    users = relationship("ApplicationUser", secondary=user_roles, back_populates="roles")
