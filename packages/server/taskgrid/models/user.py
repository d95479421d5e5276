"""User model. Identity only: roles are always relative to an entity."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(unique=True, index=True, nullable=False)
    display_name: str = Field(nullable=False)
    password_hash: Optional[str] = Field(default=None)  # bcrypt hash
