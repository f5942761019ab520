"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Each class maps to a table; uniqueness rules that the services check up
front are also declared here so the database enforces them under
concurrent writes.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Admin(SQLModel, table=True):
    """An operator account allowed to manage resources.

    Fields:
    - `username`: unique login name
    - `email`: unique contact address
    - `password_hash`: hashed password string (never store plaintext)
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True, max_length=64)
    email: str = Field(nullable=False, unique=True, max_length=255)
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)


class Pathway(SQLModel, table=True):
    """A learning pathway; `name` is unique across all records."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False, unique=True, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
