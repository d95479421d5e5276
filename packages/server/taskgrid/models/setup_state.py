"""Persisted state of the one-time initial setup (single row)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

SETUP_ROW_ID = 1


class SystemSetup(SQLModel, table=True):
    __tablename__ = "system_setup"

    id: int = Field(default=SETUP_ROW_ID, primary_key=True)
    state: str = Field(nullable=False, default="not_started")  # not_started | in_progress | done
    claim_token: Optional[uuid.UUID] = None
    started_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
