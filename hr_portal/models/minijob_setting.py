import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import SQLModel, Field


class MinijobSetting(SQLModel, table=True):
    """Monthly earnings limit in force between two calendar dates."""

    __tablename__ = "minijob_settings"

    id: Optional[int] = Field(default=None, primary_key=True)

    monthly_limit: Decimal = Field(max_digits=8, decimal_places=2)
    description: str = Field(max_length=500)

    # Both bounds inclusive; no valid_until means open-ended
    valid_from: date = Field(index=True)
    valid_until: Optional[date] = Field(default=None)

    # Derived from the dates, see services.minijob_settings.refresh_active_status
    is_active: bool = Field(default=False, index=True)

    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
