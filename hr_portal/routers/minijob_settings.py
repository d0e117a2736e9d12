import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import field_validator
from sqlmodel import SQLModel, Field, Session

from ..core.dates import get_today
from ..core.security import require_admin
from ..database import get_session
from ..models.user import User
from ..services.minijob_settings import MinijobSettingService
from ..timeline import Adjustment


router = APIRouter(
    prefix="/admin/minijob-settings",
    tags=["minijob-settings"],
)


class MinijobSettingBase(SQLModel):
    monthly_limit: Decimal = Field(ge=0, le=Decimal("999999.99"), max_digits=8, decimal_places=2)
    description: str = Field(min_length=3, max_length=500)
    valid_from: date
    valid_until: Optional[date] = None

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, value):
        return value.strip() if isinstance(value, str) else value


class MinijobSettingWrite(MinijobSettingBase):
    pass


class MinijobSettingRead(MinijobSettingBase):
    id: int
    is_active: bool
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class AdjustmentRead(SQLModel):
    setting_id: int
    description: str
    valid_from: date
    old_valid_until: Optional[date] = None
    new_valid_until: Optional[date] = None


class CreateOut(SQLModel):
    setting: MinijobSettingRead
    auto_adjusted: List[AdjustmentRead]


class DeleteOut(SQLModel):
    deleted: MinijobSettingRead
    adjustments: List[AdjustmentRead]


class RecalculateOut(SQLModel):
    changed_count: int
    changes: List[AdjustmentRead]


class RefreshStatusOut(SQLModel):
    active: Optional[MinijobSettingRead] = None


def _adjustments(items: List[Adjustment]) -> List[AdjustmentRead]:
    return [
        AdjustmentRead(
            setting_id=a.setting_id,
            description=a.description,
            valid_from=a.valid_from,
            old_valid_until=a.old_valid_until,
            new_valid_until=a.new_valid_until,
        )
        for a in items
    ]


@router.get(
    "",
    response_model=List[MinijobSettingRead],
    status_code=status.HTTP_200_OK,
)
def list_settings(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    return MinijobSettingService(session).list_all()


@router.get(
    "/current",
    response_model=MinijobSettingRead,
    status_code=status.HTTP_200_OK,
)
def current_setting(
    session: Session = Depends(get_session),
    today: date = Depends(get_today),
    admin: User = Depends(require_admin),
):
    current = MinijobSettingService(session).get_current(today)
    if current is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No minijob setting in effect today",
        )
    return current


@router.post(
    "",
    response_model=CreateOut,
    status_code=status.HTTP_201_CREATED,
)
def create_setting(
    payload: MinijobSettingWrite,
    session: Session = Depends(get_session),
    today: date = Depends(get_today),
    admin: User = Depends(require_admin),
):
    result = MinijobSettingService(session).create(
        monthly_limit=payload.monthly_limit,
        description=payload.description,
        valid_from=payload.valid_from,
        valid_until=payload.valid_until,
        today=today,
        created_by=admin.id,
    )
    return CreateOut(
        setting=MinijobSettingRead.model_validate(result.setting),
        auto_adjusted=_adjustments(result.auto_adjusted),
    )


@router.put(
    "/{setting_id}",
    response_model=MinijobSettingRead,
    status_code=status.HTTP_200_OK,
)
def update_setting(
    setting_id: int,
    payload: MinijobSettingWrite,
    session: Session = Depends(get_session),
    today: date = Depends(get_today),
    admin: User = Depends(require_admin),
):
    return MinijobSettingService(session).update(
        setting_id,
        monthly_limit=payload.monthly_limit,
        description=payload.description,
        valid_from=payload.valid_from,
        valid_until=payload.valid_until,
        today=today,
    )


@router.delete(
    "/{setting_id}",
    response_model=DeleteOut,
    status_code=status.HTTP_200_OK,
)
def delete_setting(
    setting_id: int,
    session: Session = Depends(get_session),
    today: date = Depends(get_today),
    admin: User = Depends(require_admin),
):
    result = MinijobSettingService(session).delete(setting_id, today)
    return DeleteOut(
        deleted=MinijobSettingRead.model_validate(result.deleted),
        adjustments=_adjustments(result.adjustments),
    )


@router.post(
    "/recalculate",
    response_model=RecalculateOut,
    status_code=status.HTTP_200_OK,
)
def recalculate(
    session: Session = Depends(get_session),
    today: date = Depends(get_today),
    admin: User = Depends(require_admin),
):
    result = MinijobSettingService(session).recalculate(today)
    return RecalculateOut(changed_count=result.changed_count, changes=_adjustments(result.changes))


@router.post(
    "/refresh-status",
    response_model=RefreshStatusOut,
    status_code=status.HTTP_200_OK,
)
def refresh_status(
    session: Session = Depends(get_session),
    today: date = Depends(get_today),
    admin: User = Depends(require_admin),
):
    active = MinijobSettingService(session).refresh_active_status(today)
    if active is None:
        return RefreshStatusOut(active=None)
    return RefreshStatusOut(active=MinijobSettingRead.model_validate(active))
