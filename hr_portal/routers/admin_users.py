import logging
import uuid
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import SQLModel, Field, Session, select
from pydantic import EmailStr

from ..core.security import hash_password, require_admin
from ..database import get_session
from ..models.user import Role, User
from .auth import UserRead, find_user_by_email, reject_whitespace_password


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/users",
    tags=["admin"],
)


class UserCreate(SQLModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=2, max_length=50)
    role: Role = Role.EMPLOYEE


class UserList(SQLModel):
    users: List[UserRead]
    total: int


@router.get(
    "",
    response_model=UserList,
    status_code=status.HTTP_200_OK,
)
def list_users(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    users = list(session.exec(select(User).order_by(User.created_at.desc())).all())
    logger.info("Admin %s listed %d users", admin.email, len(users))
    return UserList(users=[UserRead.model_validate(u) for u in users], total=len(users))


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    payload: UserCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    reject_whitespace_password(payload.password)
    if find_user_by_email(session, payload.email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    now = datetime.utcnow()
    user = User(
        id=uuid.uuid4(),
        email=payload.email.strip().lower(),
        name=payload.name.strip(),
        hashed_password=hash_password(payload.password),
        role=payload.role.value,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Admin %s created user %s (%s)", admin.email, user.email, user.role)
    return user
