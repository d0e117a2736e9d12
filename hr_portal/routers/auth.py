import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import SQLModel, Field, Session, select
from pydantic import EmailStr
from jose.exceptions import ExpiredSignatureError, JWTError

from ..database import get_session
from ..models.user import Role, User
from ..core.security import get_current_user, hash_password, load_token_user, raise_unauthorized, verify_password
from ..core.jwt import create_access_token, create_refresh_token, decode_refresh_token


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


class UserRead(SQLModel):
    id: uuid.UUID
    email: str
    name: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class RegisterIn(SQLModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=2, max_length=50)


class LoginIn(SQLModel):
    email: EmailStr
    password: str


class RefreshIn(SQLModel):
    refresh_token: str


class TokenOut(SQLModel):
    access_token: str
    token_type: str


class TokenPairOut(SQLModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserRead


def reject_whitespace_password(password: str) -> None:
    if any(c.isspace() for c in password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must not contain whitespace",
        )


def find_user_by_email(session: Session, email: str):
    return session.exec(select(User).where(User.email == email.strip().lower())).first()


def authenticate(session: Session, email: str, password: str) -> User:
    user = find_user_by_email(session, email)
    if user is None or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
        )
    return user


def issue_tokens(user: User) -> TokenPairOut:
    access_token = create_access_token(
        {"sub": str(user.id), "email": user.email, "role": user.role, "name": user.name}
    )
    refresh_token = create_refresh_token({"sub": str(user.id), "role": user.role})
    return TokenPairOut(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserRead.model_validate(user),
    )


@router.post(
    "/register",
    response_model=TokenPairOut,
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    payload: RegisterIn,
    session: Session = Depends(get_session),
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
        role=Role.EMPLOYEE.value,
        is_active=True,
        created_at=now,
        updated_at=now,
    )

    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("New registration: %s", user.email)
    return issue_tokens(user)


@router.post(
    "/login",
    response_model=TokenPairOut,
    status_code=status.HTTP_200_OK,
)
def login(payload: LoginIn, session: Session = Depends(get_session)):
    user = authenticate(session, payload.email, payload.password)
    logger.info("Login: %s", user.email)
    return issue_tokens(user)


@router.post(
    "/refresh",
    response_model=TokenPairOut,
    status_code=status.HTTP_200_OK,
)
def refresh(payload: RefreshIn, session: Session = Depends(get_session)):
    try:
        claims = decode_refresh_token(payload.refresh_token)
    except ExpiredSignatureError:
        raise_unauthorized("Refresh token expired")
    except JWTError:
        raise_unauthorized("Invalid refresh token")

    user = load_token_user(claims, session)
    return issue_tokens(user)


@router.get(
    "/me",
    response_model=UserRead,
    status_code=status.HTTP_200_OK,
)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post(
    "/token",
    response_model=TokenOut,
    status_code=status.HTTP_200_OK,
)
def token(form_data: OAuth2PasswordRequestForm = Depends(), session: Session = Depends(get_session)):
    # OAuth2PasswordRequestForm carries the email in 'username'
    user = authenticate(session, form_data.username, form_data.password)
    access_token = create_access_token(
        {"sub": str(user.id), "email": user.email, "role": user.role, "name": user.name}
    )
    return TokenOut(access_token=access_token, token_type="bearer")
