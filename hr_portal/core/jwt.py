from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from ..config import settings


ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _encode(data: Dict[str, Any], secret: str, token_type: str, lifetime: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + lifetime
    to_encode.update({"type": token_type, "iat": int(now.timestamp()), "exp": int(expire.timestamp())})
    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def create_access_token(data: Dict[str, Any]) -> str:
    return _encode(
        data,
        settings.jwt_secret,
        ACCESS_TOKEN_TYPE,
        timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(data: Dict[str, Any]) -> str:
    return _encode(
        data,
        settings.jwt_refresh_secret,
        REFRESH_TOKEN_TYPE,
        timedelta(days=settings.refresh_token_expire_days),
    )


def _decode(token: str, secret: str, token_type: str) -> Dict[str, Any]:
    payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != token_type:
        raise JWTError(f"Expected {token_type} token")
    return payload


def decode_access_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.jwt_secret, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.jwt_refresh_secret, REFRESH_TOKEN_TYPE)
