from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from mediacheck.core.config import get_settings

ALGORITHM = "HS256"


class TokenPayloadError(Exception):
    pass


def create_access_token(subject: str, app_id: str) -> tuple[str, datetime]:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": subject,
        "app_id": app_id,
        "iat": int(datetime.now(timezone.utc).timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM), expire


def decode_access_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise TokenPayloadError("Invalid token") from exc

    if "sub" not in payload or "app_id" not in payload:
        raise TokenPayloadError("Token payload missing claims")
    return payload
