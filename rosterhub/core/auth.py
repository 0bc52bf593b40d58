from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from rosterhub.core.config import Settings, get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class AccountKind(str, Enum):
    ORGANIZATION = "organization"
    VOLUNTEER = "volunteer"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {kind.value for kind in cls}


def create_access_token(
    subject: str,
    *,
    kind: AccountKind,
    email: str | None = None,
    expires_delta: timedelta | None = None,
    settings: Settings | None = None,
) -> str:
    """Generate a signed JWT access token carrying the account id and kind."""
    settings = settings or get_settings()

    now = datetime.now(UTC)
    ttl = expires_delta if expires_delta is not None else timedelta(
        seconds=settings.access_token_ttl_seconds
    )
    payload = {
        "sub": subject,
        "kind": AccountKind(kind).value,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }

    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, *, settings: Settings | None = None) -> dict:
    """Decode and validate a JWT access token."""
    settings = settings or get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "kind", "exp", "iss"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token expired") from exc
    except jwt.PyJWTError as exc:
        raise TokenError("Invalid token") from exc

    if not AccountKind.contains(payload["kind"]):
        raise TokenError(f"Unsupported account kind: {payload['kind']}")
    return payload
