from dataclasses import dataclass
from datetime import datetime, timedelta

import jwt

from otahub.config import get_settings
from otahub.utils.time import utcnow


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


@dataclass(frozen=True)
class CallerIdentity:
    identity: str
    access_level: int


def create_access_token(
    identity: str,
    access_level: int,
    issued_at: datetime | None = None,
    ttl_minutes: int = 60,
    secret: str | None = None,
    algorithm: str | None = None,
) -> str:
    settings = None
    if secret is None or algorithm is None:
        settings = get_settings()
    issued_at = issued_at or utcnow()
    expires_at = issued_at + timedelta(minutes=ttl_minutes)

    payload = {
        "sub": identity,
        "access_level": access_level,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(
        payload,
        secret or settings.jwt_secret,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def decode_access_token(
    token: str,
    secret: str | None = None,
    algorithm: str | None = None,
) -> CallerIdentity:
    settings = None
    if secret is None or algorithm is None:
        settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[algorithm or settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenInvalid("Token invalid") from exc

    identity = payload.get("sub")
    access_level = payload.get("access_level")
    if not identity or not isinstance(access_level, int):
        raise TokenInvalid("Token payload missing required claims")

    return CallerIdentity(identity=identity, access_level=access_level)
