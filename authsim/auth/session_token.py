"""Issue and validate session credentials.

Two credential formats are supported, picked by ``config.SESSION_TOKEN_MODE``:

* ``encoded``: base64 of ``{"userId", "email", "role", "exp"}`` with ``exp`` in
  epoch milliseconds. It carries no signature, so anyone holding one can mint
  another. It exists for the demo and is refused in production.
* ``signed``: an HS256 JWT carrying the same claims, ``exp`` in epoch seconds.

Either way the credential is stateless. Nothing is stored server side, and it
is never refreshed.
"""
import base64
import binascii
import json
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel, StrictInt, ValidationError

from authsim.auth.errors import SessionExpiredError, SessionMalformedError
from authsim.core import config
from authsim.models.user import Role


class SessionClaims(BaseModel):
    user_id: StrictInt
    email: str
    role: Role
    expires_at: datetime


def issue_token(user, now: datetime | None = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=config.SESSION_EXPIRES_MINUTES)

    if config.SESSION_TOKEN_MODE == "signed":
        payload = {
            "sub": str(user.id),
            "userId": user.id,
            "email": user.email,
            "role": user.role,
            "iat": issued_at,
            "exp": expires_at,
        }
        return jwt.encode(payload, config.SESSION_SECRET_KEY, algorithm=config.SESSION_ALGORITHM)

    payload = {
        "userId": user.id,
        "email": user.email,
        "role": user.role,
        "exp": round(expires_at.timestamp() * 1000),
    }
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def _decode_encoded(token: str) -> tuple[dict, float]:
    try:
        payload = json.loads(base64.b64decode(token, validate=True))
    # deeply nested JSON exhausts the decoder stack
    except (binascii.Error, ValueError, RecursionError) as exc:
        raise SessionMalformedError() from exc
    if not isinstance(payload, dict):
        raise SessionMalformedError()
    return payload, _exp_seconds(payload.get("exp"), scale=1000)


def _decode_signed(token: str) -> tuple[dict, float]:
    try:
        payload = jwt.decode(
            token,
            config.SESSION_SECRET_KEY,
            algorithms=[config.SESSION_ALGORITHM],
            # expiry is checked against the caller's clock in validate_token
            options={"verify_exp": False, "verify_iat": False},
        )
    except (jwt.InvalidTokenError, RecursionError) as exc:
        raise SessionMalformedError() from exc
    return payload, _exp_seconds(payload.get("exp"), scale=1)


def _exp_seconds(value, scale: int) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SessionMalformedError()
    return value / scale


def validate_token(token: str | None, now: datetime | None = None) -> SessionClaims:
    """Return the claims of ``token``.

    Raises ``SessionMalformedError`` when the credential does not decode into the
    expected claims, and ``SessionExpiredError`` when it does but its expiry is
    already in the past.
    """
    if not token:
        raise SessionMalformedError()

    if config.SESSION_TOKEN_MODE == "signed":
        payload, exp = _decode_signed(token)
    else:
        payload, exp = _decode_encoded(token)

    try:
        claims = SessionClaims(
            user_id=payload.get("userId"),
            email=payload.get("email"),
            role=payload.get("role"),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
    except (ValidationError, OverflowError, OSError, ValueError) as exc:
        raise SessionMalformedError() from exc

    current = now or datetime.now(timezone.utc)
    if claims.expires_at < current:
        raise SessionExpiredError()
    return claims
