"""
Credentials: password hashing, token issuance and verification, and the
register/login flows built on top of them.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
import structlog
from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from errors import InvalidCredentials, ValidationFailed
from validators import validate_user

logger = structlog.get_logger()

BCRYPT_ROUNDS = 10
TOKEN_TTL = timedelta(hours=24)
TOKEN_ALGORITHM = "HS256"
TOKEN_COOKIE = "token"

_DEFAULT_SECRET = "change-me-in-production-jwt-secret-key"


def _secret() -> str:
    return os.getenv("JWT_SECRET", _DEFAULT_SECRET)


def _password_bytes(plain: str) -> bytes:
    # bcrypt only reads the first 72 bytes
    return plain.encode("utf-8")[:72]


def _hash(plain: str) -> str:
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def _check(plain: str, digest: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), digest.encode("utf-8"))
    except ValueError:
        return False


async def hash_password(plain: str) -> str:
    return await run_in_threadpool(_hash, plain)


async def verify_password(plain: str, digest: Optional[str]) -> bool:
    if not isinstance(plain, str) or not isinstance(digest, str) or not digest:
        return False
    return await run_in_threadpool(_check, plain, digest)


def issue_token(user: Dict[str, Any], now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "id": str(user.get("id") or user.get("_id")),
        "email": user.get("email"),
        "roles": [str(getattr(r, "value", r)) for r in user.get("roles", [])],
        "iat": now,
        "exp": now + TOKEN_TTL,
    }
    return jwt.encode(payload, _secret(), algorithm=TOKEN_ALGORITHM)


def verify_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decoded payload, or None for anything malformed, expired or forged."""
    if not token or not isinstance(token, str):
        return None
    try:
        payload = jwt.decode(token, _secret(), algorithms=[TOKEN_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug("token_rejected", reason=type(e).__name__)
        return None
    if "id" not in payload:
        return None
    return payload


def extract_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization")
    if header and header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    return request.cookies.get(TOKEN_COOKIE) or None


def set_token_cookie(response, token: str) -> None:
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=int(TOKEN_TTL.total_seconds()),
        httponly=True,
        secure=os.getenv("ENVIRONMENT") == "production",
        samesite="lax",
    )


def clear_token_cookie(response) -> None:
    response.delete_cookie(TOKEN_COOKIE)


async def register_user(users, payload: Dict[str, Any]):
    """Validate, create and sign in a new account. Returns ``(user, token)``."""
    data = {k: payload.get(k) for k in ("name", "email", "password") if k in payload}
    data = {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
    errors = validate_user(data)
    if errors:
        raise ValidationFailed(errors)
    user = await users.create(data)
    return user, issue_token(user)


async def login_user(users, email: str, password: str):
    """Returns ``(user, token)`` or raises InvalidCredentials."""
    stored = await users.find_by_email(email)
    if not stored or not stored.get("password"):
        raise InvalidCredentials()
    if not await verify_password(password, stored["password"]):
        logger.info("login_failed", user_id=str(stored["_id"]))
        raise InvalidCredentials()
    user = users.sanitize(stored)
    return user, issue_token(user)
