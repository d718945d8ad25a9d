# -*- coding: utf-8 -*-
"""Auth: password hashing, bearer tokens and FastAPI dependencies.

Passwords are stored as ``pbkdf2_<alg>$<iterations>$<salt>$<digest>`` with
url-safe base64 parts. Tokens are HS256 JWTs carrying ``sub`` (the user id),
``email`` and ``exp``; they are accepted from an ``Authorization: Bearer``
header or from the session cookie.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt
from fastapi import Depends, Request

from ..config import settings
from ..errors import ApiError
from .storage import get_user_by_email, get_user_by_id

TOKEN_COOKIE_NAME = "fittrack_token"

_JWT_ALGORITHM = "HS256"
_HASH_ALGORITHM = "sha256"
_HASH_ITERATIONS = 200_000


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _derive(password: str, algorithm: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(algorithm, password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(16)
    digest = _derive(password, _HASH_ALGORITHM, salt, _HASH_ITERATIONS)
    return "$".join((f"pbkdf2_{_HASH_ALGORITHM}", str(_HASH_ITERATIONS), _b64encode(salt), _b64encode(digest)))


def verify_password(password: str, stored: str) -> bool:
    parts = stored.split("$")
    if len(parts) != 4 or not parts[0].startswith("pbkdf2_"):
        return False
    scheme, iterations, salt, digest = parts
    try:
        actual = _derive(password, scheme[len("pbkdf2_"):], _b64decode(salt), int(iterations))
        expected = _b64decode(digest)
    except ValueError:
        return False
    return hmac.compare_digest(actual, expected)


def authenticate(email: str, password: str) -> Dict[str, Any]:
    user = get_user_by_email(email)
    if not user or not verify_password(password, user["password_hash"]):
        raise ApiError("Invalid email or password", 401)
    return user


def issue_token(user: Dict[str, Any], *, secret: Optional[str] = None) -> Tuple[str, datetime]:
    issued = datetime.now(timezone.utc)
    expires = issued + timedelta(days=settings.token_ttl_days)
    claims = {"sub": user["id"], "email": user["email"], "iat": issued, "exp": expires}
    return jwt.encode(claims, secret or settings.jwt_secret, algorithm=_JWT_ALGORITHM), expires


def decode_token(token: str, *, secret: Optional[str] = None) -> Dict[str, Any]:
    try:
        return jwt.decode(token, secret or settings.jwt_secret, algorithms=[_JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise ApiError("Token expired", 401) from exc
    except jwt.InvalidTokenError as exc:
        raise ApiError("Invalid token", 401) from exc


def get_token_from_request(request: Request) -> Optional[str]:
    scheme, _, credentials = (request.headers.get("authorization") or "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(TOKEN_COOKIE_NAME) or None


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    cached = getattr(request.state, "user", None)
    if cached:
        return cached

    token = get_token_from_request(request)
    if not token:
        raise ApiError("Not authenticated", 401)

    user_id = str(decode_token(token).get("sub") or "")
    user = get_user_by_id(user_id) if user_id else None
    if not user:
        raise ApiError("User not found", 401)

    request.state.user = user
    return user


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user


def ensure_same_user(user_id: str, user: Dict[str, Any]) -> None:
    """Records are private: a path naming another user's id is forbidden."""
    if user_id != user["id"]:
        raise ApiError("Forbidden", 403)
