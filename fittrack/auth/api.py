# -*- coding: utf-8 -*-
"""Auth: API endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from ..config import settings
from .models import AuthResponse, LoginRequest, LogoutResponse, ProfileUpdateRequest, RegisterRequest, UserPublic
from .security import TOKEN_COOKIE_NAME, authenticate, get_current_user, hash_password, issue_token
from .storage import create_user, update_profile

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _session(response: Response, user: Dict[str, Any]) -> AuthResponse:
    token, expires = issue_token(user)
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        max_age=settings.token_ttl_days * 86400,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )
    return AuthResponse(user=UserPublic.model_validate(user), token=token, expires_at=_iso(expires))


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


@router.post("/register", response_model=AuthResponse, summary="Create an account and start a session")
def register(request: RegisterRequest, response: Response):
    user = create_user(
        email=request.email,
        password_hash=hash_password(request.password),
        username=request.username,
    )
    return _session(response, user)


@router.post("/login", response_model=AuthResponse, summary="Start a session")
def login(request: LoginRequest, response: Response):
    return _session(response, authenticate(request.email, request.password))


@router.post("/logout", response_model=LogoutResponse, summary="End the cookie session")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
    return LogoutResponse(message="Logged out successfully")


@router.get("/me", response_model=UserPublic, summary="Current user's account and profile")
def me(user: dict = Depends(get_current_user)):
    return UserPublic.model_validate(user)


@router.put("/me", response_model=UserPublic, summary="Update profile details")
def update_me(request: ProfileUpdateRequest, user: dict = Depends(get_current_user)):
    return UserPublic.model_validate(update_profile(user["id"], request))
