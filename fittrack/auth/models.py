# -*- coding: utf-8 -*-
"""Auth: account and profile models."""

from __future__ import annotations

from datetime import date as date_type
from typing import Annotated, Optional

from pydantic import BeforeValidator, Field

from ..schemas import CamelModel


def _normalize_email(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


Email = Annotated[
    str,
    BeforeValidator(_normalize_email),
    Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"),
]


class RegisterRequest(CamelModel):
    email: Email
    password: str = Field(..., min_length=8, max_length=128)
    username: Optional[str] = Field(None, min_length=1, max_length=100)


class LoginRequest(CamelModel):
    email: Email
    password: str = Field(..., min_length=1, max_length=128)


class ProfileUpdateRequest(CamelModel):
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_num: Optional[str] = Field(None, min_length=3, max_length=32)
    dob: Optional[date_type] = None
    country: Optional[str] = Field(None, min_length=2, max_length=100)
    height: Optional[float] = Field(None, gt=0, le=300, description="Centimetres")
    weight: Optional[float] = Field(None, gt=0, le=1000, description="Kilograms")


class UserPublic(CamelModel):
    id: str
    email: str
    username: Optional[str] = None
    phone_num: Optional[str] = None
    dob: Optional[str] = None
    country: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    created_at: str
    updated_at: str


class AuthResponse(CamelModel):
    user: UserPublic
    token: str
    expires_at: str


class LogoutResponse(CamelModel):
    message: str
