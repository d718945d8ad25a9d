# -*- coding: utf-8 -*-
"""API error type shared by the storage layers and the app-level handler."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import HTTPException


class ApiError(HTTPException):
    """An operation failure with a client-visible message.

    `errors` optionally carries per-field details, e.g. `[{"message": "..."}]`.
    """

    def __init__(self, message: str, status_code: int = 500, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.errors = errors

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload
