"""Errors raised by the donation services and rendered by the JSON views."""

from __future__ import annotations

from typing import Optional


class LifelineError(Exception):
    """Base class for rejections that are surfaced to the caller."""

    status_code = 400
    default_code = "ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def as_dict(self) -> dict:
        return {"success": False, "error": self.code, "message": self.message}


class ValidationError(LifelineError):
    default_code = "INVALID"


class EligibilityError(LifelineError):
    default_code = "INELIGIBLE"


class ConflictError(LifelineError):
    default_code = "CONFLICT"


class ResourceError(LifelineError):
    default_code = "NO_USABLE_STOCK"


class NotFoundError(LifelineError):
    status_code = 404
    default_code = "NOT_FOUND"
