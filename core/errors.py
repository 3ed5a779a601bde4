from __future__ import annotations
from typing import Any, Optional
from fastapi import HTTPException


class ValidationError(HTTPException):
    """Malformed or out-of-range input. Reported, never retried."""
    def __init__(self, detail: Any):
        super().__init__(status_code=422, detail=detail)


class ConflictError(HTTPException):
    """Time overlap or a state that forbids the transition."""
    def __init__(self, detail: Any):
        super().__init__(status_code=409, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: Any = "Not found"):
        super().__init__(status_code=404, detail=detail)


class TransientInfrastructureError(HTTPException):
    """Store or bus unavailable; safe to retry later."""
    def __init__(self, detail: Any = "Service temporarily unavailable", cause: Optional[BaseException] = None):
        super().__init__(status_code=503, detail=detail)
        self.__cause__ = cause
