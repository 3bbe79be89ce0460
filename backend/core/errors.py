"""
Application error taxonomy.

Services raise these; the handlers registered in main.py turn them into
`{"error": ..., "details": [...]}` JSON bodies with the matching status code.
"""

from typing import Any, List, Optional

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Any]] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> dict:
        body: dict = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation error"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls("Validation error", details=[{"field": field, "message": message}])


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class BusinessRuleViolation(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Business rule violated"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Already exists"
