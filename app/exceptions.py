"""Application exceptions and their JSON handlers."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookFinalException(Exception):
    """Base exception rendered as a structured JSON error."""

    def __init__(
        self,
        message: str,
        code: str = "BOOKFINAL_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(BookFinalException):
    """Raised at startup when required configuration is missing or unusable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")


# ── Identity ───────────────────────────────────────


class DuplicateUserError(BookFinalException):
    def __init__(self) -> None:
        super().__init__(
            "Email or user name already registered",
            code="DUPLICATE_USER",
            status_code=status.HTTP_409_CONFLICT,
        )


class PasswordPolicyError(BookFinalException):
    """Raised when a password fails one or more policy rules."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            "Password does not meet the password policy",
            code="PASSWORD_POLICY",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": errors},
        )


class InvalidCredentialsError(BookFinalException):
    def __init__(self) -> None:
        super().__init__(
            "Invalid credentials",
            code="INVALID_CREDENTIALS",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class InvalidOTPError(BookFinalException):
    def __init__(self) -> None:
        super().__init__(
            "The one-time code is invalid or has expired",
            code="INVALID_OTP",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


# ── Storage ────────────────────────────────────────


class StoredFileNotFoundError(BookFinalException):
    def __init__(self, key: str) -> None:
        super().__init__(
            f"Stored file not found: {key}",
            code="FILE_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"key": key},
        )


class FileTooLargeError(BookFinalException):
    def __init__(self, size_mb: float, max_mb: int) -> None:
        super().__init__(
            f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            details={"size_mb": round(size_mb, 2), "max_mb": max_mb},
        )


# ── Handlers ───────────────────────────────────────


async def bookfinal_exception_handler(
    request: Request, exc: BookFinalException
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred", "code": "INTERNAL_ERROR"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookFinalException, bookfinal_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
