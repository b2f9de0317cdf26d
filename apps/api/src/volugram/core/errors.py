"""
Service Errors

Exception hierarchy shared by the service layer. Every error carries a
human-readable message, a stable machine-readable error code and the HTTP
status code the routers should answer with.
"""

from fastapi import HTTPException


class VolugramError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        """Convert to the structured HTTPException used by all routers."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "error": self.error_code,
                "message": self.message,
            },
        )


def internal_error() -> HTTPException:
    """Generic 500 answer for unexpected failures (details stay in the logs)."""
    return HTTPException(
        status_code=500,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


class ValidationError(VolugramError):
    """Raised when required input is missing or malformed."""

    def __init__(self, message: str = "Missing required fields", error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class CaptchaVerificationError(ValidationError):
    """Raised when the human-verification check fails."""

    def __init__(self):
        super().__init__(message="Invalid captcha", error_code="INVALID_CAPTCHA")


class InvalidInputError(VolugramError):
    """Raised when a computation receives input it cannot work with."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="INVALID_INPUT", status_code=400)


class UnsupportedLocaleError(VolugramError):
    """Raised for language codes outside the supported set."""

    def __init__(self, language: object):
        self.language = language
        super().__init__(
            message=f"Unsupported language: {language!r}. Supported languages: en, de, et, no",
            error_code="UNSUPPORTED_LOCALE",
            status_code=400,
        )


class AuthenticationError(VolugramError):
    """Raised when credentials are invalid."""

    def __init__(self, message: str = "Invalid email or password."):
        super().__init__(message=message, error_code="INVALID_CREDENTIALS", status_code=401)


class UnauthorizedError(VolugramError):
    """Raised when the acting user has no rights over the target resource."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message, error_code="UNAUTHORIZED", status_code=403)


class NotFoundError(VolugramError):
    """Raised when a requested resource does not exist."""

    def __init__(self, message: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(message=message, error_code=error_code, status_code=404)


class FormNotFoundError(NotFoundError):
    """Raised when a form token does not resolve to a form."""

    def __init__(self):
        super().__init__(message="Form does not exist", error_code="FORM_NOT_FOUND")


class SubmissionNotFoundError(NotFoundError):
    """Raised when a submission is not found."""

    def __init__(self, submission_id: int | None = None):
        message = (
            f"Submission {submission_id} not found" if submission_id else "Submission not found"
        )
        super().__init__(message=message, error_code="SUBMISSION_NOT_FOUND")


class UserNotFoundError(NotFoundError):
    """Raised when a user account is not found."""

    def __init__(self):
        super().__init__(message="User not found", error_code="USER_NOT_FOUND")


class InvalidTokenError(VolugramError):
    """Raised when a single-use token is unknown, expired or already used."""

    def __init__(self, message: str = "Invalid or expired link."):
        super().__init__(message=message, error_code="INVALID_TOKEN", status_code=400)


class AlreadyConfirmedError(VolugramError):
    """Raised when a reviewer decision targets a submission that is no longer pending."""

    def __init__(self, submission_id: int | None = None):
        self.submission_id = submission_id
        super().__init__(
            message="Submission already confirmed",
            error_code="ALREADY_CONFIRMED",
            status_code=409,
        )


class EmailAlreadyRegisteredError(VolugramError):
    """Raised when registering or activating an email that already has an account."""

    def __init__(self):
        super().__init__(
            message="Email already exists",
            error_code="EMAIL_ALREADY_REGISTERED",
            status_code=409,
        )


class RenderError(VolugramError):
    """Raised when a certificate document cannot be generated."""

    def __init__(self, message: str):
        self.reason = message
        super().__init__(
            message=f"Failed to render certificate: {message}",
            error_code="RENDER_FAILED",
            status_code=500,
        )


__all__ = [
    "VolugramError",
    "internal_error",
    "ValidationError",
    "CaptchaVerificationError",
    "InvalidInputError",
    "UnsupportedLocaleError",
    "AuthenticationError",
    "UnauthorizedError",
    "NotFoundError",
    "FormNotFoundError",
    "SubmissionNotFoundError",
    "UserNotFoundError",
    "InvalidTokenError",
    "AlreadyConfirmedError",
    "EmailAlreadyRegisteredError",
    "RenderError",
]
