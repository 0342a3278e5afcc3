from typing import Any


class AppError(Exception):
    status_code = 500
    error = "Internal server error"

    def __init__(self, error: str | None = None, data: Any = None, message: str | None = None):
        self.error = error or self.error
        self.data = data
        self.message = message
        super().__init__(self.error)


class ValidationError(AppError):
    status_code = 400
    error = "Invalid request"


class Unauthorized(AppError):
    status_code = 401
    error = "Authentication required"


class Forbidden(AppError):
    status_code = 403
    error = "Forbidden"


class NotFound(AppError):
    status_code = 404
    error = "Not found"


class Conflict(AppError):
    status_code = 409
    error = "Conflict"


class DeliveryFailed(AppError):
    status_code = 502
    error = "Failed to send verification email"


class InternalError(AppError):
    pass


class InvalidToken(Unauthorized):
    error = "Invalid authentication token"


class BadCredentials(Unauthorized):
    error = "Invalid email or password"


class NotVerified(Forbidden):
    error = "Please verify your email before logging in"


class DuplicateEmail(Conflict):
    error = "Email already registered"


class AlreadyVerified(Conflict):
    error = "Email is already verified"


class OtpExpired(ValidationError):
    error = "OTP has expired, please request a new one"


class OtpMismatch(ValidationError):
    error = "Invalid OTP"
