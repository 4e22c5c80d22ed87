class AppError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message=None, **extra):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.extra = {k: v for k, v in extra.items() if v is not None}

    def to_dict(self):
        return {"error": self.message, **self.extra}


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message=None, field=None, errors=None):
        super().__init__(message, field=field, errors=errors)
        self.field = field
        self.errors = errors or []


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Slot is no longer available"

    def __init__(self, message=None, slots=None, reason=None):
        super().__init__(message, slots=list(slots) if slots else None, reason=reason)
        self.slots = list(slots or [])
        self.reason = reason


class RateLimitError(AppError):
    status_code = 429
    default_message = "Too many requests. Please try again later."


class UpstreamError(AppError):
    status_code = 503
    default_message = "Service is temporarily unavailable. Please try again."


class PaymentsDisabledError(UpstreamError):
    default_message = "Payment service is temporarily unavailable. Please try again later."

    def __init__(self, message=None, reason=None):
        super().__init__(message, payments_disabled=True, reason=reason or None)
