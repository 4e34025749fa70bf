class ApiError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class BadRequestError(ApiError):
    status_code = 400
    default_message = "Bad request"


class RequestValidationError(BadRequestError):
    def __init__(self, errors):
        super().__init__(", ".join(errors))
        self.errors = errors


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = "認証が必要です"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflict"


class InternalError(ApiError):
    status_code = 500
