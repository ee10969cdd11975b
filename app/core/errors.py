"""
Application error taxonomy.

Services raise these; the handlers registered in app.main turn them into
``{"error": message}`` JSON bodies with the instance's status code.
"""


class AppError(Exception):
    status_code: int = 500
    code: str = "internal-error"

    def __init__(self, message: str, status_code: int = None, code: str = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationError(AppError):
    """Malformed or missing input; the user must correct it."""
    status_code = 400
    code = "missing-input"


class StateError(AppError):
    """The challenge cannot satisfy the request (wrong, used or expired code)."""
    status_code = 400
    code = "invalid-code"


class DependencyError(AppError):
    """An external collaborator (SMS provider, identity provider) refused the call."""
    status_code = 500
    code = "dependency-failed"


class ThrottledError(AppError):
    status_code = 429
    code = "throttled"


class InternalError(AppError):
    status_code = 500
    code = "internal-error"
