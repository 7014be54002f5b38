"""Error taxonomy shared by services and routes.

Services raise these; ``main.register_exception_handlers`` turns them into
JSON responses of the form ``{"detail": ..., "code": ...}``.
"""


class FellowshipError(Exception):
    """Base class for expected, user-facing failures"""

    status_code = 500
    code = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PermissionDeniedError(FellowshipError):
    status_code = 403
    code = "permission-denied"


class NotFoundError(FellowshipError):
    status_code = 404
    code = "not-found"

    def __init__(self, entity: str, entity_id: str = None):
        message = f"{entity} not found" if entity_id is None else f"{entity} '{entity_id}' not found"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class InvalidStateTransitionError(FellowshipError):
    status_code = 409
    code = "invalid-state-transition"


class AlreadyInitializedError(FellowshipError):
    status_code = 409
    code = "already-initialized"


class ConflictError(FellowshipError):
    status_code = 409
    code = "conflict"


class AdminLimitReachedError(FellowshipError):
    status_code = 409
    code = "admin-limit-reached"


class InvalidCredentialsError(FellowshipError):
    status_code = 401
    code = "invalid-credentials"


class ValidationFailedError(FellowshipError):
    status_code = 400
    code = "invalid-argument"


class SetupRequiredError(FellowshipError):
    status_code = 428
    code = "setup-required"


class TransientError(FellowshipError):
    """Retryable failure such as a timeout; never a data-correctness problem"""

    status_code = 503
    code = "unavailable"
