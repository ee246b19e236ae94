"""Domain exceptions raised by the service layer."""


class HelpdeskError(Exception):
    """Base class. ``status_code`` is the HTTP status the API answers with."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TicketNotFoundError(HelpdeskError):
    status_code = 404


class PermissionDeniedError(HelpdeskError):
    status_code = 403


class TicketConflictError(HelpdeskError):
    """Ticket state does not allow the operation (already assigned, closed)."""

    status_code = 409


class InvalidTransitionError(HelpdeskError):
    status_code = 400


class UserNotFoundError(HelpdeskError):
    status_code = 404


class UserAlreadyExistsError(HelpdeskError):
    status_code = 409


class InvalidPasswordError(HelpdeskError):
    status_code = 400
