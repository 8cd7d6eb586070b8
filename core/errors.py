class SkilLinkError(Exception):
    """Base error for ledger operations. ``status_code`` is the HTTP mapping."""

    status_code = 400


class ValidationError(SkilLinkError):
    status_code = 400


class NotFoundError(SkilLinkError):
    status_code = 404


class ConflictError(SkilLinkError):
    status_code = 409


class AuthorizationError(SkilLinkError):
    status_code = 403


class InvalidStateError(SkilLinkError):
    status_code = 400


class InsufficientBalanceError(SkilLinkError):
    status_code = 400


class UnknownActionError(SkilLinkError):
    status_code = 400
