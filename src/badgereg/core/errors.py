from __future__ import annotations


class BadgeRegError(Exception):
    """Base class for every error the registry reports to callers.

    `code` is the stable wire name used by the HTTP layer and the SDK client
    to round-trip the exception type.
    """

    code = "BadgeRegError"


class InvalidInput(BadgeRegError, ValueError):
    code = "InvalidInput"


class AlreadyRegistered(BadgeRegError):
    code = "AlreadyRegistered"


class InsufficientFee(BadgeRegError):
    code = "InsufficientFee"


class NotOwner(BadgeRegError):
    code = "NotOwner"


class NotAdmin(BadgeRegError):
    code = "NotAdmin"


class AddressTaken(BadgeRegError):
    code = "AddressTaken"


class NotFound(BadgeRegError):
    code = "NotFound"


class RecordNotFound(NotFound):
    code = "RecordNotFound"


class MetaNotFound(NotFound):
    code = "MetaNotFound"


class InvariantViolation(BadgeRegError):
    """An index lookup missed.

    Deliberately not a `NotFound`: address/name lookups report misses as a
    broken invariant, while id lookups report an ordinary not-found.
    """

    code = "InvariantViolation"


ERRORS_BY_CODE: dict[str, type[BadgeRegError]] = {
    cls.code: cls
    for cls in (
        BadgeRegError,
        InvalidInput,
        AlreadyRegistered,
        InsufficientFee,
        NotOwner,
        NotAdmin,
        AddressTaken,
        NotFound,
        RecordNotFound,
        MetaNotFound,
        InvariantViolation,
    )
}


def error_from_code(code: str | None, message: str) -> BadgeRegError:
    cls = ERRORS_BY_CODE.get(str(code or ""), BadgeRegError)
    return cls(message)
