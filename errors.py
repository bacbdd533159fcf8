from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    MINIMUM_NOT_MET = "minimum_not_met"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.MINIMUM_NOT_MET: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """Business-rule failure raised by the service modules.

    The kind decides the HTTP status; the message is returned to the client as-is.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


def not_found(message: str) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, message)


def invalid(message: str) -> ServiceError:
    return ServiceError(ErrorKind.VALIDATION, message)


def conflict(message: str) -> ServiceError:
    return ServiceError(ErrorKind.CONFLICT, message)


def kind_for_status(status_code: int) -> ErrorKind:
    for kind, code in STATUS_CODES.items():
        if code == status_code:
            return kind
    return ErrorKind.VALIDATION if status_code < 500 else ErrorKind.INTERNAL
