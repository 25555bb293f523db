# Services/errors.py
from enum import Enum
from http import HTTPStatus
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


_STATUS = {
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR,
}


class CustomerServiceError(Exception):
    """
    Error raised by the customer service.

    Only ``kind`` is meant for callers. ``cause`` keeps the low-level
    exception so it can be logged; it is never rendered into a response.
    """

    def __init__(self, kind: ErrorKind, cause: Optional[BaseException] = None):
        super().__init__(kind.value)
        self.kind = kind
        self.cause = cause

    @property
    def status(self) -> HTTPStatus:
        return _STATUS[self.kind]


class NotFoundError(CustomerServiceError):
    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(ErrorKind.NOT_FOUND, cause)


class InternalError(CustomerServiceError):
    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(ErrorKind.INTERNAL, cause)
