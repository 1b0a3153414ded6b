"""
Error taxonomy for request dispatch.

Every failure that crosses a module boundary is one of these. Each carries
the HTTP status the transport layer should answer with, the same way
HTTPParseError does for malformed requests:

    DispatchError                    (base, status_code attribute)
    ├── BadRequestError        400   structurally invalid request
    ├── ResourceIsDirectoryError 403 a directory where a file was needed
    ├── ResourceNotFoundError  404   target resource absent
    └── ServerError            500   anything we could not do
        ├── StorageError             filesystem read/write failure
        └── CommandError             executable could not be run/read

ResourceNotFoundError and ResourceIsDirectoryError are raised by the
resource store and translated inside the dispatcher; only BadRequestError
and ServerError subclasses ever reach the transport.
"""

from .http.status_codes import HTTPStatus


class DispatchError(Exception):
    """Base class for dispatch failures. Carries the HTTP status to return."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status_code=None):
        super().__init__(message or self.status_code.phrase)
        if status_code is not None:
            self.status_code = HTTPStatus(status_code)


class BadRequestError(DispatchError):
    status_code = HTTPStatus.BAD_REQUEST


class ResourceNotFoundError(DispatchError):
    status_code = HTTPStatus.NOT_FOUND


class ResourceIsDirectoryError(DispatchError):
    status_code = HTTPStatus.FORBIDDEN


class ServerError(DispatchError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class StorageError(ServerError):
    """A filesystem operation failed for a reason other than not-found/is-dir."""


class CommandError(ServerError):
    """The external program could not be launched or its output not read."""
