"""Error taxonomy for the ordering service.

Repositories return None for records that do not exist and raise StorageError
for I/O failures. Services translate missing records into NotFoundError. The
API layer maps each error class onto an HTTP status code.
"""


class OrderingServiceError(Exception):
    """Base class for all ordering service errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(OrderingServiceError):
    """An operation referenced an id absent from the expected collection."""

    status_code = 404


class ValidationError(OrderingServiceError):
    """A request was missing a required field or carried an invalid value."""

    status_code = 400


class ConflictError(OrderingServiceError):
    """The requested change would break a relationship between records."""

    status_code = 409


class StorageError(OrderingServiceError):
    """Reading or writing a backing JSON document failed."""

    status_code = 500


class PaymentGatewayError(OrderingServiceError):
    """The payment provider call failed or returned a non-success result."""

    status_code = 502
