"""Domain errors.

Every error raised on a request path subclasses FilesManagerError and carries
the HTTP status and client-facing message it renders as. main.py registers a
single handler that turns them into ``{"error": message}`` responses.
"""


class FilesManagerError(Exception):
    """Base class for errors rendered to API clients."""

    status_code = 500
    message = "Internal error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(FilesManagerError):
    """No token, empty token, or a token with no live session."""
    status_code = 401
    message = "Unauthorized"


class NotFound(FilesManagerError):
    """Record absent OR present but not visible to the caller.

    Both cases must produce this same error so private records cannot be
    enumerated.
    """
    status_code = 404
    message = "Not found"


class ValidationError(FilesManagerError):
    status_code = 400
    message = "Invalid request"


class MissingName(ValidationError):
    message = "Missing name"


class MissingOrInvalidKind(ValidationError):
    message = "Missing type"


class MissingPayload(ValidationError):
    message = "Missing data"


class MissingEmail(ValidationError):
    message = "Missing email"


class MissingPassword(ValidationError):
    message = "Missing password"


class AlreadyExists(ValidationError):
    message = "Already exist"


class InvalidParent(FilesManagerError):
    status_code = 400
    message = "Parent not found"


class InvalidSize(FilesManagerError):
    status_code = 400
    message = "Invalid size"


class NotRetrievable(FilesManagerError):
    status_code = 400
    message = "A folder doesn't have content"


class StorageWriteFailure(FilesManagerError):
    status_code = 500
    message = "Error writing file"


class JobFailure(Exception):
    """Raised by job handlers; the queue records it and decides on retry."""
    pass


class ConnectionTimeout(RuntimeError):
    """Backing services did not become reachable within the retry budget."""
    pass
