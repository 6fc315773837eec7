"""Error taxonomy shared by services and the HTTP layer."""


class PortalError(Exception):
    """Base error carrying a user-facing message and an HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    """Request input is missing or inconsistent."""

    status_code = 400
    default_message = "All fields are required"


class DuplicateIdentifierError(PortalError):
    """Username or email is already registered."""

    status_code = 400
    default_message = "Username or email already exists"


class DuplicateStudentIdError(PortalError):
    """Student id is already registered."""

    status_code = 400
    default_message = "Student ID already registered"


class InvalidCredentialsError(PortalError):
    """Unknown identifier or wrong password."""

    status_code = 401
    default_message = "Invalid credentials"


class UnauthenticatedError(PortalError):
    """Missing, unknown or expired session."""

    status_code = 401
    default_message = "Not authenticated"


class NotFoundError(PortalError):
    """No user record matches the request."""

    status_code = 404
    default_message = "User not found"


class InvalidFileError(PortalError):
    """Uploaded photo is missing, of a disallowed type, or too large."""

    status_code = 400
    default_message = "Invalid file"


class StorageError(PortalError):
    """Persistence failed; details are logged, never returned."""


class HashingError(PortalError):
    """The password hasher failed."""
