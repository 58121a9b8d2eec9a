class GlucoTrackError(Exception):
    """Base class for failures surfaced to callers with a readable message."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmail(GlucoTrackError):
    default_message = "An account with this email already exists."


class InvalidCredentials(GlucoTrackError):
    # Same text for unknown email and wrong password.
    default_message = "Invalid email or password."


class NotAuthenticated(GlucoTrackError):
    default_message = "User not authenticated."


class NotFound(GlucoTrackError):
    default_message = "Record not found."


class ValidationFailure(GlucoTrackError):
    default_message = "Invalid input."


class RemoteServiceFailure(GlucoTrackError):
    default_message = "Remote service call failed."
