"""Exceptions raised across the assessment SDK.

Validation problems are never exceptions: they travel as data in the
session's ``errors`` map.  What remains here is:

  - StepCatalogError: a malformed step catalog, detected at load time
  - SubmissionError and its subclasses: failures reported by the
    submission collaborator; the session turns them into a user-visible
    ``errors["submit"]`` entry and keeps the draft
"""


class StepCatalogError(ValueError):
    """The step catalog is empty or internally inconsistent."""


class SubmissionError(Exception):
    """Base class for failures reported by a submission collaborator.

    ``user_message`` is safe to show to the person filling the form.
    """

    user_message = "Submission failed. Please try again."

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message


class NetworkError(SubmissionError):
    """The backend could not be reached (connection error, timeout)."""

    user_message = "Could not reach the server. Check the connection and try again."


class ServerValidationError(SubmissionError):
    """The backend rejected the payload as invalid.

    ``field_errors`` maps draft field names to server-side messages when the
    backend reports them.
    """

    user_message = "The server rejected some answers. Please review them."

    def __init__(
        self,
        message: str,
        *,
        field_errors: dict[str, str] | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message, user_message=user_message)
        self.field_errors = dict(field_errors or {})


class ServerError(SubmissionError):
    """The backend failed while processing an otherwise valid request."""

    user_message = "The server failed to save the assessment. Please try again later."

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message, user_message=user_message)
        self.status_code = status_code
