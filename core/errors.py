"""Custom exception types for the directory wizard and its collaborators."""

from __future__ import annotations


class DirectoryError(Exception):
    """Base exception for wizard and directory related issues."""


class ValidationFailed(DirectoryError):
    """Raised when form fields do not satisfy a step's rules."""

    def __init__(self, step_key: str, message: str) -> None:
        super().__init__(message)
        self.step_key = step_key


class MediaError(DirectoryError):
    """Base exception for rejected profile picture selections."""


NOT_AN_IMAGE_MESSAGE = "File must be an image"
UNSUPPORTED_FORMAT_MESSAGE = "HEIC images are not supported. Please use JPG or PNG."


class NotAnImageError(MediaError):
    """Raised when the selected file is not a decodable image."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or NOT_AN_IMAGE_MESSAGE)


class UnsupportedImageFormatError(MediaError):
    """Raised for image formats the crop pipeline cannot process."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or UNSUPPORTED_FORMAT_MESSAGE)


IMAGE_TOO_LARGE_MESSAGE = "Image is too large. Please choose a smaller picture."


class ImageTooLargeError(MediaError):
    """Raised when an image exceeds the upload or decoded pixel limits."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or IMAGE_TOO_LARGE_MESSAGE)


class CollaboratorError(DirectoryError):
    """Raised when an external service rejects a request.

    The message is the collaborator's own text and is shown to the user as is.
    """


class AuthError(CollaboratorError):
    """Raised by the identity provider."""


class StoreError(CollaboratorError):
    """Raised by the profile store."""


class UploadError(CollaboratorError):
    """Raised by the object store."""


AUTH_REQUIRED_MESSAGE = "No authenticated user found. Please try logging in again."


class AuthenticationRequiredError(DirectoryError):
    """Raised when a submission is attempted without a session."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or AUTH_REQUIRED_MESSAGE)


class SubmissionInProgressError(DirectoryError):
    """Raised when a second submission starts before the first one finished."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "A submission is already in progress.")
