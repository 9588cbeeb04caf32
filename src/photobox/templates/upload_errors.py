"""Exceptions raised while validating uploaded images."""


class UploadError(Exception):
    """Base class for upload validation errors."""


class UnsupportedMediaError(UploadError):
    """Raised when the Content-Type or file signature is not allowed."""


class PayloadTooLargeError(UploadError):
    """Raised when the uploaded file exceeds the configured limit."""


class UploadReadError(UploadError):
    """Raised when streaming or decoding the upload fails."""
