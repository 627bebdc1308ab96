"""
Error taxonomy for the upload, transform and placeholder surfaces.

Every error carries the HTTP status it maps to; the application registers a
single handler that renders them as ``{"status": "error", "message": ...}``.
"""


class ImageServerError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidKeyError(ImageServerError):
    """Key is not a single ``*.png``/``*.jpg`` path segment."""

    status_code = 403
    default_message = "Unsupported image format"


class ImageNotFoundError(ImageServerError):
    status_code = 404
    default_message = "Image has not been uploaded yet"


class StorageIOError(ImageServerError):
    """Disk failure while reading or writing a stored image."""

    status_code = 500
    default_message = "Storage failure"


class UnreadableImageError(ImageServerError):
    """Stored bytes exist but cannot be decoded."""

    status_code = 500
    default_message = "Stored image cannot be decoded"


class PayloadTooLargeError(ImageServerError):
    status_code = 413
    default_message = "Request body exceeds the upload size limit"


class UnsupportedMediaTypeError(ImageServerError):
    status_code = 415
    default_message = "Request body must be an image"


class OutputTooLargeError(ImageServerError):
    status_code = 400
    default_message = "Requested size too large"
