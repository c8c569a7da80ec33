"""Custom exceptions for the image upload pipeline."""


class UploadPipelineError(Exception):
    """Base exception for the image upload pipeline."""
    pass


class NotAuthenticatedError(UploadPipelineError):
    """Exception raised when files are offered without a signed-in session."""
    pass


class ValidationError(UploadPipelineError):
    """Exception raised when a file fails intake validation."""
    pass


class UnsupportedFileTypeError(ValidationError):
    """Exception raised when a file's MIME type is not whitelisted."""
    pass


class FileTooLargeError(ValidationError):
    """Exception raised when a file exceeds the size limit."""
    pass


class StorageBindingError(UploadPipelineError):
    """Exception raised when the storage collaborator fails."""
    pass


class AuthorizationError(StorageBindingError):
    """Exception raised when a signed upload target cannot be obtained."""
    pass


class TransferError(StorageBindingError):
    """Exception raised when file bytes cannot be transferred."""
    pass


class RecordingError(UploadPipelineError):
    """Exception raised when the image record endpoint fails."""
    pass


class StorageError(Exception):
    """Exception raised when a server-side storage operation fails."""
    pass
