"""Exceptions raised while renaming files."""


class RenamerError(Exception):
    """Base class for airenamer errors."""


class MetadataProbeError(RenamerError):
    """Raised when filesystem metadata cannot be read. Never fatal."""


class UnsupportedFileError(RenamerError):
    """Raised when a file cannot be handled by any content source."""


class NoExtractableContentError(RenamerError):
    """Raised when a supported file yields no usable content."""


class ModelInvocationError(RenamerError):
    """Raised when the chat model call fails after retries."""


class CleanupError(RenamerError):
    """Raised when a temporary working directory cannot be removed."""


class RevertError(RenamerError):
    """Raised when a logged rename cannot be undone."""
