"""Error and warning types raised while resolving script sources."""

from __future__ import annotations

__all__ = [
    "ExternalFileUrl",
    "FilePathNotFound",
    "InvalidPathFormat",
    "ServiceWorkerUsageWarning",
    "SourceResolutionError",
]


class ServiceWorkerUsageWarning(UserWarning):
    """Issued when site code registers scripts incorrectly.

    Misuse never aborts a response; the offending value is corrected or
    reported inline in the generated script instead.
    """


class SourceResolutionError(ValueError):
    """Base class for failures mapping a source URL onto a local file."""

    code: str = "source_resolution_error"


class InvalidPathFormat(SourceResolutionError):
    """The source URL is not a string."""

    code = "incorrect_path_format"


class ExternalFileUrl(SourceResolutionError):
    """The source URL points at a host other than the content directory's."""

    code = "external_file_url"


class FilePathNotFound(SourceResolutionError):
    """The source URL does not map to an existing file inside the content directory."""

    code = "file_path_not_found"
