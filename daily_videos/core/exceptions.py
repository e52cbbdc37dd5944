"""
Exception classes for daily-videos.
"""


class DailyVideosError(Exception):
    """Base exception for all daily-videos errors."""
    pass


class ConfigurationError(DailyVideosError):
    """Raised when configuration is invalid or missing."""
    pass


class MediaLibraryError(DailyVideosError):
    """Base exception for media library errors."""
    pass


class PermissionDenied(MediaLibraryError):
    """Raised when access to the media library has not been granted."""
    pass


class LibraryUnavailable(MediaLibraryError):
    """Raised when the media library cannot be queried right now."""
    pass


class PhotoKitImportError(LibraryUnavailable):
    """Raised when PyObjC/Photos dependencies are not available."""
    pass


class PersistenceUnavailable(DailyVideosError):
    """Raised when the preference/pin store cannot be read or written."""
    pass
