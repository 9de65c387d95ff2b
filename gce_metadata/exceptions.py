from typing import Optional


class MetadataError(Exception):
    """Base class for metadata client exceptions."""


class NotOnGce(MetadataError):
    """Raised by a strict client when the process is not running on GCE."""

    def __init__(self, message: str = "Not running on Google Compute Engine.") -> None:
        super().__init__(message)


class PathNotFound(MetadataError):
    """Raised when the metadata server responds 404 for a path."""

    status_code = 404

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__("Metadata path '{}' not found.".format(path))


class TransportFailure(MetadataError):
    """Raised when a metadata request fails or its response can't be used."""

    def __init__(
        self,
        path: str,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
    ) -> None:
        self.path = path
        self.status_code = status_code
        if message is None:
            message = "Request for metadata path '{}' failed with status {}.".format(
                path, status_code
            )
        super().__init__(message)


class ClientClosed(MetadataError):
    """Raised when a closed MetadataClient is used."""

    def __init__(self) -> None:
        super().__init__("MetadataClient is closed.")
