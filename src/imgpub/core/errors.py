"""Errors raised while publishing an image.

Every error carries the exit code used by the ``publish`` command, so that the
CI job invoking it can tell the failure categories apart.
"""

__all__ = [
    "PublishError",
    "ArtifactError",
    "RuntimeUnavailable",
    "TagError",
    "PushError",
]


class PublishError(Exception):
    """Base class for all the failures happening while publishing an image."""

    exit_code = 1


class ArtifactError(PublishError):
    """Raised when the image artifact cannot be loaded into the runtime."""

    exit_code = 3


class RuntimeUnavailable(PublishError):
    """Raised when the container runtime cannot be reached."""

    exit_code = 4


class TagError(PublishError):
    """Raised when a destination tag cannot be created.

    Arguments:
        destination: the reference that could not be created.
    """

    exit_code = 5

    def __init__(self, destination, message: str) -> None:
        super().__init__(message)

        self.destination = destination


class PushError(PublishError):
    """Raised when the registry does not accept the pushed tags.

    Arguments:
        repository: the repository being pushed.
    """

    exit_code = 6

    def __init__(self, repository: str, message: str) -> None:
        super().__init__(message)

        self.repository = repository
