"""Base class for the container runtimes able to publish an image."""
import abc
from pathlib import Path

from imgpub.core.reference import ImageReference


class ContainerRuntime(abc.ABC):
    """Client of a container runtime holding a local image store and able to
    push to a remote registry."""

    @abc.abstractmethod
    def load(self, artifact: Path):
        """Imports an image artifact into the local store.

        Arguments:
            artifact: path to the serialized image.

        Raises:
            ArtifactError: if the artifact is missing or not a valid image.
            RuntimeUnavailable: if the runtime cannot be reached.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def exists(self, reference: ImageReference) -> bool:
        """Checks if a reference is present in the local store.

        Arguments:
            reference: the reference to look up.

        Raises:
            RuntimeUnavailable: if the runtime cannot be reached.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def tag(self, source: ImageReference, destination: ImageReference):
        """Creates a new reference pointing at the same image as `source`.

        An already existing `destination` is moved to the new image.

        Arguments:
            source: an existing reference.
            destination: the reference to create.

        Raises:
            TagError: if the reference cannot be created.
            RuntimeUnavailable: if the runtime cannot be reached.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def push_all_tags(self, repository: str):
        """Pushes all the local tags of a repository to its registry.

        Arguments:
            repository: the repository to push (i.e. `ghcr.io/foo/bar`).

        Raises:
            PushError: if the registry rejects the push.
            RuntimeUnavailable: if the runtime cannot be reached.
        """
        raise NotImplementedError
