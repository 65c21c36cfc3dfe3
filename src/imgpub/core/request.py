"""Validation of the inputs needed to publish an image."""
from pathlib import Path
from typing import List

from attrs import define

from imgpub.core.reference import ImageReference, parse_tag_list


@define(frozen=True, kw_only=True)
class PublishRequest:
    """Everything needed to publish an image artifact.

    Arguments:
        artifact: path to the serialized image produced by the build.
        base: the reference the artifact is loaded as.
        destinations: all the references to create from `base`, in order.
    """

    artifact: Path
    base: ImageReference
    destinations: List[ImageReference]

    @classmethod
    def from_args(
        cls,
        artifact_path: str,
        base_repository: str,
        base_tag: str,
        tag_list: str,
    ) -> "PublishRequest":
        """Creates a request from the raw command line arguments.

        Arguments:
            artifact_path: path to the image artifact.
            base_repository: repository name baked into the artifact.
            base_tag: tag baked into the artifact.
            tag_list: comma separated destination references.

        Returns:
            The validated request.

        Raises:
            ValueError: if any argument is empty or invalid.
        """
        missing = [
            name
            for name, value in (
                ("artifact_path", artifact_path),
                ("base_repository", base_repository),
                ("base_tag", base_tag),
                ("tag_list", tag_list),
            )
            if not value or not value.strip()
        ]
        if missing:
            raise ValueError(f"missing required arguments: {', '.join(missing)}")

        return cls(
            artifact=Path(artifact_path),
            base=ImageReference(repository=base_repository, tag=base_tag),
            destinations=parse_tag_list(tag_list),
        )

    @property
    def external_destinations(self) -> List[ImageReference]:
        """Destinations outside the base repository.

        Pushing all the tags of the base repository does not include them.
        """
        return [dest for dest in self.destinations if dest.repository != self.base.repository]
