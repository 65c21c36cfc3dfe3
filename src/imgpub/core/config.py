"""Functions and data structures used to represent and manage the
configuration of the tag generation."""
from pathlib import Path
from typing import List, Optional

import toml
from attrs import define, field
from cattrs import structure

from imgpub.core.metadata import TagRule


@define(frozen=True, kw_only=True)
class ImageConfig:
    """Configuration of the published image.

    Arguments:
        name: the image's name without the tag (i.e. `ghcr.io/foo/bar`).
    """

    name: Optional[str] = None


@define(frozen=True, kw_only=True)
class TagsConfig:
    """Configuration of the generated tags.

    Arguments:
        rules: the rules used to generate the tags, in output order.
        edge_branch: the branch tagged as `edge`.
        sha_length: number of characters of the short commit SHA.
    """

    rules: List[TagRule] = field(factory=lambda: list(TagRule))
    edge_branch: str = "master"
    sha_length: int = field(default=7)

    @sha_length.validator
    def check_sha_length(self, _, value):  # pylint: disable=no-self-use
        """Validates the length of the short SHA."""
        if not 1 <= value <= 40:
            raise ValueError(f"sha_length must be between 1 and 40, got {value}")


@define(frozen=True, kw_only=True)
class Config:
    """Configuration of the tag generation.

    Arguments:
        image: the published image.
        tags: how tags are generated.
    """

    image: ImageConfig = field(factory=ImageConfig)
    tags: TagsConfig = field(factory=TagsConfig)


def load_config(path: Path | str) -> Config:
    """Loads the configuration from a file.

    Arguments:
        path: configuration file's path.
    """
    config = toml.load(path)

    return structure(config, Config)
