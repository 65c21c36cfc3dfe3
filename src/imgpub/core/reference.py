"""Representation of a reference to a container image (repository + tag)."""
import re
from typing import List

from attrs import define, field

__all__ = [
    "DEFAULT_TAG",
    "ImageReference",
    "InvalidReference",
    "is_valid_repository",
    "is_valid_tag",
    "parse_tag_list",
]

DEFAULT_TAG = "latest"

_PATH_COMPONENT = r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_DOMAIN = rf"{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*(?::[0-9]+)?"

_REPOSITORY_RE = re.compile(rf"^(?:{_DOMAIN}/)?{_PATH_COMPONENT}(?:/{_PATH_COMPONENT})*$")
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$", re.ASCII)

_MAX_REPOSITORY_LENGTH = 255


class InvalidReference(ValueError):
    """Raised when a string is not a valid image reference."""


def is_valid_repository(name: str) -> bool:
    """Checks if the name is a valid repository name.

    A repository name is an optional registry host (with an optional port)
    followed by one or more lowercase path components separated by `/`, i.e.
    `ghcr.io/kitmatheinfo/latexfogel` or `latexfogel`.
    """
    if len(name) > _MAX_REPOSITORY_LENGTH:
        return False

    return _REPOSITORY_RE.match(name) is not None


def is_valid_tag(tag: str) -> bool:
    """Checks if the tag is valid.

    Valid tags MUST match the following requirements:

    * have between 1 and 128 characters
    * first character is alphanumeric or `_`
    * any other character can be alphanumeric, `_`, `.` or `-`
    """
    return _TAG_RE.match(tag) is not None


@define(frozen=True, kw_only=True, order=True)
class ImageReference:
    """Identifies a container image inside a runtime's local store or a remote
    registry.

    Arguments:
        repository: the image's repository (i.e. `ghcr.io/kitmatheinfo/latexfogel`).
        tag: the image's tag (i.e. `v1.2.3`).
    """

    repository: str = field()
    tag: str = field(default=DEFAULT_TAG)

    @repository.validator
    def check_repository(self, _, value):  # pylint: disable=no-self-use
        """Validates the reference's repository."""
        if not is_valid_repository(value):
            raise InvalidReference(f"invalid repository name {value!r}")

    @tag.validator
    def check_tag(self, _, value):  # pylint: disable=no-self-use
        """Validates the reference's tag."""
        if not is_valid_tag(value):
            raise InvalidReference(f"invalid tag {value!r}")

    def __str__(self):
        return f"{self.repository}:{self.tag}"

    @classmethod
    def from_string(cls, ref: str) -> "ImageReference":
        """Creates an instance of ImageReference from its string representation.

        The tag is optional (i.e. `ghcr.io/foo/bar:v1`, `localhost:5000/bar`)
        and defaults to `latest` like the docker CLI does. References by digest
        are not supported because a digest cannot be the target of a tag.

        Arguments:
            ref: the reference to convert.

        Returns:
            The reference represented by the given string.

        Raises:
            InvalidReference: if the reference is invalid.
        """
        if "@" in ref:
            raise InvalidReference(f"digest references are not supported: {ref!r}")

        repository, sep, tag = ref.rpartition(":")

        # a colon followed by a path is a registry port, not a tag
        if not sep or "/" in tag:
            return cls(repository=ref)

        return cls(repository=repository, tag=tag)


def parse_tag_list(tag_list: str, sep: str = ",") -> List[ImageReference]:
    """Splits a separated list of image references.

    Whitespace around each entry is ignored. Any empty entry invalidates the
    whole list. Duplicated references are returned once, in the position they
    first appear.

    Arguments:
        tag_list: the references to parse (i.e. `foo:a,foo:b`).
        sep: the separator between the entries.

    Returns:
        All the parsed references in order.

    Raises:
        InvalidReference: if the list is empty, contains an empty entry or an
            entry that is not a valid reference.
    """
    refs: List[ImageReference] = []

    for idx, entry in enumerate(tag_list.split(sep)):
        entry = entry.strip()
        if not entry:
            raise InvalidReference(f"empty tag at position {idx} in {tag_list!r}")

        ref = ImageReference.from_string(entry)
        if ref not in refs:
            refs.append(ref)

    return refs
