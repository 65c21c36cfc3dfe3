"""Generation of the candidate image tags from the source-control context of a
build (branch, pull request, git tag, semantic version and commit)."""
import enum
import re
from typing import TYPE_CHECKING, Iterable, List, Optional

from attrs import define, field
from dulwich.errors import NotGitRepository

from imgpub.core import git

if TYPE_CHECKING:
    from imgpub.core.config import TagsConfig

__all__ = [
    "RefKind",
    "GitRef",
    "SemVer",
    "SourceContext",
    "TagRule",
    "UnknownSource",
    "candidate_tags",
    "detect_source",
    "parse_semver",
    "sanitize_tag",
]

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)
_SHA_RE = re.compile(r"^[0-9a-f]{40}$")
_PULL_RE = re.compile(r"^refs/pull/(?P<number>\d+)/")
_INVALID_TAG_CHARS_RE = re.compile(r"[^a-zA-Z0-9._-]+")

_MAX_TAG_LENGTH = 128


class UnknownSource(Exception):
    """Raised when the source-control context cannot be determined."""


@enum.unique
class RefKind(enum.Enum):
    """The kind of git ref being built.

    Attributes:

    * `BRANCH`: a push to a branch.
    * `TAG`: a push of a git tag.
    * `PULL_REQUEST`: a pull request.
    """

    BRANCH = "BRANCH"
    TAG = "TAG"
    PULL_REQUEST = "PULL_REQUEST"


@enum.unique
class TagRule(enum.Enum):
    """A way of deriving an image tag from the source context.

    Attributes:

    * `BRANCH`: the branch name.
    * `PULL_REQUEST`: `pr-<number>`.
    * `TAG`: the git tag name.
    * `SEMVER_VERSION`: the full semantic version of a git tag.
    * `SEMVER_MINOR`: `<major>.<minor>` of a stable semantic version.
    * `EDGE`: `edge` for the edge branch.
    * `SHA`: `sha-` followed by the short commit SHA.
    * `SHA_LONG`: `sha-` followed by the full commit SHA.
    * `LATEST`: `latest` for a stable semantic version.
    """

    BRANCH = "branch"
    PULL_REQUEST = "pr"
    TAG = "tag"
    SEMVER_VERSION = "semver-version"
    SEMVER_MINOR = "semver-minor"
    EDGE = "edge"
    SHA = "sha"
    SHA_LONG = "sha-long"
    LATEST = "latest"


@define(frozen=True, kw_only=True)
class GitRef:
    """A git ref being built.

    Arguments:
        kind: the kind of ref.
        name: branch name, tag name or pull request number.
    """

    kind: RefKind
    name: str

    @classmethod
    def from_string(cls, ref: str) -> "GitRef":
        """Parses a fully qualified git ref (i.e. `refs/heads/master`,
        `refs/tags/v1.0.0`, `refs/pull/12/merge`).

        Raises:
            ValueError: if the ref is not a branch, tag or pull request ref.
        """
        if ref.startswith("refs/heads/") and len(ref) > len("refs/heads/"):
            return cls(kind=RefKind.BRANCH, name=ref[len("refs/heads/") :])

        if ref.startswith("refs/tags/") and len(ref) > len("refs/tags/"):
            return cls(kind=RefKind.TAG, name=ref[len("refs/tags/") :])

        match = _PULL_RE.match(ref)
        if match is not None:
            return cls(kind=RefKind.PULL_REQUEST, name=match.group("number"))

        raise ValueError(f"unsupported git ref {ref!r}")


def _check_sha(_, __, value: str):
    if _SHA_RE.match(value) is None:
        raise ValueError(f"invalid commit sha {value!r}")


@define(frozen=True, kw_only=True)
class SourceContext:
    """The source-control context of a build.

    Arguments:
        ref: the git ref being built.
        sha: the full commit SHA being built.
    """

    ref: GitRef
    sha: str = field(converter=str.lower, validator=_check_sha)


@define(frozen=True, kw_only=True)
class SemVer:
    """A semantic version.

    Arguments:
        major: major version.
        minor: minor version.
        patch: patch version.
        prerelease: pre-release identifiers, if any (i.e. `rc.1`).
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None

    def __str__(self):
        version = f"{self.major}.{self.minor}.{self.patch}"

        if self.prerelease is None:
            return version

        return f"{version}-{self.prerelease}"


def parse_semver(value: str) -> Optional[SemVer]:
    """Parses a semantic version, optionally prefixed by `v`.

    Build metadata is accepted but dropped since it cannot be part of a tag.

    Returns:
        The version or `None` if the value is not a semantic version.
    """
    match = _SEMVER_RE.match(value)
    if match is None:
        return None

    return SemVer(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=match.group("prerelease"),
    )


def sanitize_tag(value: str) -> str:
    """Converts a value into a valid image tag.

    Every run of invalid characters is replaced by `-` (i.e. `feature/foo`
    becomes `feature-foo`), leading `.` and `-` are removed and the result is
    truncated to the maximum tag length.
    """
    tag = _INVALID_TAG_CHARS_RE.sub("-", value).lstrip(".-")

    return tag[:_MAX_TAG_LENGTH]


def _apply_rule(rule: TagRule, config: "TagsConfig", source: SourceContext) -> Optional[str]:
    ref = source.ref
    version = parse_semver(ref.name) if ref.kind is RefKind.TAG else None
    stable = version is not None and version.prerelease is None

    match rule:
        case TagRule.BRANCH if ref.kind is RefKind.BRANCH:
            return sanitize_tag(ref.name)

        case TagRule.PULL_REQUEST if ref.kind is RefKind.PULL_REQUEST:
            return f"pr-{ref.name}"

        case TagRule.TAG if ref.kind is RefKind.TAG:
            return sanitize_tag(ref.name)

        case TagRule.SEMVER_VERSION if version is not None:
            return str(version)

        case TagRule.SEMVER_MINOR if stable:
            return f"{version.major}.{version.minor}"

        case TagRule.EDGE if ref.kind is RefKind.BRANCH and ref.name == config.edge_branch:
            return "edge"

        case TagRule.SHA:
            return f"sha-{source.sha[:config.sha_length]}"

        case TagRule.SHA_LONG:
            return f"sha-{source.sha}"

        case TagRule.LATEST if stable:
            return "latest"

        case _:
            return None


def candidate_tags(image_name: str, config: "TagsConfig", source: SourceContext) -> List[str]:
    """Generates the references an image built from the given source should
    be published as.

    Arguments:
        image_name: the image's name without the tag (i.e. `ghcr.io/foo/bar`).
        config: the rules to apply.
        source: the source-control context of the build.

    Returns:
        The full references (i.e. `ghcr.io/foo/bar:edge`), without duplicates
        and ordered as the rules in the configuration.
    """
    refs: List[str] = []

    for rule in config.rules:
        tag = _apply_rule(rule, config, source)
        if not tag:
            continue

        ref = f"{image_name}:{tag}"
        if ref not in refs:
            refs.append(ref)

    return refs


def _first(values: Iterable[str]) -> Optional[str]:
    return next(iter(values), None)


def detect_source(path: str, ref: Optional[str] = None, sha: Optional[str] = None) -> SourceContext:
    """Determines the source-control context of a build.

    Values not given explicitly are read from the local repository: the
    commit is the current HEAD and the ref is the active branch or, when the
    HEAD is detached, the first tag pointing at it.

    Arguments:
        path: path to the repository's directory.
        ref: the fully qualified git ref being built, if known.
        sha: the commit SHA being built, if known.

    Raises:
        UnknownSource: if the ref cannot be determined or is invalid.
    """
    try:
        if ref:
            git_ref = GitRef.from_string(ref)

        else:
            branch = git.get_active_branch(path)
            tag = None if branch is not None else _first(git.get_head_tags(path))

            if branch is not None:
                git_ref = GitRef(kind=RefKind.BRANCH, name=branch)

            elif tag is not None:
                git_ref = GitRef(kind=RefKind.TAG, name=tag)

            else:
                raise UnknownSource(f"HEAD of {path} is detached and not tagged")

        return SourceContext(ref=git_ref, sha=sha or git.get_current_commit(path))

    except NotGitRepository as exc:
        raise UnknownSource(f"{path} is not a git repository") from exc

    except (KeyError, ValueError) as exc:
        raise UnknownSource(str(exc)) from exc
