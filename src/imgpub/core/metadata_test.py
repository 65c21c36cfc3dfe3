from unittest import mock

import pytest
from testfixtures import ShouldRaise, compare

from imgpub.core.config import TagsConfig
from imgpub.core.metadata import (
    GitRef,
    RefKind,
    SemVer,
    SourceContext,
    TagRule,
    UnknownSource,
    candidate_tags,
    detect_source,
    parse_semver,
    sanitize_tag,
)

IMAGE = "ghcr.io/kitmatheinfo/latexfogel"
SHA = "0123456789abcdef0123456789abcdef01234567"


@pytest.mark.parametrize(
    ["ref", "expected"],
    [
        ("refs/heads/master", GitRef(kind=RefKind.BRANCH, name="master")),
        ("refs/heads/feature/foo", GitRef(kind=RefKind.BRANCH, name="feature/foo")),
        ("refs/tags/v1.2.3", GitRef(kind=RefKind.TAG, name="v1.2.3")),
        ("refs/pull/42/merge", GitRef(kind=RefKind.PULL_REQUEST, name="42")),
    ],
)
def test_GitRef_from_string__parse_ref(ref, expected):
    compare(GitRef.from_string(ref), expected)


@pytest.mark.parametrize(
    ["ref"],
    [
        ("master",),
        ("refs/heads/",),
        ("refs/pull/abc/merge",),
        ("refs/remotes/origin/master",),
    ],
)
def test_GitRef_from_string__raises_ValueError_if_unsupported(ref):
    with ShouldRaise(ValueError):
        GitRef.from_string(ref)


def test_SourceContext__normalizes_sha():
    source = SourceContext(ref=GitRef(kind=RefKind.BRANCH, name="master"), sha=SHA.upper())

    compare(source.sha, SHA)


def test_SourceContext__raises_ValueError_on_invalid_sha():
    with ShouldRaise(ValueError):
        SourceContext(ref=GitRef(kind=RefKind.BRANCH, name="master"), sha="abc")


@pytest.mark.parametrize(
    ["value", "expected"],
    [
        ("1.2.3", SemVer(major=1, minor=2, patch=3)),
        ("v10.0.1", SemVer(major=10, minor=0, patch=1)),
        ("v1.2.3-rc.1", SemVer(major=1, minor=2, patch=3, prerelease="rc.1")),
        ("v1.2.3+build.5", SemVer(major=1, minor=2, patch=3)),
        ("1.2", None),
        ("v01.2.3", None),
        ("release", None),
    ],
)
def test_parse_semver__parse_version(value, expected):
    compare(parse_semver(value), expected)


@pytest.mark.parametrize(
    ["version", "expected"],
    [
        (SemVer(major=1, minor=2, patch=3), "1.2.3"),
        (SemVer(major=1, minor=2, patch=3, prerelease="beta"), "1.2.3-beta"),
    ],
)
def test_SemVer__stringify_version(version, expected):
    compare(str(version), expected)


@pytest.mark.parametrize(
    ["value", "expected"],
    [
        ("master", "master"),
        ("feature/foo", "feature-foo"),
        ("fix/#12 crash", "fix-12-crash"),
        ("-dash", "dash"),
        ("a" * 200, "a" * 128),
    ],
)
def test_sanitize_tag__returns_valid_tag(value, expected):
    compare(sanitize_tag(value), expected)


def _source(ref: str) -> SourceContext:
    return SourceContext(ref=GitRef.from_string(ref), sha=SHA)


def test_candidate_tags__edge_branch():
    res = candidate_tags(IMAGE, TagsConfig(), _source("refs/heads/master"))

    compare(
        res,
        [
            f"{IMAGE}:master",
            f"{IMAGE}:edge",
            f"{IMAGE}:sha-0123456",
            f"{IMAGE}:sha-{SHA}",
        ],
    )


def test_candidate_tags__other_branch_is_sanitized_and_not_edge():
    res = candidate_tags(IMAGE, TagsConfig(), _source("refs/heads/feature/foo"))

    compare(res, [f"{IMAGE}:feature-foo", f"{IMAGE}:sha-0123456", f"{IMAGE}:sha-{SHA}"])


def test_candidate_tags__stable_semver_tag():
    res = candidate_tags(IMAGE, TagsConfig(), _source("refs/tags/v1.2.3"))

    compare(
        res,
        [
            f"{IMAGE}:v1.2.3",
            f"{IMAGE}:1.2.3",
            f"{IMAGE}:1.2",
            f"{IMAGE}:sha-0123456",
            f"{IMAGE}:sha-{SHA}",
            f"{IMAGE}:latest",
        ],
    )


def test_candidate_tags__prerelease_semver_tag_is_not_latest():
    res = candidate_tags(IMAGE, TagsConfig(), _source("refs/tags/v2.0.0-rc.1"))

    compare(
        res,
        [
            f"{IMAGE}:v2.0.0-rc.1",
            f"{IMAGE}:2.0.0-rc.1",
            f"{IMAGE}:sha-0123456",
            f"{IMAGE}:sha-{SHA}",
        ],
    )


def test_candidate_tags__non_semver_tag():
    res = candidate_tags(IMAGE, TagsConfig(), _source("refs/tags/nightly"))

    compare(res, [f"{IMAGE}:nightly", f"{IMAGE}:sha-0123456", f"{IMAGE}:sha-{SHA}"])


def test_candidate_tags__pull_request():
    res = candidate_tags(IMAGE, TagsConfig(), _source("refs/pull/42/merge"))

    compare(res, [f"{IMAGE}:pr-42", f"{IMAGE}:sha-0123456", f"{IMAGE}:sha-{SHA}"])


def test_candidate_tags__uses_configured_rules_and_sha_length():
    config = TagsConfig(rules=[TagRule.SHA, TagRule.EDGE], edge_branch="main", sha_length=12)

    res = candidate_tags(IMAGE, config, _source("refs/heads/main"))

    compare(res, [f"{IMAGE}:sha-0123456789ab", f"{IMAGE}:edge"])


def test_candidate_tags__removes_duplicates():
    config = TagsConfig(rules=[TagRule.BRANCH, TagRule.EDGE], edge_branch="edge")

    res = candidate_tags(IMAGE, config, _source("refs/heads/edge"))

    compare(res, [f"{IMAGE}:edge"])


def test_detect_source__uses_explicit_values_without_reading_repository():
    with mock.patch("imgpub.core.metadata.git") as git_mock:
        res = detect_source(".", ref="refs/tags/v1.0.0", sha=SHA)

    compare(res, SourceContext(ref=GitRef(kind=RefKind.TAG, name="v1.0.0"), sha=SHA))
    compare(git_mock.mock_calls, [])


def test_detect_source__uses_active_branch():
    with mock.patch("imgpub.core.metadata.git") as git_mock:
        git_mock.get_active_branch.return_value = "develop"
        git_mock.get_current_commit.return_value = SHA

        res = detect_source("repo")

    compare(res, SourceContext(ref=GitRef(kind=RefKind.BRANCH, name="develop"), sha=SHA))


def test_detect_source__uses_tag_of_detached_head():
    with mock.patch("imgpub.core.metadata.git") as git_mock:
        git_mock.get_active_branch.return_value = None
        git_mock.get_head_tags.return_value = ["v1.0.0", "v1.0.0-rc.2"]

        res = detect_source("repo", sha=SHA)

    compare(res, SourceContext(ref=GitRef(kind=RefKind.TAG, name="v1.0.0"), sha=SHA))


def test_detect_source__raises_UnknownSource_if_detached_and_untagged():
    with mock.patch("imgpub.core.metadata.git") as git_mock:
        git_mock.get_active_branch.return_value = None
        git_mock.get_head_tags.return_value = []

        with ShouldRaise(UnknownSource):
            detect_source("repo", sha=SHA)


def test_detect_source__raises_UnknownSource_on_invalid_ref():
    with ShouldRaise(UnknownSource):
        detect_source(".", ref="master", sha=SHA)
