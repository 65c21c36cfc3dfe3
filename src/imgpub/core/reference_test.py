import pytest
from testfixtures import ShouldRaise, compare

from imgpub.core.reference import (
    ImageReference,
    InvalidReference,
    is_valid_repository,
    is_valid_tag,
    parse_tag_list,
)


@pytest.mark.parametrize(
    ["name"],
    [
        ("latexfogel",),
        ("kitmatheinfo/latexfogel",),
        ("ghcr.io/kitmatheinfo/latexfogel",),
        ("localhost:5000/foo",),
        ("foo__bar/spam-eggs.v2",),
    ],
)
def test_is_valid_repository__return_true_for_valid_name(name):
    compare(is_valid_repository(name), True)


@pytest.mark.parametrize(
    ["name"],
    [
        ("",),
        ("Foo",),
        ("foo/",),
        ("/foo",),
        ("foo//bar",),
        ("-foo",),
        ("foo:bar",),
        ("a" * 256,),
    ],
)
def test_is_valid_repository__return_false_for_invalid_name(name):
    compare(is_valid_repository(name), False)


@pytest.mark.parametrize(
    ["tag", "expected"],
    [
        ("latest", True),
        ("v1.2.3", True),
        ("sha-abc1234", True),
        ("_private", True),
        ("", False),
        (".hidden", False),
        ("-dash", False),
        ("feature/foo", False),
        ("a" * 128, True),
        ("a" * 129, False),
    ],
)
def test_is_valid_tag__validates_tag(tag, expected):
    compare(is_valid_tag(tag), expected)


@pytest.mark.parametrize(
    ["ref", "repository", "tag"],
    [
        ("latexfogel:abc", "latexfogel", "abc"),
        ("ghcr.io/kitmatheinfo/latexfogel:v1.2", "ghcr.io/kitmatheinfo/latexfogel", "v1.2"),
        ("localhost:5000/foo:bar", "localhost:5000/foo", "bar"),
        ("localhost:5000/foo", "localhost:5000/foo", "latest"),
        ("latexfogel", "latexfogel", "latest"),
    ],
)
def test_ImageReference_from_string__parse_reference(ref, repository, tag):
    res = ImageReference.from_string(ref)

    compare(res, ImageReference(repository=repository, tag=tag))


@pytest.mark.parametrize(
    ["ref"],
    [
        ("",),
        ("foo:",),
        ("Foo:bar",),
        ("foo:bar/baz:",),
        ("foo@sha256:" + "a" * 64,),
    ],
)
def test_ImageReference_from_string__raises_InvalidReference_if_invalid(ref):
    with ShouldRaise(InvalidReference):
        ImageReference.from_string(ref)


def test_ImageReference__stringify_a_reference():
    ref = ImageReference(repository="ghcr.io/foo/bar", tag="edge")

    compare(str(ref), "ghcr.io/foo/bar:edge")


def test_ImageReference__invalid_reference_is_a_ValueError():
    with pytest.raises(ValueError):
        ImageReference(repository="foo", tag="")


def test_parse_tag_list__returns_references_in_order():
    res = parse_tag_list("foo:c,foo:a,bar:b")

    compare(
        res,
        [
            ImageReference(repository="foo", tag="c"),
            ImageReference(repository="foo", tag="a"),
            ImageReference(repository="bar", tag="b"),
        ],
    )


def test_parse_tag_list__strips_whitespace():
    res = parse_tag_list(" foo:a ,\nfoo:b")

    compare(res, [ImageReference(repository="foo", tag="a"), ImageReference(repository="foo", tag="b")])


def test_parse_tag_list__removes_duplicates_keeping_first_position():
    res = parse_tag_list("foo:a,foo:b,foo:a")

    compare(res, [ImageReference(repository="foo", tag="a"), ImageReference(repository="foo", tag="b")])


@pytest.mark.parametrize(
    ["tag_list"],
    [
        ("a,,c",),
        ("a,b,",),
        (",a",),
        ("",),
        ("a, ,c",),
    ],
)
def test_parse_tag_list__raises_InvalidReference_on_empty_entry(tag_list):
    with ShouldRaise(InvalidReference):
        parse_tag_list(tag_list)


def test_parse_tag_list__raises_InvalidReference_on_invalid_entry():
    with ShouldRaise(InvalidReference):
        parse_tag_list("foo:a,Foo:b")
