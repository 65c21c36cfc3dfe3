"""Contains all the integrations with Git."""
from typing import List, Optional

from dulwich.objects import Tag
from dulwich.repo import Repo

_HEADS_PREFIX = b"refs/heads/"


def get_current_commit(path: str) -> str:
    """Returns the SHA commit for the current HEAD.

    Arguments:
        path: path to the repository's directory.

    Returns:
        The head's commit SHA.
    """
    with Repo(path) as repo:
        return repo.head().decode("utf-8")


def get_active_branch(path: str) -> Optional[str]:
    """Returns the branch checked out in the repository.

    Arguments:
        path: path to the repository's directory.

    Returns:
        The branch name or `None` if the HEAD is detached.
    """
    with Repo(path) as repo:
        refnames, _ = repo.refs.follow(b"HEAD")

    target = refnames[-1]
    if not target.startswith(_HEADS_PREFIX):
        return None

    return target[len(_HEADS_PREFIX) :].decode("utf-8")


def get_head_tags(path: str) -> List[str]:
    """Returns all the tags pointing at the current HEAD.

    Annotated tags are resolved to the commit they point at.

    Arguments:
        path: path to the repository's directory.

    Returns:
        The tag names sorted alphabetically.
    """
    with Repo(path) as repo:
        head = repo.head()
        tags = []

        for name, sha in repo.refs.as_dict(b"refs/tags").items():
            obj = repo[sha]
            while isinstance(obj, Tag):
                _, sha = obj.object
                obj = repo[sha]

            if sha == head:
                tags.append(name.decode("utf-8"))

    return sorted(tags)
