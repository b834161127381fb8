"""Helpers for tests."""

import re
from typing import Dict, Iterable, Optional

PUSH_SHA = "d07ca4f716c62d6f4a481a74b54b448b95bbe3d9"


def make_commit(added=(), modified=(), removed=()) -> Dict:
    return {
        "id": PUSH_SHA,
        "message": "docs: update",
        "added": list(added),
        "modified": list(modified),
        "removed": list(removed),
    }


def make_push_payload(
    ref: str = "refs/heads/12-x-y",
    repo: str = "electron/electron",
    commits: Optional[Iterable[Dict]] = None,
    after: str = PUSH_SHA,
) -> Dict:
    """Make a push event payload, by default a docs change on 12-x-y."""
    if commits is None:
        commits = [make_commit(modified=["docs/api/app.md", "shell/browser/api/electron_api_app.cc"])]
    return {
        "ref": ref,
        "before": "0" * 40,
        "after": after,
        "repository": {"full_name": repo, "name": repo.partition("/")[2]},
        "commits": list(commits),
        "sender": {"login": "someone"},
    }


def make_release_payload(
    tag_name: str = "v12.0.7",
    action: str = "released",
    draft: bool = False,
    prerelease: bool = False,
    repo: str = "electron/electron",
) -> Dict:
    return {
        "action": action,
        "release": {
            "tag_name": tag_name,
            "draft": draft,
            "prerelease": prerelease,
        },
        "repository": {"full_name": repo, "name": repo.partition("/")[2]},
        "sender": {"login": "someone"},
    }


def check_good_graphql(text: str) -> None:
    """
    Do some simple checks of a GraphQL query.

    Returns:
        Nothing.  Will raise an exception with a failure message if something
        is wrong.
    """
    # Remove all comments.
    code = re.sub(r"(?m)#.*$", "", text)

    # The first word should be "query" or "mutation".
    first = code.split(None, 1)[0]
    if first not in {"query", "mutation"}:
        raise ValueError(f"GraphQL query starts with wrong word: {text!r}")

    # Parens should be balanced.
    stack = []
    pairs = {")": "(", "}": "{", "]": "["}
    for ch in code:
        if ch in pairs.values():
            stack.append(ch)
        elif ch in pairs.keys():            # pylint: disable=consider-iterating-dictionary
            if not stack or stack[-1] != pairs[ch]:
                raise ValueError(f"GraphQL query has unbalanced parens: {text!r}")
            stack.pop()
    if stack:
        raise ValueError(f"GraphQL query has unbalanced parens: {text!r}")
