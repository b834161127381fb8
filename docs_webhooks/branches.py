"""
Classify release-line branches.

Release lines are branches named ``<N>-x-y``, where N is the major version.
Pushes arrive with a full ref (``refs/heads/12-x-y``), while the latest
published version gives us a bare branch name (``12-x-y``).  Both forms are
accepted everywhere.
"""

import re

from docs_webhooks.types import LineOrder

RELEASE_LINE_RE = re.compile(r"(?:refs/heads/)?(\d+)-x-y")
VERSION_TAIL_RE = re.compile(r"\.\d+\.\d+$")
HEADS_PREFIX = "refs/heads/"


class UnparsableRef(ValueError):
    """A ref that doesn't name a release line."""


def parse_major(ref: str) -> int:
    """
    Get the major version of a release-line ref.

    The whole ref has to match, so backport branches such as
    ``trop/12-x-y-bp-fix-1234`` and suffixed names such as
    ``12-x-y-something`` are rejected.

    Raises:
        UnparsableRef: if `ref` isn't a release line.
    """
    match = RELEASE_LINE_RE.fullmatch(ref)
    if match is None:
        raise UnparsableRef(f"Not a release line: {ref!r}")
    return int(match[1])


def is_canonical(ref: str) -> bool:
    return RELEASE_LINE_RE.fullmatch(ref) is not None


def compare_lines(latest_major: int, current_major: int) -> LineOrder:
    """
    Compare a release line to the latest one.

    A line newer than the latest (an unreleased next major) is reported the
    same as the latest line.
    """
    if current_major < latest_major:
        return LineOrder.OLDER
    return LineOrder.LATEST_OR_NEWER


def is_latest(latest_ref: str, current_ref: str) -> bool:
    """
    Is `current_ref` on the latest release line (or a newer one)?

    Refs that aren't release lines are never latest.
    """
    try:
        latest_major = parse_major(latest_ref)
        current_major = parse_major(current_ref)
    except UnparsableRef:
        return False
    return compare_lines(latest_major, current_major) is LineOrder.LATEST_OR_NEWER


def branch_name(ref: str) -> str:
    """Strip ``refs/heads/`` from a ref, if it's there."""
    if ref.startswith(HEADS_PREFIX):
        return ref[len(HEADS_PREFIX):]
    return ref


def branch_from_version(version: str) -> str:
    """
    Get the release-line branch for a version: ``"12.0.6"`` -> ``"12-x-y"``.
    """
    return VERSION_TAIL_RE.sub("-x-y", version)
