"""Types specific to docs_webhooks."""

from __future__ import annotations

import dataclasses
import enum
from typing import Dict, Optional, Tuple

# A webhook payload as described by a JSON object.
PayloadDict = Dict

# The client_payload of a repository_dispatch: {"sha"} or {"sha", "branch"}.
ClientPayload = Dict[str, str]


def _text(value, name: str) -> str:
    """Check that a payload value is a string."""
    if not isinstance(value, str):
        raise TypeError(f"Expected a string for {name}, got {value!r}")
    return value


def _paths(commit, key: str) -> Tuple[str, ...]:
    return tuple(_text(path, f"commits[].{key}") for path in commit.get(key) or ())


class LineOrder(enum.Enum):
    """Where a release line sits relative to the latest line."""
    OLDER = "older"
    LATEST_OR_NEWER = "latest_or_newer"


class RoutingPolicy(enum.Enum):
    """How a docs push turns into dispatch events."""
    # A branch event for every release line, plus a current event for latest.
    DUAL = "dual"
    # Like DUAL, but lines newer than the latest release are ignored.
    DUAL_GUARDED = "dual_guarded"
    # One doc_changes event, only for pushes to the latest line.
    LEGACY = "legacy"


@dataclasses.dataclass(frozen=True)
class PushCommit:
    added: Tuple[str, ...] = ()
    modified: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, commit: PayloadDict) -> PushCommit:
        return cls(
            added=_paths(commit, "added"),
            modified=_paths(commit, "modified"),
            removed=_paths(commit, "removed"),
        )

    def paths(self) -> Tuple[str, ...]:
        return self.added + self.modified + self.removed


@dataclasses.dataclass(frozen=True)
class PushEvent:
    """The parts of a GitHub push event that routing needs."""
    ref: str
    after: str
    repository: str
    commits: Tuple[PushCommit, ...] = ()

    @classmethod
    def from_payload(cls, payload: PayloadDict) -> PushEvent:
        return cls(
            ref=_text(payload["ref"], "ref"),
            after=_text(payload["after"], "after"),
            repository=_text(payload["repository"]["full_name"], "repository.full_name"),
            commits=tuple(PushCommit.from_payload(c) for c in payload.get("commits") or ()),
        )


@dataclasses.dataclass(frozen=True)
class ReleaseEvent:
    """The parts of a GitHub release event that routing needs."""
    action: str
    tag_name: str
    draft: bool
    prerelease: bool
    repository: str

    @classmethod
    def from_payload(cls, payload: PayloadDict) -> ReleaseEvent:
        release = payload["release"]
        return cls(
            action=_text(payload["action"], "action"),
            tag_name=_text(release["tag_name"], "release.tag_name"),
            draft=bool(release.get("draft")),
            prerelease=bool(release.get("prerelease")),
            repository=_text(payload["repository"]["full_name"], "repository.full_name"),
        )


@dataclasses.dataclass(frozen=True)
class LatestInfo:
    """The newest published stable version, and its release line branch."""
    version: str
    branch: str

    @property
    def major(self) -> int:
        # Avoid a circular import.
        from docs_webhooks.branches import parse_major
        return parse_major(self.branch)


@dataclasses.dataclass(frozen=True)
class DispatchIntent:
    """A repository_dispatch event we intend to send."""
    owner: str
    repo: str
    event_type: str
    payload: ClientPayload

    def __str__(self):
        return f"{self.event_type} -> {self.owner}/{self.repo} {self.payload}"


@dataclasses.dataclass(frozen=True)
class DispatchResult:
    """What happened when we tried to send a DispatchIntent."""
    intent: DispatchIntent
    ok: bool
    error: Optional[str] = None
