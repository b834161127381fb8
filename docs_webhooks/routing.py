"""
Decide which repository_dispatch events a webhook event should produce.

Everything here is a pure function of the event, the latest published
version, and the RoutingRules: no network access, no Flask.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Mapping, Optional

import semver

from docs_webhooks.branches import branch_name, is_canonical, is_latest, parse_major
from docs_webhooks.types import (
    DispatchIntent,
    LatestInfo,
    PushEvent,
    ReleaseEvent,
    RoutingPolicy,
)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class RoutingRules:
    """Where docs changes come from, where they go, and under what names."""
    owner: str
    source_repo: str
    target_repo: str
    policy: RoutingPolicy = RoutingPolicy.DUAL
    branch_event: str = "doc_changes_branches"
    current_event: str = "doc_changes"
    doc_changes_event: str = "doc_changes"
    docs_folder: str = "docs"

    @classmethod
    def from_config(cls, config: Mapping) -> RoutingRules:
        return cls(
            owner=config["OWNER"],
            source_repo=config["SOURCE_REPO"],
            target_repo=config["TARGET_REPO"],
            policy=RoutingPolicy(config["ROUTING_POLICY"]),
            branch_event=config["BRANCH_EVENT_TYPE"],
            current_event=config["CURRENT_EVENT_TYPE"],
            doc_changes_event=config["DOC_CHANGES_EVENT_TYPE"],
            docs_folder=config["DOCS_FOLDER"],
        )

    @property
    def source_full_name(self) -> str:
        return f"{self.owner}/{self.source_repo}"

    def intent(self, event_type: str, **payload: str) -> DispatchIntent:
        return DispatchIntent(self.owner, self.target_repo, event_type, payload)


def touches_docs(push: PushEvent, folder: str = "docs") -> bool:
    """
    Was any file added, modified, or removed in `folder` by any commit?

    `folder` is matched as a substring of the path.
    """
    return any(
        folder in path
        for commit in push.commits
        for path in commit.paths()
    )


def _passes_source_gate(push: PushEvent, rules: RoutingRules) -> bool:
    """The part of the push gate that doesn't depend on the routing policy."""
    if push.repository != rules.source_full_name:
        logger.info(f"Push to {push.repository}, not {rules.source_full_name}, ignoring")
        return False
    if not touches_docs(push, rules.docs_folder):
        logger.info(f"Push to {push.ref} doesn't touch {rules.docs_folder!r}, ignoring")
        return False
    return True


def _passes_policy_gate(push: PushEvent, latest: LatestInfo, policy: RoutingPolicy) -> bool:
    if policy is RoutingPolicy.LEGACY:
        return push.ref == f"refs/heads/{latest.branch}"

    if not is_canonical(push.ref):
        return False
    if policy is RoutingPolicy.DUAL_GUARDED:
        # A line newer than the latest release hasn't been published yet.
        return parse_major(push.ref) <= latest.major
    return True


def route_push(push: PushEvent, latest: LatestInfo, rules: RoutingRules) -> List[DispatchIntent]:
    """
    Get the dispatch intents for a push.

    Returns:
        Zero, one, or two intents.  The branch intent always comes first.
    """
    if not _passes_source_gate(push, rules):
        return []
    if not _passes_policy_gate(push, latest, rules.policy):
        logger.info(f"Push to {push.ref} isn't routed under {rules.policy.value!r} (latest is {latest.branch})")
        return []

    if rules.policy is RoutingPolicy.LEGACY:
        return [rules.intent(rules.doc_changes_event, sha=push.after)]

    branch = branch_name(push.ref)
    # Updates the docs for this release line.
    intents = [rules.intent(rules.branch_event, sha=push.after, branch=branch)]
    if is_latest(latest.branch, push.ref):
        # Also updates the current docs.
        intents.append(rules.intent(rules.current_event, sha=push.after, branch=branch))
    return intents


def stable_version(tag_name: str) -> Optional[semver.Version]:
    """
    Parse a release tag as a fully-specified stable version.

    ``"v12.0.7"`` is stable.  ``"v14.0.0-nightly.20210506"``, ``"v12.0"`` and
    anything that isn't semver are not, and give None.
    """
    text = tag_name[1:] if tag_name.startswith("v") else tag_name
    try:
        version = semver.Version.parse(text)
    except ValueError:
        return None
    if version.prerelease is not None or version.build is not None:
        return None
    if str(version) != text:
        return None
    return version


def is_release_eligible(release: ReleaseEvent, latest: LatestInfo) -> bool:
    """
    Should a release trigger a docs update?

    Only published, stable releases at or above the latest known version do.
    """
    if release.action != "released":
        return False
    if release.draft or release.prerelease:
        return False
    version = stable_version(release.tag_name)
    if version is None:
        return False
    return version >= semver.Version.parse(latest.version)


def release_intent(sha: str, rules: RoutingRules) -> DispatchIntent:
    return rules.intent(rules.doc_changes_event, sha=sha)
