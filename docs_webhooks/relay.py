"""
Turn webhook payloads into repository_dispatch events.

The Relay ties together the pure routing functions and the GitHub client.
Nothing it does can fail the webhook: errors are logged, reported to Sentry,
and the event is dropped.
"""

import logging
from typing import Iterable, List, Mapping

import sentry_sdk
from glom import PathAccessError

from docs_webhooks.auth import GithubAuth
from docs_webhooks.github import DISPATCH_ERRORS, GithubClient
from docs_webhooks.routing import (
    RoutingRules,
    is_release_eligible,
    release_intent,
    route_push,
)
from docs_webhooks.types import (
    DispatchIntent,
    DispatchResult,
    PayloadDict,
    PushEvent,
    ReleaseEvent,
)
from docs_webhooks.utils import GraphQLError

logger = logging.getLogger(__name__)

# Errors from looking things up (latest version, tag SHA) before dispatching.
# ValueError covers versions and branches we can't parse.
LOOKUP_ERRORS = DISPATCH_ERRORS + (GraphQLError, PathAccessError, KeyError, ValueError)


class Relay:
    def __init__(self, rules: RoutingRules, github: GithubClient, dispatch_on_release: bool = True):
        self.rules = rules
        self.github = github
        self.dispatch_on_release = dispatch_on_release

    def on_push(self, payload: PayloadDict) -> List[DispatchResult]:
        try:
            push = PushEvent.from_payload(payload)
        except (KeyError, TypeError, AttributeError):
            logger.exception("Malformed push payload, ignoring")
            return []
        logger.info(f"Push to {push.repository} {push.ref} at {push.after}, {len(push.commits)} commits")

        try:
            latest = self.github.get_latest_information()
            intents = route_push(push, latest, self.rules)
        except LOOKUP_ERRORS as exc:
            logger.exception(f"Couldn't route push to {push.ref}, ignoring")
            sentry_sdk.capture_exception(exc)
            return []
        return self.send_all(intents)

    def on_release(self, payload: PayloadDict) -> List[DispatchResult]:
        try:
            release = ReleaseEvent.from_payload(payload)
        except (KeyError, TypeError, AttributeError):
            logger.exception("Malformed release payload, ignoring")
            return []
        logger.info(f"New release payload received: {release.repository} {release.tag_name} {release.action!r}")

        if not self.dispatch_on_release:
            # Docs updates are driven by pushes.
            return []

        try:
            latest = self.github.get_latest_information()
            if not is_release_eligible(release, latest):
                logger.info(f"Release {release.tag_name} isn't eligible (latest is {latest.version}), ignoring")
                return []
            sha = self.github.get_sha_from_tag(release.repository, release.tag_name)
        except LOOKUP_ERRORS as exc:
            logger.exception(f"Couldn't route release {release.tag_name}, ignoring")
            sentry_sdk.capture_exception(exc)
            return []
        return self.send_all([release_intent(sha, self.rules)])

    def send_all(self, intents: Iterable[DispatchIntent]) -> List[DispatchResult]:
        results = [self.github.send_repository_dispatch(intent) for intent in intents]
        failed = sum(1 for r in results if not r.ok)
        if failed:
            logger.warning(f"{failed} of {len(results)} dispatches failed")
        return results


def make_relay(config: Mapping) -> Relay:
    """Build the Relay from a Flask config."""
    timeout = config["REQUEST_TIMEOUT"]
    rules = RoutingRules.from_config(config)
    github = GithubClient(
        auth=GithubAuth.from_settings(timeout=timeout),
        repository=rules.source_full_name,
        latest_source=config["LATEST_VERSION_SOURCE"],
        npm_package=config["NPM_PACKAGE"],
        timeout=timeout,
    )
    return Relay(rules, github, dispatch_on_release=config["DISPATCH_ON_RELEASE"])
