"""
Everything we ask of GitHub (and the npm registry).
"""

import logging

import jwt
import requests
import sentry_sdk
from glom import glom

from docs_webhooks.auth import BaseUrlSession, GithubAuth, NoCredentials, get_github_session
from docs_webhooks.branches import branch_from_version
from docs_webhooks.types import DispatchIntent, DispatchResult, LatestInfo
from docs_webhooks.utils import RequestFailed, graphql_query, log_check_response

logger = logging.getLogger(__name__)

NPM_REGISTRY_URL = "https://registry.npmjs.org"

LATEST_VERSION_SOURCES = {"npm", "github"}

SHA_FROM_TAG_QUERY = """\
query ShaFromTag($owner: String!, $repo: String!, $tagName: String!) {
  repository(owner: $owner, name: $repo) {
    release(tagName: $tagName) {
      tagCommit {
        oid
      }
    }
  }
}
"""

# Errors that mean a dispatch didn't happen.  They are logged, not raised.
DISPATCH_ERRORS = (NoCredentials, RequestFailed, requests.RequestException, jwt.PyJWTError)


class GithubClient:
    """
    The outbound side of the relay.

    Arguments:
        auth: the shared GithubAuth.
        repository: "owner/name" of the repo whose releases are tracked.
        latest_source: "npm" or "github", where the latest version comes from.
        npm_package: the package to look up when `latest_source` is "npm".
        timeout: seconds allowed for each request.
    """

    def __init__(self, auth: GithubAuth, repository: str, latest_source="npm", npm_package="electron", timeout=None):
        if latest_source not in LATEST_VERSION_SOURCES:
            raise ValueError(f"Unknown latest version source: {latest_source!r}")
        self.auth = auth
        self.repository = repository
        self.latest_source = latest_source
        self.npm_package = npm_package
        self.timeout = timeout

    def get_latest_information(self) -> LatestInfo:
        """
        Get the newest published stable version, and its release line.

        This is fetched every time: it changes whenever a release is published.
        """
        if self.latest_source == "npm":
            version = self._latest_npm_version()
        else:
            version = self._latest_github_version()
        latest = LatestInfo(version=version, branch=branch_from_version(version))
        logger.debug(f"Latest version is {latest.version} on {latest.branch}")
        return latest

    def _latest_npm_version(self) -> str:
        session = BaseUrlSession(base_url=NPM_REGISTRY_URL, timeout=self.timeout)
        session.trust_env = False
        resp = session.get(f"/{self.npm_package}/latest")
        log_check_response(resp)
        return resp.json()["version"]

    def _latest_github_version(self) -> str:
        # GitHub's "latest" release skips drafts and prereleases.
        resp = get_github_session(self.auth).get(f"/repos/{self.repository}/releases/latest")
        log_check_response(resp)
        tag_name = resp.json()["tag_name"]
        return tag_name[1:] if tag_name.startswith("v") else tag_name

    def get_sha_from_tag(self, repository: str, tag_name: str) -> str:
        """
        Get the commit SHA a release tag points to.

        Arguments:
            repository: the repository in the form of "owner/name".
            tag_name: the release's tag, like "v12.0.7".
        """
        logger.info(f"Getting SHA for {repository!r} and {tag_name!r}")
        owner, _, repo = repository.partition("/")
        data = graphql_query(
            get_github_session(self.auth),
            SHA_FROM_TAG_QUERY,
            variables={"owner": owner, "repo": repo, "tagName": tag_name},
        )
        sha = glom(data, "repository.release.tagCommit.oid")
        logger.info(f"SHA is {sha}")
        return sha

    def send_repository_dispatch(self, intent: DispatchIntent) -> DispatchResult:
        """
        Send a repository_dispatch event.

        Failures are logged and reported in the result, never raised: the
        webhook that caused this has to be acknowledged regardless.
        """
        logger.info(f"Sending repository_dispatch {intent}")
        try:
            session = get_github_session(self.auth)
            resp = session.post(
                f"/repos/{intent.owner}/{intent.repo}/dispatches",
                json={
                    "event_type": intent.event_type,
                    "client_payload": intent.payload,
                },
            )
            log_check_response(resp)
        except DISPATCH_ERRORS as exc:
            logger.exception(f"Error sending repository_dispatch {intent}")
            sentry_sdk.capture_exception(exc)
            return DispatchResult(intent, ok=False, error=str(exc))

        logger.info("Payload sent")
        return DispatchResult(intent, ok=True)
