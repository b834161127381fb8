"""
Create authenticated sessions for access to GitHub.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import threading
import time
from typing import Optional

import cachetools
import jwt
import requests
from urlobject import URLObject

from docs_webhooks import settings
from docs_webhooks.utils import log_check_response

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"

# Installation tokens live for an hour.  Refresh them well before that.
INSTALLATION_TOKEN_TTL = 50 * 60


class NoCredentials(Exception):
    """Neither a GitHub App nor a token is configured."""


class BaseUrlSession(requests.Session):
    """
    A requests Session class that applies a base URL to the requested URL,
    and a default timeout to every request.
    """
    def __init__(self, base_url, timeout=None):
        super().__init__()
        self.base_url = URLObject(base_url)
        self.timeout = timeout

    def request(self, method, url, data=None, headers=None, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(
            method=method,
            url=self.base_url.relative(url),
            data=data,
            headers=headers,
            **kwargs
        )


@dataclasses.dataclass(frozen=True)
class AppCredentials:
    """What we need to authenticate as a GitHub App installation."""
    app_id: str
    private_key: str
    installation_id: str
    client_id: str
    client_secret: str


def app_info_available() -> bool:
    """Are all the settings needed to authenticate as a GitHub App set?"""
    return all([
        settings.APP_ID,
        settings.CLIENT_PRIVATE_KEY,
        settings.INSTALLATION_ID,
        settings.CLIENT_ID,
        settings.CLIENT_SECRET,
    ])


def _patchable_timer():
    # time.time rather than time.monotonic, so that freezegun can move it.
    return time.time()


class GithubAuth:
    """
    The credentials used for every GitHub request.

    Built once when the app starts, and shared by all requests.  A GitHub App
    is preferred over a personal token when both are configured.
    """

    def __init__(self, token: Optional[str] = None, app: Optional[AppCredentials] = None, timeout=None):
        self.token = token
        self.app = app
        self.timeout = timeout
        self._installation_tokens = cachetools.TTLCache(
            maxsize=1, ttl=INSTALLATION_TOKEN_TTL, timer=_patchable_timer,
        )
        # Requests share this object, so only one of them fetches a new token.
        self._installation_token_lock = threading.Lock()

    @classmethod
    def from_settings(cls, timeout=None) -> GithubAuth:
        if app_info_available():
            logger.info("Authenticating using GitHub app")
            app = AppCredentials(
                app_id=settings.APP_ID,
                private_key=json.loads(settings.CLIENT_PRIVATE_KEY),
                installation_id=settings.INSTALLATION_ID,
                client_id=settings.CLIENT_ID,
                client_secret=settings.CLIENT_SECRET,
            )
            return cls(app=app, timeout=timeout)
        elif settings.GITHUB_TOKEN:
            logger.info("Authenticating using token")
            return cls(token=settings.GITHUB_TOKEN, timeout=timeout)

        logger.warning("No GitHub credentials configured, dispatches will fail")
        return cls(timeout=timeout)

    @property
    def strategy(self) -> Optional[str]:
        if self.app is not None:
            return "app"
        elif self.token:
            return "token"
        return None

    def authorization(self) -> str:
        """
        Get the value of the Authorization header for GitHub requests.

        Raises:
            NoCredentials: if nothing is configured.
        """
        if self.app is not None:
            return f"token {self.installation_token()}"
        elif self.token:
            return f"token {self.token}"
        raise NoCredentials("Could not identify the right auth strategy")

    def app_jwt(self) -> str:
        """Make the short-lived JWT that identifies the GitHub App."""
        if self.app is None:
            raise NoCredentials("No GitHub App is configured")
        now = int(_patchable_timer())
        payload = {
            # Allow for clock drift between us and GitHub.
            "iat": now - 60,
            "exp": now + 9 * 60,
            "iss": self.app.app_id,
        }
        return jwt.encode(payload, self.app.private_key, algorithm="RS256")

    def installation_token(self) -> str:
        with self._installation_token_lock:
            token = self._installation_tokens.get("token")
            if token is None:
                token = self._installation_tokens["token"] = self._request_installation_token()
        return token

    def _request_installation_token(self) -> str:
        if self.app is None:
            raise NoCredentials("No GitHub App is configured")
        session = BaseUrlSession(base_url=GITHUB_API_URL, timeout=self.timeout)
        session.headers["Authorization"] = f"Bearer {self.app_jwt()}"
        session.headers["Accept"] = "application/vnd.github+json"
        session.trust_env = False
        resp = session.post(f"/app/installations/{self.app.installation_id}/access_tokens")
        log_check_response(resp)
        logger.debug(f"New installation token for installation {self.app.installation_id}")
        return resp.json()["token"]


def get_github_session(auth: GithubAuth) -> BaseUrlSession:
    """
    Get an authenticated GitHub session.
    """
    session = BaseUrlSession(base_url=GITHUB_API_URL, timeout=auth.timeout)
    session.headers["Authorization"] = auth.authorization()
    session.headers["Accept"] = "application/vnd.github+json"
    session.trust_env = False   # prevent reading the local .netrc
    return session
