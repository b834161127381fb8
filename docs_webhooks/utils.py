"""
Generic utilities.
"""

import hmac
import os
from hashlib import sha256
from typing import Dict

import sentry_sdk

from docs_webhooks import logger


def environ_get(name: str, default=None) -> str:
    """
    Get an environment variable, raising an error if it's missing.
    """
    val = os.environ.get(name, default)
    if val is None:
        raise Exception(f"Required environment variable {name!r} is missing")
    return val


class RequestFailed(Exception):
    pass


class GraphQLError(Exception):
    pass


def log_check_response(response, raise_for_status=True):
    """
    Logs HTTP request and response at debug level and checks if it succeeded.

    Arguments:
        response (requests.Response)
        raise_for_status (bool): if True, call raise_for_status on the response
            also.
    """
    msg = "Request: {0.method} {0.url}: {0.body!r}".format(response.request)
    logger.debug(msg)
    msg = "Response: {0.status_code} {0.reason!r} for {0.url}: {0.content!r}".format(response)
    logger.debug(msg)
    if raise_for_status:
        try:
            response.raise_for_status()
        except Exception as exc:
            req = response.request
            raise RequestFailed(f"HTTP request failed: {req.method} {req.url}. Response body: {response.content}") from exc


def is_valid_payload(secret: str, signature: str, payload: bytes) -> bool:
    """
    Ensure payload is valid according to signature.

    Make sure the payload hashes to the signature as calculated using
    the shared secret.

    Arguments:
        secret (str): The shared secret
        signature (str): Signature as calculated by the server, sent in
            the X-Hub-Signature-256 header
        payload (bytes): The request payload

    Returns:
        bool: Is the payload legit?
    """
    mac = hmac.new(secret.encode(), msg=payload, digestmod=sha256)
    digest = 'sha256=' + mac.hexdigest()
    return hmac.compare_digest(digest.encode(), signature.encode())


def graphql_query(session, query: str, variables: Dict = {}) -> Dict:    # pylint: disable=dangerous-default-value
    """
    Make a GraphQL query against GitHub.
    """
    body = {
        "query": query,
        "variables": variables,
    }
    response = session.post("/graphql", json=body)
    log_check_response(response)
    returned = response.json()
    if "errors" in returned and returned["errors"]:
        raise GraphQLError(f"GraphQL error: {returned!r}")
    return returned["data"]


def sentry_extra_context(data_dict):
    """Apply the keys and values from data_dict to the Sentry extra context."""
    for key, value in data_dict.items():
        sentry_sdk.set_extra(key, value)
