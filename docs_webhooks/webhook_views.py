"""
The view that receives webhook events from GitHub.
"""

import logging

from flask import current_app as app
from flask import Blueprint, abort, request

from docs_webhooks.debug import is_debug, log_long_json
from docs_webhooks.utils import is_valid_payload, sentry_extra_context

webhook_bp = Blueprint('webhook_views', __name__)
logger = logging.getLogger(__name__)


def _check_signature():
    """
    Check the X-Hub-Signature-256 header against the shared secret.

    Returns:
        None if the request is acceptable, or a (message, status) response.
    """
    secret = app.config.get("GITHUB_WEBHOOKS_SECRET")
    if not secret:
        logger.info("No secret specified, skipping integrity check")
        return None

    signature = request.headers.get("X-Hub-Signature-256")
    if not signature:
        msg = "Missing signature in payload"
        logger.error(msg)
        return msg, 400
    if not is_valid_payload(secret, signature, request.get_data()):
        msg = "Invalid signature"
        logger.error(msg)
        return msg, 400
    return None


@webhook_bp.route('/webhook', methods=('POST',))
def hook_receiver():
    """
    Process incoming GitHub webhook events.

    1.  Make sure the payload hashes to the proper signature. If not,
        reject the request with http status of 400.
    2.  Hand push and release events to the relay, which sends any
        repository_dispatch events they call for.
    3.  Respond with http status 200, whatever happened in step 2.

    Event types other than ping, push, and release get a 404.
    """
    rejection = _check_signature()
    if rejection is not None:
        return rejection

    event_type = request.headers.get("X-GitHub-Event")
    relay = app.extensions["docs_webhooks"]

    match event_type:
        case "ping":
            logger.info("ping")
            return "", 200

        case "push" | "release":
            event = request.get_json(silent=True)
            if is_debug(__name__):
                log_long_json(logger, f"Incoming GitHub {event_type} event", event)
            sentry_extra_context({"event_type": event_type, "event": event})
            if event_type == "push":
                results = relay.on_push(event)
            else:
                results = relay.on_release(event)
            logger.info(f"{event_type} handled, {len(results)} dispatches attempted")
            return "", 200

        case _:
            abort(404)
