import logging
import os
import sys

from flask import Flask
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration
from werkzeug.middleware.proxy_fix import ProxyFix
from werkzeug.utils import import_string

__version__ = "0.1.0"

log_level = os.environ.get('LOGLEVEL', 'INFO').upper()
logger = logging.getLogger(__name__)
handler = logging.StreamHandler(sys.stderr)
handler.setLevel(log_level)
logger.addHandler(handler)
logger.setLevel(log_level)

# urllib3 logs every connection at debug level, quiet it.
logging.getLogger("urllib3").setLevel("WARN")


def expand_config(name=None):
    if not name:
        name = "default"
    return "docs_webhooks.config.{classname}Config".format(
        classname=name.capitalize(),
    )


def create_app(config=None):
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app)   # type: ignore[method-assign]
    config = config or os.environ.get("DOCS_WEBHOOKS_CONFIG") or "default"
    config_obj = import_string(expand_config(config))()
    app.config.from_object(config_obj)

    if os.environ.get("SENTRY_DSN", ""):
        sentry_sdk.init(integrations=[FlaskIntegration()])

    # One relay per app: it holds the credentials, which are built once and
    # shared by every request.
    from .relay import make_relay
    app.extensions["docs_webhooks"] = make_relay(app.config)

    # attach our blueprints
    from .webhook_views import webhook_bp
    app.register_blueprint(webhook_bp)
    from .ui import ui as ui_blueprint
    app.register_blueprint(ui_blueprint)

    return app
