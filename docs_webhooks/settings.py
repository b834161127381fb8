"""Credentials used to talk to GitHub."""

import os

# A personal access token, used when the GitHub App settings are incomplete.
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN", None)

# GitHub App credentials.  All five are needed to authenticate as the app.
APP_ID = os.environ.get("APP_ID", None)
# The PEM private key, JSON-encoded so that it fits in one environment line.
CLIENT_PRIVATE_KEY = os.environ.get("CLIENT_PRIVATE_KEY", None)
INSTALLATION_ID = os.environ.get("INSTALLATION_ID", None)
CLIENT_ID = os.environ.get("CLIENT_ID", None)
CLIENT_SECRET = os.environ.get("CLIENT_SECRET", None)
