import os


def _bool_env(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class DefaultConfig:
    GITHUB_WEBHOOKS_SECRET = os.environ.get("GITHUB_WEBHOOKS_SECRET")

    # Pushes come from OWNER/SOURCE_REPO, dispatches go to OWNER/TARGET_REPO.
    OWNER = os.environ.get("OWNER", "electron")
    SOURCE_REPO = os.environ.get("SOURCE_REPO", "electron")
    TARGET_REPO = os.environ.get("TARGET_REPO", "electronjs.org-new")

    # One of "dual", "dual_guarded" or "legacy".
    ROUTING_POLICY = os.environ.get("ROUTING_POLICY", "dual")
    BRANCH_EVENT_TYPE = os.environ.get("BRANCH_EVENT_TYPE", "doc_changes_branches")
    CURRENT_EVENT_TYPE = os.environ.get("CURRENT_EVENT_TYPE", "doc_changes")
    DOC_CHANGES_EVENT_TYPE = os.environ.get("DOC_CHANGES_EVENT_TYPE", "doc_changes")
    DOCS_FOLDER = os.environ.get("DOCS_FOLDER", "docs")

    # Where the latest published version comes from: "npm" or "github".
    LATEST_VERSION_SOURCE = os.environ.get("LATEST_VERSION_SOURCE", "npm")
    NPM_PACKAGE = os.environ.get("NPM_PACKAGE", "electron")

    # Seconds allowed for every outbound HTTP request.
    REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "10"))

    DISPATCH_ON_RELEASE = _bool_env("DISPATCH_ON_RELEASE", True)


class DevelopmentConfig(DefaultConfig):
    DEBUG = True


class TestingConfig(DefaultConfig):
    TESTING = True
    GITHUB_WEBHOOKS_SECRET = None
    OWNER = "electron"
    SOURCE_REPO = "electron"
    TARGET_REPO = "electronjs.org-new"
    ROUTING_POLICY = "dual"
    LATEST_VERSION_SOURCE = "npm"
    NPM_PACKAGE = "electron"
    REQUEST_TIMEOUT = 5.0
    DISPATCH_ON_RELEASE = True
