"""Automatically run by pytest to set up test infrastructure."""

import pytest
import requests_mock

import docs_webhooks
from docs_webhooks.config import TestingConfig

from . import settings as test_settings
from .fake_github import FakeGitHub, FakeNpm


@pytest.fixture
def requests_mocker():
    """Make requests_mock available as a fixture."""
    mocker = requests_mock.Mocker(real_http=False, case_sensitive=True)
    mocker.start()
    try:
        yield mocker
    finally:
        mocker.stop()


@pytest.fixture(autouse=True)
def settings_for_tests(mocker):
    for name, value in vars(test_settings).items():
        if name.isupper():
            mocker.patch(f"docs_webhooks.settings.{name}", value)


@pytest.fixture
def fake_github(requests_mocker):
    the_fake_github = FakeGitHub()
    the_fake_github.install_mocks(requests_mocker)
    return the_fake_github


@pytest.fixture
def fake_npm(requests_mocker):
    """A fake npm registry, where electron's latest version is 12.0.6."""
    the_fake_npm = FakeNpm()
    the_fake_npm.versions["electron"] = "12.0.6"
    the_fake_npm.install_mocks(requests_mocker)
    return the_fake_npm


@pytest.fixture
def config_overrides():
    """Override this fixture to change the Flask config used by `app`."""
    return {}


@pytest.fixture
def app(settings_for_tests, config_overrides, mocker):
    for name, value in config_overrides.items():
        mocker.patch.object(TestingConfig, name, value, create=True)
    return docs_webhooks.create_app(config="testing")


@pytest.fixture
def client(app, fake_github, fake_npm):
    return app.test_client()
