"""Tests of the /webhook view, end to end against fake GitHub and npm."""

import hashlib
import hmac
import json

import pytest

from .helpers import PUSH_SHA, make_commit, make_push_payload, make_release_payload


def post_event(client, event_type, payload, headers=None):
    all_headers = {"X-GitHub-Event": event_type}
    all_headers.update(headers or {})
    return client.post("/webhook", json=payload, headers=all_headers)


def sent(fake_github):
    return [(d.owner, d.repo, d.event_type, d.client_payload) for d in fake_github.dispatches]


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "There's nothing here!"


def test_not_found(client):
    assert client.get("/do-not-exists").status_code == 404


def test_ping(client, fake_github, fake_npm):
    response = post_event(client, "ping", {"zen": "Keep it logically awesome.", "hook_id": 1})
    assert response.status_code == 200
    assert response.get_data() == b""
    assert fake_github.requests_made() == []
    assert fake_npm.requests_made() == []


def test_unknown_event_type(client, fake_github):
    response = post_event(client, "issues", {"action": "opened"})
    assert response.status_code == 404
    assert fake_github.dispatches == []


def test_get_webhook_not_allowed(client):
    assert client.get("/webhook").status_code == 405


def test_push_without_doc_changes(client, fake_github):
    payload = make_push_payload(commits=[])
    response = post_event(client, "push", payload)
    assert response.status_code == 200
    assert fake_github.dispatches == []


def test_push_on_latest_line(client, fake_github):
    response = post_event(client, "push", make_push_payload(ref="refs/heads/12-x-y"))
    assert response.status_code == 200
    assert response.get_data() == b""
    assert sent(fake_github) == [
        ("electron", "electronjs.org-new", "doc_changes_branches", {"sha": PUSH_SHA, "branch": "12-x-y"}),
        ("electron", "electronjs.org-new", "doc_changes", {"sha": PUSH_SHA, "branch": "12-x-y"}),
    ]


def test_push_on_older_line(client, fake_github):
    response = post_event(client, "push", make_push_payload(ref="refs/heads/1-x-y"))
    assert response.status_code == 200
    assert sent(fake_github) == [
        ("electron", "electronjs.org-new", "doc_changes_branches", {"sha": PUSH_SHA, "branch": "1-x-y"}),
    ]


def test_push_on_backport_branch(client, fake_github):
    payload = make_push_payload(ref="refs/heads/trop/12-x-y-bp-docs-fix-typo-1620000000")
    response = post_event(client, "push", payload)
    assert response.status_code == 200
    assert fake_github.dispatches == []


def test_push_to_another_repo(client, fake_github):
    payload = make_push_payload(repo="electron/fiddle")
    assert post_event(client, "push", payload).status_code == 200
    assert fake_github.dispatches == []


def test_push_uses_fresh_latest_version(client, fake_github, fake_npm):
    post_event(client, "push", make_push_payload(ref="refs/heads/13-x-y"))
    fake_npm.versions["electron"] = "14.0.0"
    post_event(client, "push", make_push_payload(ref="refs/heads/13-x-y"))
    assert [d.event_type for d in fake_github.dispatches] == [
        "doc_changes_branches", "doc_changes", "doc_changes_branches",
    ]
    assert len(fake_npm.requests_made()) == 2


def test_push_dispatch_failure_still_acknowledged(client, fake_github):
    fake_github.dispatch_status = 500
    response = post_event(client, "push", make_push_payload())
    assert response.status_code == 200
    # Both dispatches were attempted.
    assert len(fake_github.requests_made(r"/dispatches", "POST")) == 2


def test_push_when_npm_is_down(client, fake_github, fake_npm):
    del fake_npm.versions["electron"]
    response = post_event(client, "push", make_push_payload())
    assert response.status_code == 200
    assert fake_github.dispatches == []


def test_push_with_garbage_body(client, fake_github):
    response = client.post(
        "/webhook", data="this is not json",
        headers={"X-GitHub-Event": "push", "Content-Type": "application/json"},
    )
    assert response.status_code == 200
    assert fake_github.dispatches == []


@pytest.mark.parametrize("field, value", [
    ("ref", None),
    ("ref", 12),
    ("after", None),
])
def test_push_with_wrongly_typed_fields(client, fake_github, field, value):
    payload = make_push_payload()
    payload[field] = value
    response = post_event(client, "push", payload)
    assert response.status_code == 200
    assert fake_github.dispatches == []


def test_push_with_null_path(client, fake_github):
    payload = make_push_payload(commits=[make_commit(modified=[None, "docs/api/app.md"])])
    response = post_event(client, "push", payload)
    assert response.status_code == 200
    assert fake_github.dispatches == []


@pytest.mark.parametrize("tag_name", [None, 12])
def test_release_with_wrongly_typed_tag(client, fake_github, tag_name):
    payload = make_release_payload()
    payload["release"]["tag_name"] = tag_name
    response = post_event(client, "release", payload)
    assert response.status_code == 200
    assert fake_github.dispatches == []
    assert fake_github.requests_made(r"/graphql") == []


class TestGuardedPolicy:
    @pytest.fixture
    def config_overrides(self):
        return {"ROUTING_POLICY": "dual_guarded"}

    def test_future_line_ignored(self, client, fake_github):
        response = post_event(client, "push", make_push_payload(ref="refs/heads/13-x-y"))
        assert response.status_code == 200
        assert fake_github.dispatches == []

    def test_latest_line(self, client, fake_github):
        post_event(client, "push", make_push_payload(ref="refs/heads/12-x-y"))
        assert [d.event_type for d in fake_github.dispatches] == ["doc_changes_branches", "doc_changes"]


class TestLegacyPolicy:
    @pytest.fixture
    def config_overrides(self):
        return {"ROUTING_POLICY": "legacy"}

    def test_latest_line(self, client, fake_github):
        post_event(client, "push", make_push_payload(ref="refs/heads/12-x-y"))
        assert sent(fake_github) == [
            ("electron", "electronjs.org-new", "doc_changes", {"sha": PUSH_SHA}),
        ]

    def test_older_line(self, client, fake_github):
        post_event(client, "push", make_push_payload(ref="refs/heads/11-x-y"))
        assert fake_github.dispatches == []


class TestGithubLatestSource:
    @pytest.fixture
    def config_overrides(self):
        return {"LATEST_VERSION_SOURCE": "github"}

    def test_push_on_latest_line(self, client, fake_github, fake_npm):
        fake_github.make_release("electron/electron", "v13.1.2")
        post_event(client, "push", make_push_payload(ref="refs/heads/12-x-y"))
        assert [d.event_type for d in fake_github.dispatches] == ["doc_changes_branches"]
        assert fake_npm.requests_made() == []


def test_release(client, fake_github):
    sha = fake_github.make_release("electron/electron", "v12.0.7")
    response = post_event(client, "release", make_release_payload(tag_name="v12.0.7"))
    assert response.status_code == 200
    assert sent(fake_github) == [
        ("electron", "electronjs.org-new", "doc_changes", {"sha": sha}),
    ]


@pytest.mark.parametrize("kwargs", [
    {"prerelease": True},
    {"draft": True},
    {"action": "published"},
    {"tag_name": "v14.0.0-nightly.20210506"},
    {"tag_name": "v11.10.0"},
])
def test_release_not_dispatched(client, fake_github, kwargs):
    fake_github.make_release("electron/electron", kwargs.get("tag_name", "v12.0.7"))
    response = post_event(client, "release", make_release_payload(**kwargs))
    assert response.status_code == 200
    assert fake_github.dispatches == []
    assert fake_github.requests_made(r"/graphql") == []


def test_release_for_unknown_tag(client, fake_github):
    response = post_event(client, "release", make_release_payload(tag_name="v12.0.8"))
    assert response.status_code == 200
    assert fake_github.dispatches == []


class TestReleaseDispatchOff:
    @pytest.fixture
    def config_overrides(self):
        return {"DISPATCH_ON_RELEASE": False}

    def test_release_only_logged(self, client, fake_github, fake_npm, caplog):
        fake_github.make_release("electron/electron", "v12.0.7")
        response = post_event(client, "release", make_release_payload(tag_name="v12.0.7"))
        assert response.status_code == 200
        assert "New release payload received" in caplog.text
        assert fake_github.requests_made() == []
        assert fake_npm.requests_made() == []


def _signature(secret, body):
    return "sha256=" + hmac.new(secret.encode(), msg=body, digestmod=hashlib.sha256).hexdigest()


class TestSignatures:
    SECRET = "top secret"

    @pytest.fixture
    def config_overrides(self):
        return {"GITHUB_WEBHOOKS_SECRET": self.SECRET}

    def post_signed(self, client, payload, signature):
        body = json.dumps(payload).encode()
        headers = {"X-GitHub-Event": "push", "Content-Type": "application/json"}
        if signature is not None:
            headers["X-Hub-Signature-256"] = signature
        return client.post("/webhook", data=body, headers=headers)

    def test_good_signature(self, client, fake_github):
        payload = make_push_payload()
        response = self.post_signed(client, payload, _signature(self.SECRET, json.dumps(payload).encode()))
        assert response.status_code == 200
        assert len(fake_github.dispatches) == 2

    def test_bad_signature(self, client, fake_github):
        payload = make_push_payload()
        response = self.post_signed(client, payload, _signature("wrong secret", json.dumps(payload).encode()))
        assert response.status_code == 400
        assert response.get_data(as_text=True) == "Invalid signature"
        assert fake_github.dispatches == []

    def test_missing_signature(self, client, fake_github):
        response = self.post_signed(client, make_push_payload(), None)
        assert response.status_code == 400
        assert response.get_data(as_text=True) == "Missing signature in payload"
        assert fake_github.dispatches == []

    def test_ping_needs_signature_too(self, client):
        response = client.post("/webhook", json={}, headers={"X-GitHub-Event": "ping"})
        assert response.status_code == 400
