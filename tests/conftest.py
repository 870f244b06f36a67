import json

import httpx
import pytest

from github_digest.config import Config
from github_digest.errors import FeedError, MailError, StoreError
from github_digest.sources.github import Event


def make_event(n: int, **overrides) -> Event:
    payload = {
        "type": "PushEvent",
        "repo": {"name": f"octo/repo-{n}"},
        "actor": {"login": f"user-{n}"},
        "created_at": "2026-10-18T12:00:00Z",
    }
    payload.update(overrides)
    return Event.from_api(payload)


class FakePostgrest:
    """In-memory subscribers table with a unique constraint on email."""

    def __init__(self, emails=()):
        self.rows: list[dict] = [{"email": e} for e in emails]
        self.inserts = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/rest/v1/subscribers"
        assert request.headers["apikey"] == "service-key"
        if request.method == "POST":
            self.inserts += 1
            for row in json.loads(request.content):
                if any(r["email"] == row["email"] for r in self.rows):
                    return httpx.Response(409, json={
                        "code": "23505",
                        "message": 'duplicate key value violates unique constraint "subscribers_email_key"',
                    })
                self.rows.append(row)
            return httpx.Response(201)
        return httpx.Response(200, json=[{"email": r["email"]} for r in self.rows])


class FakeSource:
    def __init__(self, events=None, error: Exception | None = None):
        self.events = events if events is not None else [make_event(i) for i in range(10)]
        self.error = error
        self.calls = 0
        self.closed = False

    def fetch_events(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.events

    def close(self):
        self.closed = True


class FakeStore:
    def __init__(self, emails=(), error: Exception | None = None):
        self.emails = set(emails)
        self.error = error
        self.list_calls = 0

    def list_subscribers(self):
        self.list_calls += 1
        if self.error:
            raise self.error
        return set(self.emails)

    def close(self):
        pass


class FakeMailer:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent: list[dict] = []
        self.attempts: list[str] = []

    def send(self, to, subject, text, html):
        self.attempts.append(to)
        if to in self.fail_for:
            raise MailError(f"Failed to send to {to}")
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})


@pytest.fixture
def config() -> Config:
    return Config(
        supabase_url="https://example.supabase.co",
        supabase_key="service-key",
        mail_user="digest@example.com",
        mail_password="app-password",
        mail_from="digest@example.com",
        backend_secret="s3cret",
    )


@pytest.fixture
def feed_error() -> FeedError:
    return FeedError("Event feed returned 503")


@pytest.fixture
def store_error() -> StoreError:
    return StoreError("Select from subscribers returned 500")
