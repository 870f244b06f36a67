"""GitHub public events feed connector."""

import logging
from dataclasses import dataclass, field
from typing import Any
import httpx

from ..config import Config
from ..errors import FeedError

logger = logging.getLogger(__name__)


def _first_str(*candidates: Any) -> str | None:
    """Return the first candidate that is a non-empty string."""
    for value in candidates:
        if isinstance(value, str) and value:
            return value
    return None


def _get(payload: Any, key: str) -> Any:
    return payload.get(key) if isinstance(payload, dict) else None


@dataclass(frozen=True)
class Event:
    """A public GitHub event. Every field may be absent in the feed."""
    type: str | None = None
    repo_name: str | None = None
    actor_login: str | None = None
    created_at: str | None = None
    raw: dict | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Any) -> "Event":
        """Build an Event from one element of the events API response.

        Elements that are not JSON objects produce an Event with every field
        absent, so they still occupy their place in the feed order.
        """
        actor = _get(payload, "actor")
        return cls(
            type=_first_str(_get(payload, "type")),
            repo_name=_first_str(
                _get(_get(payload, "repo"), "name"),
                _get(_get(payload, "repository"), "full_name"),
            ),
            actor_login=_first_str(_get(actor, "login"), _get(actor, "display_login")),
            created_at=_first_str(_get(payload, "created_at")),
            raw=payload if isinstance(payload, dict) else None,
        )


class GitHubEventSource:
    """Fetches the most recent public events from the GitHub REST API."""

    def __init__(
        self,
        url: str,
        token: str | None = None,
        per_page: int = 30,
        transport: httpx.BaseTransport | None = None,
    ):
        self.url = url
        self.per_page = per_page
        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"token {token}"
        self.client = httpx.Client(headers=headers, transport=transport)

    @classmethod
    def from_config(cls, config: Config) -> "GitHubEventSource":
        return cls(config.events_url, token=config.github_token, per_page=config.events_per_page)

    def fetch_events(self) -> list[Event]:
        """Fetch recent events, most recent first, in feed order.

        Raises FeedError on any transport failure, non-2xx status or
        unexpected body. A single attempt is made.
        """
        try:
            response = self.client.get(self.url, params={"per_page": self.per_page})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise FeedError(f"Event feed returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FeedError(f"Event feed request failed: {e}") from e
        except ValueError as e:
            raise FeedError("Event feed returned invalid JSON") from e

        if not isinstance(payload, list):
            raise FeedError(f"Event feed returned {type(payload).__name__}, expected a list")

        events = [Event.from_api(item) for item in payload]
        logger.info(f"Fetched {len(events)} events from {self.url}")
        return events

    def close(self):
        self.client.close()
