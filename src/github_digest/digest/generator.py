"""Digest content generator."""

import html
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from ..sources.github import Event

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
UNKNOWN = "unknown"


def _format_timestamp(created_at: str | None) -> str:
    """Render an ISO timestamp in local time, e.g. 1/5/2026, 3:04:05 PM."""
    if not created_at:
        return UNKNOWN
    try:
        dt = datetime.fromisoformat(created_at.replace("Z", "+00:00")).astimezone()
    except (ValueError, OverflowError, OSError):
        return created_at
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt.month}/{dt.day}/{dt.year}, {hour}:{dt.minute:02d}:{dt.second:02d} {meridiem}"


def format_event(event: Event) -> str:
    """Format one event as a single digest line."""
    event_type = event.type or "Event"
    repo = event.repo_name or UNKNOWN
    actor = event.actor_login or UNKNOWN
    return f"[{event_type}] {repo} by {actor} ({_format_timestamp(event.created_at)})"


def format_summary(events: Sequence[Event], limit: int = DEFAULT_LIMIT) -> str:
    """Format the first `limit` events, one per line, in input order."""
    return "\n".join(format_event(event) for event in events[:max(limit, 0)])


def render_html(summary: str, limit: int = DEFAULT_LIMIT) -> str:
    return (
        f"<p>Here are the latest GitHub public events (top {limit}):</p>"
        f"<pre>{html.escape(summary)}</pre>"
    )


def render_text(summary: str) -> str:
    return f"Latest events:\n\n{summary}"


@dataclass(frozen=True)
class Digest:
    """A rendered digest and the events it covers."""
    text: str
    body_text: str
    html: str
    events: tuple[Event, ...]

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()


def build_digest(events: Sequence[Event], limit: int = DEFAULT_LIMIT) -> Digest:
    """Build the text and HTML renderings of the most recent events."""
    summary = format_summary(events, limit)
    included = tuple(events[:max(limit, 0)])
    logger.debug(f"Built digest from {len(included)} of {len(events)} events")
    return Digest(
        text=summary,
        body_text=render_text(summary),
        html=render_html(summary, limit),
        events=included,
    )
