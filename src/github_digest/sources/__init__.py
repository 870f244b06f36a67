"""Source connectors for fetching events."""

from .github import Event, GitHubEventSource

__all__ = ["Event", "GitHubEventSource"]
