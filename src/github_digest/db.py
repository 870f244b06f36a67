"""Supabase subscriber store."""

import logging
import re
from dataclasses import dataclass
from typing import Any
import httpx

from .config import Config
from .errors import InvalidEmailError, StoreError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

SUBSCRIBERS_TABLE = "subscribers"


def is_valid_email(email: Any) -> bool:
    """Loose shape check: something@something.something, no whitespace."""
    return isinstance(email, str) and bool(EMAIL_PATTERN.fullmatch(email))


def validate_email(email: Any) -> str:
    """Return the email unchanged, or raise InvalidEmailError."""
    if not is_valid_email(email):
        raise InvalidEmailError(email)
    return email


@dataclass(frozen=True)
class SignupResult:
    email: str
    already_exists: bool = False


class SubscriberStore:
    """Supabase REST API client for the subscribers table.

    The table carries a unique constraint on ``email``; PostgREST answers a
    violating insert with ``409 Conflict``, which is treated as a successful
    signup of an address that is already stored.
    """

    def __init__(self, supabase_url: str, supabase_key: str, transport: httpx.BaseTransport | None = None):
        self.base_url = f"{supabase_url.rstrip('/')}/rest/v1"
        self.headers = {
            "apikey": supabase_key,
            "Authorization": f"Bearer {supabase_key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }
        self._client = httpx.Client(headers=self.headers, transport=transport)

    @classmethod
    def from_config(cls, config: Config) -> "SubscriberStore":
        return cls(config.supabase_url, config.supabase_key)

    def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """Make a request to the Supabase REST API, wrapping transport errors."""
        url = f"{self.base_url}/{endpoint}"
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {endpoint} failed: {e}") from e

    def add_subscriber(self, email: str) -> SignupResult:
        """Insert a subscriber. Inserting an existing address is not an error."""
        email = validate_email(email)

        response = self._request("POST", SUBSCRIBERS_TABLE, json=[{"email": email}])
        if response.status_code == httpx.codes.CONFLICT:
            logger.info(f"Subscriber already stored: {email}")
            return SignupResult(email=email, already_exists=True)
        if response.is_error:
            raise StoreError(f"Insert into {SUBSCRIBERS_TABLE} returned {response.status_code}: {response.text}")

        logger.info(f"Stored new subscriber: {email}")
        return SignupResult(email=email)

    def list_subscribers(self) -> set[str]:
        """Return every stored email address."""
        response = self._request("GET", f"{SUBSCRIBERS_TABLE}?select=email")
        if response.is_error:
            raise StoreError(f"Select from {SUBSCRIBERS_TABLE} returned {response.status_code}: {response.text}")
        try:
            rows = response.json() or []
        except ValueError as e:
            raise StoreError(f"Select from {SUBSCRIBERS_TABLE} returned invalid JSON") from e
        return {row["email"] for row in rows if row.get("email")}

    def close(self):
        self._client.close()
