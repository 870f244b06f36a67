"""Digest dispatch workflow.

Flow:
- Fetch recent events from the feed (failure aborts, nothing is sent)
- Format the digest
- List subscribers (failure aborts; an empty list sends nothing)
- Fan out one send per subscriber with bounded concurrency
- Tally the per-recipient outcomes into a sent count
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol, TypeVar

from .db import validate_email
from .digest.generator import DEFAULT_LIMIT, Digest, build_digest
from .digest.sender import DIGEST_SUBJECT
from .errors import MailError
from .sources.github import Event

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventFetcher(Protocol):
    def fetch_events(self) -> list[Event]:
        ...


class SubscriberLister(Protocol):
    def list_subscribers(self) -> set[str]:
        ...


class Mailer(Protocol):
    def send(self, to: str, subject: str, text: str, html: str) -> None:
        ...


@dataclass(frozen=True)
class SendOutcome:
    """Result of delivering the digest to one recipient."""
    email: str
    ok: bool
    error: str | None = None


@dataclass
class DispatchResult:
    sent: int
    attempted: int
    failed: list[str] = field(default_factory=list)


def tally(outcomes: Iterable[SendOutcome]) -> DispatchResult:
    """Aggregate per-recipient outcomes. Failures only lower the count."""
    outcomes = list(outcomes)
    return DispatchResult(
        sent=sum(1 for o in outcomes if o.ok),
        attempted=len(outcomes),
        failed=[o.email for o in outcomes if not o.ok],
    )


class DigestDispatcher:
    """Fetches, formats and delivers the events digest."""

    def __init__(
        self,
        source: EventFetcher,
        store: SubscriberLister,
        mailer: Mailer,
        max_concurrent_sends: int = 5,
        limit: int = DEFAULT_LIMIT,
    ):
        self.source = source
        self.store = store
        self.mailer = mailer
        self.limit = limit
        self.max_concurrent_sends = max(1, max_concurrent_sends)

        # Thread pool for the blocking HTTP and SMTP clients
        self._executor = ThreadPoolExecutor(max_workers=self.max_concurrent_sends)

    async def _run(self, func: Callable[..., T], *args) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def _build(self) -> Digest:
        events = await self._run(self.source.fetch_events)
        return build_digest(events, self.limit)

    async def _send(self, email: str, digest: Digest, sem: asyncio.Semaphore) -> SendOutcome:
        async with sem:
            try:
                await self._run(self.mailer.send, email, DIGEST_SUBJECT, digest.body_text, digest.html)
                return SendOutcome(email=email, ok=True)
            except Exception as e:
                logger.error(f"Send failed for {email}: {e}")
                return SendOutcome(email=email, ok=False, error=str(e))

    async def preview(self) -> Digest:
        """Fetch and format the digest without sending anything."""
        return await self._build()

    async def dispatch_all(self) -> DispatchResult:
        """Send the digest to every subscriber.

        Feed and store failures propagate and abort the dispatch before any
        send. A failed send is logged and excluded from the count; it never
        stops the other recipients.
        """
        digest = await self._build()

        subscribers = await self._run(self.store.list_subscribers)
        if not subscribers:
            logger.info("No subscribers, nothing to send")
            return DispatchResult(sent=0, attempted=0)

        sem = asyncio.Semaphore(self.max_concurrent_sends)
        outcomes = await asyncio.gather(
            *(self._send(email, digest, sem) for email in sorted(subscribers))
        )

        result = tally(outcomes)
        logger.info(f"Dispatch complete: {result.sent}/{result.attempted} sent")
        if result.failed:
            logger.warning(f"Failed recipients: {', '.join(result.failed)}")
        return result

    async def send_to_one(self, email: str) -> SendOutcome:
        """Send the digest to a single address. Any failure propagates."""
        email = validate_email(email)
        digest = await self._build()
        try:
            await self._run(self.mailer.send, email, DIGEST_SUBJECT, digest.body_text, digest.html)
        except MailError:
            raise
        except Exception as e:
            raise MailError(f"Failed to send to {email}: {e}") from e
        logger.info(f"Digest sent to {email}")
        return SendOutcome(email=email, ok=True)

    def close(self):
        self._executor.shutdown(wait=False)
