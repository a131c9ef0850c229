"""
Invoice Events
Publishes "invoice upserted" events and hands them to the payroll automation
on background tasks, so an invoice write never waits on (or fails because of)
the automation.
"""
import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Dict, Literal, Optional, Set
import logging

from pydantic import BaseModel, Field

from opsboard.config import _now_utc, settings
from opsboard.services.invoice_payroll_automation import InvoiceNotFoundError, invoice_payroll_automation

logger = logging.getLogger(__name__)

InvoiceHandler = Callable[[str], Awaitable[object]]


class InvoiceUpserted(BaseModel):
    invoice_id: str
    action: Literal["created", "updated"] = "updated"
    published_at: datetime = Field(default_factory=_now_utc)


class InvoiceEventDispatcher:
    """
    At-least-once delivery of invoice events to a handler.

    Each event is retried up to ``max_attempts`` times with a fixed delay.
    Deliveries for the same invoice run one at a time, in publish order, so
    the handler never sees two concurrent calls for one invoice. Events for
    invoices that no longer exist are dropped without retry.
    """

    def __init__(
        self,
        handler: InvoiceHandler,
        max_attempts: Optional[int] = None,
        retry_seconds: Optional[float] = None,
    ):
        self.handler = handler
        self.max_attempts = max_attempts or settings.invoice_event_max_attempts
        self.retry_seconds = settings.invoice_event_retry_seconds if retry_seconds is None else retry_seconds
        self._pending: Set[asyncio.Task] = set()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def publish(self, event: InvoiceUpserted) -> asyncio.Task:
        """Schedule delivery on the running loop and return immediately."""
        task = asyncio.get_running_loop().create_task(self.deliver(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def deliver(self, event: InvoiceUpserted) -> bool:
        invoice_id = event.invoice_id
        lock = self._locks.setdefault(invoice_id, asyncio.Lock())
        self._lock_users[invoice_id] = self._lock_users.get(invoice_id, 0) + 1
        try:
            async with lock:
                return await self._attempt(event)
        finally:
            self._lock_users[invoice_id] -= 1
            if not self._lock_users[invoice_id]:
                del self._lock_users[invoice_id]
                del self._locks[invoice_id]

    async def _attempt(self, event: InvoiceUpserted) -> bool:
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.handler(event.invoice_id)
                return True
            except InvoiceNotFoundError:
                logger.warning("Dropping %s event for missing invoice %s", event.action, event.invoice_id)
                return False
            except Exception:
                logger.exception(
                    "Invoice automation failed for %s (attempt %d/%d)",
                    event.invoice_id,
                    attempt,
                    self.max_attempts,
                )
            if attempt < self.max_attempts:
                await asyncio.sleep(self.retry_seconds)
        logger.error("Giving up on %s event for invoice %s", event.action, event.invoice_id)
        return False

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight deliveries; called on shutdown."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


invoice_events = InvoiceEventDispatcher(invoice_payroll_automation.process_invoice)
