"""Compliance alert dispatch.

The engine hands alerts to a ComplianceAlerter instead of calling a
notification transport directly. The alerter delivers inline (awaited
before screening returns) until its worker is started; after that, alerts
go onto a bounded queue drained by a background task. Either way every
alert gets an AlertDelivery record whose status can be observed, and a
failed, timed-out or dropped delivery never raises into the caller.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Iterable, Optional, Tuple

from amlscreen.models import (
    AMLConfig,
    AMLFlag,
    SAR,
    AlertDelivery,
    AlertStatus,
    Customer,
    Transaction,
    ordered_flags,
)

logger = logging.getLogger(__name__)

ALERT_SUBJECT = "URGENT: Suspicious Activity Detected"

# Delivery records kept for inspection
_DELIVERY_HISTORY = 1000


class ComplianceNotifier(ABC):
    """Outbound notification capability.

    Real implementations own their channel selection and retry/backoff.
    """

    @abstractmethod
    async def send_compliance_alert(self, recipient: str, subject: str, body: str) -> None:
        ...


class LoggingNotifier(ComplianceNotifier):
    """Writes alerts to the log. Used when no transport is configured."""

    async def send_compliance_alert(self, recipient: str, subject: str, body: str) -> None:
        logger.warning(f"Compliance alert to {recipient}: {subject}\n{body}")


def build_alert_body(
    transaction: Transaction,
    customer: Customer,
    flags: Iterable[AMLFlag],
    sar: Optional[SAR],
) -> str:
    flag_text = ", ".join(flag.value for flag in ordered_flags(flags))
    return "\n".join(
        [
            "SUSPICIOUS ACTIVITY ALERT",
            "",
            f"Transaction ID: {transaction.transaction_id}",
            f"Customer: {customer.personal_info.full_name}",
            f"Amount: {transaction.amount} {transaction.currency}",
            f"Flags: {flag_text}",
            f"SAR ID: {sar.sar_id if sar else 'N/A'}",
            "",
            "Immediate review required.",
        ]
    )


class ComplianceAlerter:
    def __init__(self, notifier: ComplianceNotifier, config: AMLConfig) -> None:
        self.notifier = notifier
        self.config = config
        self.deliveries: Deque[AlertDelivery] = deque(maxlen=_DELIVERY_HISTORY)
        self._queue: Optional["asyncio.Queue[Tuple[AlertDelivery, str]]"] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        """Switch to queued delivery drained by a background worker."""
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.config.alert_queue_size)
        self._worker = asyncio.create_task(self._run())
        logger.info("Compliance alert worker started")

    async def stop(self) -> None:
        """Drain pending alerts, then stop the worker."""
        if not self.running:
            return
        await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        self._queue = None
        logger.info("Compliance alert worker stopped")

    async def dispatch(
        self,
        transaction: Transaction,
        customer: Customer,
        flags: Iterable[AMLFlag],
        sar: Optional[SAR],
    ) -> AlertDelivery:
        delivery = AlertDelivery(
            transaction_id=transaction.transaction_id,
            sar_id=sar.sar_id if sar else None,
            recipient=self.config.compliance_recipient,
            subject=ALERT_SUBJECT,
            status=AlertStatus.QUEUED,
        )
        self.deliveries.append(delivery)
        body = build_alert_body(transaction, customer, flags, sar)

        if self.running:
            try:
                self._queue.put_nowait((delivery, body))
            except asyncio.QueueFull:
                delivery.status = AlertStatus.DROPPED
                delivery.error = "alert queue full"
                logger.warning(
                    f"Alert queue full, dropped alert for transaction "
                    f"{delivery.transaction_id}"
                )
            return delivery

        await self._deliver(delivery, body)
        return delivery

    async def _deliver(self, delivery: AlertDelivery, body: str) -> None:
        delivery.attempted_at = datetime.now(timezone.utc)
        try:
            await asyncio.wait_for(
                self.notifier.send_compliance_alert(
                    delivery.recipient, delivery.subject, body
                ),
                timeout=self.config.alert_timeout_seconds,
            )
        except asyncio.TimeoutError:
            delivery.status = AlertStatus.TIMED_OUT
            delivery.error = (
                f"no response within {self.config.alert_timeout_seconds}s"
            )
            logger.warning(
                f"Compliance alert for transaction {delivery.transaction_id} timed out"
            )
        except Exception as exc:
            delivery.status = AlertStatus.FAILED
            delivery.error = str(exc)
            logger.warning(
                f"Compliance alert for transaction {delivery.transaction_id} "
                f"failed: {exc}"
            )
        else:
            delivery.status = AlertStatus.DELIVERED
            logger.info(
                f"Compliance alert for transaction {delivery.transaction_id} "
                f"sent to {delivery.recipient}"
            )

    async def _run(self) -> None:
        while True:
            delivery, body = await self._queue.get()
            try:
                await self._deliver(delivery, body)
            finally:
                self._queue.task_done()
