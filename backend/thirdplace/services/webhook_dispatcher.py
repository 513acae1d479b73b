"""Webhook dispatcher: drains the pending-delivery queue in bounded cycles.

Each call to ``run_dispatch_cycle`` selects the oldest eligible deliveries,
POSTs them one at a time and records every outcome back through the
``DeliveryStore``. A delivery is attempted at most ``WEBHOOK_MAX_ATTEMPTS``
times in total; the ceiling is applied both when selecting rows and when
recording a failure.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import httpx

from thirdplace.core.config import settings
from thirdplace.models.webhook_delivery import DeliveryStatus
from thirdplace.repositories.delivery_store import DeliveryStore, PendingDelivery
from thirdplace.schemas.webhook import DispatchSummary
from thirdplace.services.signature import (
    SIGNATURE_HEADER,
    generate_signature,
    serialize_payload,
)

logger = logging.getLogger(__name__)

# Bytes of a response body read before the rest is discarded
MAX_RESPONSE_BYTES = 4096


class DeliveryQueueError(RuntimeError):
    """The pending-delivery queue could not be read; no rows were touched."""


class DeliveryDeadlineExceeded(Exception):
    """The response did not finish within the total request deadline."""


@dataclass
class AttemptResult:
    """Outcome of a single HTTP attempt."""

    success: bool
    status_code: int | None = None
    response_body: str | None = None
    error: str | None = None


class WebhookDispatcher:
    """Sends pending webhook deliveries and records their outcome."""

    def __init__(
        self,
        store: DeliveryStore,
        http_client: httpx.Client | None = None,
        batch_size: int | None = None,
        max_attempts: int | None = None,
        timeout: float | None = None,
        claim_deliveries: bool | None = None,
    ):
        self.store = store
        self.http_client = http_client
        self.batch_size = batch_size if batch_size is not None else settings.WEBHOOK_BATCH_SIZE
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.WEBHOOK_MAX_ATTEMPTS
        )
        self.timeout = timeout if timeout is not None else settings.WEBHOOK_TIMEOUT_SECONDS
        self.claim_deliveries = (
            claim_deliveries
            if claim_deliveries is not None
            else settings.WEBHOOK_CLAIM_DELIVERIES
        )

    def run_dispatch_cycle(self) -> DispatchSummary:
        """Process one batch of pending deliveries.

        Returns:
            Summary with the number of deliveries that succeeded (``processed``),
            the number whose attempt failed (``failed``) and the batch size
            (``total``).

        Raises:
            DeliveryQueueError: If the pending batch cannot be read.
        """
        logger.info("Webhook dispatch cycle started")

        try:
            batch = self.store.select_pending_batch(self.batch_size, self.max_attempts)
        except Exception as exc:
            logger.exception("Failed to fetch pending deliveries")
            raise DeliveryQueueError(f"Failed to fetch pending deliveries: {exc}") from exc

        if not batch:
            logger.info("No pending deliveries found")
            return DispatchSummary()

        logger.info("Processing %d deliveries", len(batch))
        summary = DispatchSummary(total=len(batch))

        if self.http_client is not None:
            self._process_batch(self.http_client, batch, summary)
        else:
            with httpx.Client(timeout=self.timeout, follow_redirects=False) as client:
                self._process_batch(client, batch, summary)

        logger.info(
            "Webhook dispatch cycle completed: %d delivered, %d failed, %d total",
            summary.processed,
            summary.failed,
            summary.total,
        )
        return summary

    def _process_batch(
        self,
        client: httpx.Client,
        batch: list[PendingDelivery],
        summary: DispatchSummary,
    ) -> None:
        for delivery in batch:
            delivered = self._process_delivery(client, delivery)
            if delivered is True:
                summary.processed += 1
            elif delivered is False:
                summary.failed += 1

    def _process_delivery(self, client: httpx.Client, delivery: PendingDelivery) -> bool | None:
        """Attempt one delivery.

        Returns True when delivered, False when the attempt failed, and None
        when the row was left alone because a concurrent run holds it.
        """
        if delivery.attempts >= self.max_attempts:
            logger.warning(
                "Delivery %s already has %d attempts; closing it as failed",
                delivery.id,
                delivery.attempts,
            )
            self._record_failure(delivery, delivery.attempts, "Maximum delivery attempts reached")
            return False

        attempt = delivery.attempts + 1
        try:
            if self.claim_deliveries and not self.store.try_claim(delivery.id, delivery.attempts):
                logger.info("Delivery %s is claimed by another dispatcher run; skipping", delivery.id)
                return None

            logger.info(
                "Sending webhook %s to %s (event %s, attempt %d)",
                delivery.id,
                delivery.url,
                delivery.event_type,
                attempt,
            )
            result = self.send(client, delivery)

            if result.success:
                self.store.mark_delivered(
                    delivery.id,
                    attempts=attempt,
                    response_status=result.status_code,  # type: ignore[arg-type]
                    response_body=result.response_body,
                )
                logger.info("Webhook %s delivered successfully", delivery.id)
                return True

            error = result.error or "Delivery failed"
            response_status = result.status_code
        except Exception as exc:
            logger.exception("Unexpected error processing delivery %s", delivery.id)
            error = f"{type(exc).__name__}: {exc}"
            response_status = None

        logger.warning(
            "Webhook delivery %s failed (attempt %d/%d): %s",
            delivery.id,
            attempt,
            self.max_attempts,
            error,
        )
        self._record_failure(delivery, attempt, error, response_status)
        return False

    def _record_failure(
        self,
        delivery: PendingDelivery,
        attempts: int,
        error: str,
        response_status: int | None = None,
    ) -> None:
        try:
            status = self.store.mark_failed_or_retry(
                delivery.id,
                attempts=attempts,
                error_message=error,
                max_attempts=self.max_attempts,
                response_status=response_status,
            )
        except Exception:
            logger.exception("Failed to record failed attempt for delivery %s", delivery.id)
            return

        if status == DeliveryStatus.FAILED.value:
            logger.warning(
                "Delivery %s permanently failed after %d attempts", delivery.id, attempts
            )

    def build_headers(self, delivery: PendingDelivery, body: bytes) -> dict[str, str]:
        """Build request headers, signing ``body`` when a secret is configured."""
        headers = {
            "Content-Type": "application/json",
            "User-Agent": settings.WEBHOOK_USER_AGENT,
        }
        if delivery.secret_key:
            headers[SIGNATURE_HEADER] = generate_signature(body, delivery.secret_key)
        return headers

    def send(self, client: httpx.Client, delivery: PendingDelivery) -> AttemptResult:
        """POST a delivery's payload and classify the response.

        ``self.timeout`` bounds each network step and also the request as a
        whole, so an endpoint that trickles its response is cut off. Transport
        errors are returned as failed results; anything else propagates to
        the caller.
        """
        body = serialize_payload(delivery.payload)
        headers = self.build_headers(delivery, body)
        deadline = time.monotonic() + self.timeout

        try:
            with client.stream(
                "POST",
                delivery.url,
                content=body,
                headers=headers,
                timeout=self.timeout,
            ) as response:
                status_code = response.status_code
                response_body = self.read_body(response, deadline)
        except (DeliveryDeadlineExceeded, httpx.TimeoutException) as exc:
            return AttemptResult(
                success=False,
                error=f"Request timed out after {self.timeout:g}s: {exc}",
            )
        except httpx.ConnectError as exc:
            return AttemptResult(success=False, error=f"Connection error: {exc}")
        except httpx.HTTPError as exc:
            return AttemptResult(success=False, error=f"HTTP error: {exc}")

        if 200 <= status_code < 300:
            return AttemptResult(
                success=True,
                status_code=status_code,
                response_body=response_body,
            )

        return AttemptResult(
            success=False,
            status_code=status_code,
            response_body=response_body,
            error=f"HTTP {status_code}: {response_body}",
        )

    @staticmethod
    def read_body(response: httpx.Response, deadline: float) -> str:
        """Read at most ``MAX_RESPONSE_BYTES`` of the body before ``deadline``.

        Raises:
            DeliveryDeadlineExceeded: If the deadline passes while reading.
        """
        chunks: list[bytes] = []
        received = 0
        for chunk in response.iter_bytes():
            if time.monotonic() > deadline:
                raise DeliveryDeadlineExceeded(
                    f"response body incomplete after {received} bytes"
                )
            chunks.append(chunk)
            received += len(chunk)
            if received >= MAX_RESPONSE_BYTES:
                break
        raw = b"".join(chunks)[:MAX_RESPONSE_BYTES]
        return raw.decode(response.encoding or "utf-8", errors="replace")
