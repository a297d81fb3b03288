"""Delivery of settlement events to the bank-account ledger"""

import httpx
import asyncio
import logging
from typing import Dict, Any
from zenith_gateway.config import settings
from zenith_gateway.infrastructure.observability.metrics import ledger_delivery_histogram, ledger_failure_counter


class LedgerRejectedError(Exception):
    """Ledger answered 4xx; the event will not be accepted on retry"""


def failure_reason(error: Exception) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        return "rejected" if error.response.status_code < 500 else "server_error"
    return "network"


class LedgerClient:
    """Posts SETTLEMENT_RECORDED events, keyed by payment so the ledger can drop replays"""

    def __init__(self, webhook_url: str | None = None):
        self.webhook_url = webhook_url or settings.ledger_webhook_url
        self.timeout = settings.http_timeout_seconds
        self.max_attempts = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    def backoff(self, attempt: int) -> float:
        return self.backoff_base * (2 ** (attempt - 1))

    async def send_settlement_event(self, payload: Dict[str, Any]) -> None:
        """
        Deliver one settlement event.

        The payment id goes out as Idempotency-Key on every attempt. Server
        errors and network failures are retried with exponential backoff
        (base, 2x base, 4x base...) up to webhook_max_retries attempts; a 4xx
        means the ledger refused the event itself and is raised at once as
        LedgerRejectedError.
        """
        context = {
            "transaction_id": payload.get("transaction_id"),
            "payment_id": payload.get("payment_id"),
        }
        headers = {"Idempotency-Key": str(payload.get("payment_id"))}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    with ledger_delivery_histogram.time():
                        response = await client.post(self.webhook_url, json=payload, headers=headers)
                    response.raise_for_status()
                    if attempt > 1:
                        logging.info(f"Ledger accepted settlement on attempt {attempt}", extra=context)
                    return

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    reason = failure_reason(e)
                    ledger_failure_counter.labels(reason=reason).inc()

                    if reason == "rejected":
                        logging.error(
                            f"Ledger rejected settlement: {e.response.status_code} {e.response.text}",
                            extra=context,
                        )
                        raise LedgerRejectedError(str(e)) from e

                    if attempt == self.max_attempts:
                        logging.error(f"Ledger unreachable after {attempt} attempts: {e}", extra=context)
                        raise

                    delay = self.backoff(attempt)
                    logging.warning(
                        f"Ledger delivery attempt {attempt} failed ({reason}), retrying in {delay}s",
                        extra=context,
                    )
                    await asyncio.sleep(delay)
