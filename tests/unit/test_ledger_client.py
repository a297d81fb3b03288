"""Unit tests for ledger event delivery"""

import asyncio
import httpx
import pytest
from unittest.mock import AsyncMock, call, patch
from zenith_gateway.infrastructure.clients.ledger import LedgerClient, LedgerRejectedError

URL = "http://ledger.test/events"
PAYLOAD = {"event": "SETTLEMENT_RECORDED", "payment_id": "pay-1", "transaction_id": "txn-1"}


def respond(status_code: int, text: str = "") -> httpx.Response:
    return httpx.Response(status_code, text=text, request=httpx.Request("POST", URL))


@pytest.fixture
def ledger() -> LedgerClient:
    client = LedgerClient(webhook_url=URL)
    client.max_attempts = 3
    client.backoff_base = 1.0
    return client


@pytest.fixture
def sleep():
    with patch("zenith_gateway.infrastructure.clients.ledger.asyncio.sleep", new_callable=AsyncMock) as mock:
        yield mock


def deliver(ledger: LedgerClient, *responses):
    post = AsyncMock(side_effect=list(responses))
    with patch.object(httpx.AsyncClient, "post", post):
        asyncio.run(ledger.send_settlement_event(PAYLOAD))
    return post


def test_delivered_first_try(ledger: LedgerClient, sleep: AsyncMock):
    post = deliver(ledger, respond(200))

    post.assert_awaited_once()
    assert post.call_args.kwargs["json"] == PAYLOAD
    assert post.call_args.kwargs["headers"] == {"Idempotency-Key": "pay-1"}
    sleep.assert_not_awaited()


def test_server_error_retried_with_backoff(ledger: LedgerClient, sleep: AsyncMock):
    """Test 503, connection refused, then 200: three attempts, 1s then 2s apart"""
    post = deliver(
        ledger,
        respond(503),
        httpx.ConnectError("connection refused", request=httpx.Request("POST", URL)),
        respond(200),
    )

    assert post.await_count == 3
    assert all(c.kwargs["headers"] == {"Idempotency-Key": "pay-1"} for c in post.call_args_list)
    assert sleep.await_args_list == [call(1.0), call(2.0)]


def test_rejection_not_retried(ledger: LedgerClient, sleep: AsyncMock):
    """Test a 4xx is final: one attempt, no backoff"""
    with pytest.raises(LedgerRejectedError):
        deliver(ledger, respond(422, "unknown bank account"), respond(200))

    sleep.assert_not_awaited()


def test_gives_up_after_max_attempts(ledger: LedgerClient, sleep: AsyncMock):
    with pytest.raises(httpx.HTTPStatusError):
        deliver(ledger, respond(500), respond(502), respond(503))

    assert sleep.await_count == 2
