"""Tests for the correlated signing handshake."""

import asyncio

import pytest

from swapper.execution import CorrelatedSigner, SigningRequest, TxRequest
from tests.helpers import ROUTER, WALLET_ID


class Outbox:
    """Transport stub collecting posted signing requests."""

    def __init__(self):
        self.requests: list[SigningRequest] = []
        self.posted = asyncio.Event()

    async def post(self, request: SigningRequest) -> None:
        self.requests.append(request)
        self.posted.set()


class TestCorrelatedSigner:
    """Responses are matched to requests by id."""

    @pytest.mark.asyncio
    async def test_resolve_completes_request(self):
        outbox = Outbox()
        signer = CorrelatedSigner(outbox.post)

        pending = asyncio.create_task(signer.send_transaction(WALLET_ID, TxRequest(to=ROUTER)))
        await outbox.posted.wait()
        (request,) = outbox.requests

        assert request.wallet_id == WALLET_ID
        assert signer.pending_ids == [request.request_id]
        assert signer.resolve(request.request_id, "0xabc") is True
        assert await pending == "0xabc"
        assert signer.pending_ids == []

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_not_crossed(self):
        outbox = Outbox()
        signer = CorrelatedSigner(outbox.post)

        first = asyncio.create_task(signer.send_transaction("w1", TxRequest(to=ROUTER)))
        second = asyncio.create_task(signer.send_transaction("w2", TxRequest(to=ROUTER)))
        while len(outbox.requests) < 2:
            await asyncio.sleep(0)

        by_wallet = {r.wallet_id: r.request_id for r in outbox.requests}
        assert by_wallet["w1"] != by_wallet["w2"]
        signer.resolve(by_wallet["w2"], "0x2")
        signer.resolve(by_wallet["w1"], "0x1")

        assert await first == "0x1"
        assert await second == "0x2"

    @pytest.mark.asyncio
    async def test_reject_raises_in_sender(self):
        outbox = Outbox()
        signer = CorrelatedSigner(outbox.post)

        pending = asyncio.create_task(signer.send_transaction(WALLET_ID, TxRequest(to=ROUTER)))
        await outbox.posted.wait()
        signer.reject(outbox.requests[0].request_id, "User rejected")

        with pytest.raises(RuntimeError, match="User rejected"):
            await pending
        assert signer.pending_ids == []

    @pytest.mark.asyncio
    async def test_unknown_and_late_ids_are_ignored(self):
        outbox = Outbox()
        signer = CorrelatedSigner(outbox.post)

        assert signer.resolve("nope", "0x1") is False
        assert signer.reject("nope", "x") is False

        pending = asyncio.create_task(signer.send_transaction(WALLET_ID, TxRequest(to=ROUTER)))
        await outbox.posted.wait()
        request_id = outbox.requests[0].request_id
        signer.resolve(request_id, "0x1")
        await pending

        assert signer.resolve(request_id, "0x2") is False

    @pytest.mark.asyncio
    async def test_timeout_clears_entry(self):
        outbox = Outbox()
        signer = CorrelatedSigner(outbox.post, timeout_seconds=0.01)

        with pytest.raises(TimeoutError):
            await signer.send_transaction(WALLET_ID, TxRequest(to=ROUTER))
        assert signer.pending_ids == []
