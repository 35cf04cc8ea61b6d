import asyncio
import json

import httpx
import pytest

from conftest import PROGRAM_ID, STORAGE
from solang_sdk.connection import Connection
from solang_sdk.errors import ExecutionError, RpcError
from solang_sdk.rpc.http import RpcClient
from solang_sdk.tx.instruction import InstructionBuilder
from solang_sdk.utils.bytes import b64decode

BLOCKHASH = "11111111111111111111111111111111"


class FakeNode:
    """JSON-RPC responder keyed by method name."""

    def __init__(self, **results):
        self.results = results
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append((body["method"], body["params"]))
        result = self.results[body["method"]]
        if callable(result):
            result = result(body["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def methods(self):
        return [m for m, _ in self.calls]


def _conn(node: FakeNode, **kw) -> Connection:
    rpc = RpcClient("http://rpc.test", transport=httpx.MockTransport(node))
    return Connection(rpc, poll_interval=0, **kw)


def _ix():
    return InstructionBuilder(PROGRAM_ID).call(storage=STORAGE, caller=STORAGE, input=b"")


@pytest.mark.asyncio
async def test_send_and_confirm_polls_until_commitment(payer):
    statuses = iter(
        [
            {"value": [None]},
            {"value": [{"err": None, "confirmationStatus": "processed"}]},
            {"value": [{"err": None, "confirmationStatus": "confirmed"}]},
        ]
    )
    node = FakeNode(
        getLatestBlockhash={"value": {"blockhash": BLOCKHASH, "lastValidBlockHeight": 10}},
        sendTransaction="sig111",
        getSignatureStatuses=lambda params: next(statuses),
    )
    conn = _conn(node)
    assert await conn.send_and_confirm([_ix()], [payer]) == "sig111"
    assert node.methods() == [
        "getLatestBlockhash",
        "sendTransaction",
        "getSignatureStatuses",
        "getSignatureStatuses",
        "getSignatureStatuses",
    ]
    wire, opts = node.calls[1][1]
    assert opts["encoding"] == "base64"
    assert len(b64decode(wire)) > 64
    await conn.close()


@pytest.mark.asyncio
async def test_confirmed_with_error_raises(payer):
    node = FakeNode(
        getLatestBlockhash={"value": {"blockhash": BLOCKHASH}},
        sendTransaction="sig222",
        getSignatureStatuses={"value": [{"err": {"InstructionError": [0, "Custom"]}, "confirmationStatus": "confirmed"}]},
    )
    with pytest.raises(ExecutionError):
        await _conn(node).send_and_confirm([_ix()], [payer])


@pytest.mark.asyncio
async def test_confirmation_timeout(payer):
    node = FakeNode(
        getLatestBlockhash={"value": {"blockhash": BLOCKHASH}},
        sendTransaction="sig333",
        getSignatureStatuses={"value": [None]},
    )
    with pytest.raises(asyncio.TimeoutError):
        await _conn(node, confirm_timeout=0).send_and_confirm([_ix()], [payer])


@pytest.mark.asyncio
async def test_get_transaction_logs():
    node = FakeNode(
        getTransaction={"meta": {"logMessages": ["Program log: hi"], "computeUnitsConsumed": 812}}
    )
    logs = await _conn(node).get_transaction_logs("sig")
    assert logs.logs == ["Program log: hi"]
    assert logs.compute_units_used == 812


@pytest.mark.asyncio
async def test_missing_transaction():
    with pytest.raises(RpcError):
        await _conn(FakeNode(getTransaction=None)).get_transaction_logs("sig")


@pytest.mark.asyncio
async def test_simulate(payer):
    node = FakeNode(
        simulateTransaction={
            "context": {"slot": 1},
            "value": {"err": "AccountNotFound", "logs": ["Program log: x"], "unitsConsumed": 150},
        }
    )
    sim = await _conn(node).simulate([_ix()], [payer])
    assert sim.err == "AccountNotFound"
    assert sim.logs == ["Program log: x"]
    assert sim.compute_units_used == 150
    _, opts = node.calls[0][1]
    assert opts["sigVerify"] is False
    assert opts["replaceRecentBlockhash"] is True


@pytest.mark.asyncio
async def test_on_logs_without_websocket():
    with pytest.raises(RpcError):
        await _conn(FakeNode()).on_logs(PROGRAM_ID, lambda n: None)
