"""
solang_sdk.connection
=====================

Ledger transport used by the executor and the event dispatcher.

`Connection` wraps an async JSON-RPC client (`RpcClient`) and a websocket
client (`WsClient`) and implements exactly what the SDK needs:

- send_and_confirm(instructions, signers) -> signature
    getLatestBlockhash → sendTransaction (base64) → getSignatureStatuses
    polling until the configured commitment or `confirm_timeout`
- get_transaction_logs(signature) -> TransactionLogs
    getTransaction → meta.logMessages / meta.computeUnitsConsumed
- simulate(instructions, signers) -> SimulationResult
    simulateTransaction (base64, sigVerify off, blockhash replaced)
- on_logs(program_id, callback) / remove_on_logs(subscription_id)
    logsSubscribe with a `mentions` filter / logsUnsubscribe

Nothing here retries. A rejected or failed transaction raises
`ExecutionError`/`RpcError`; a confirmation that never arrives raises
`asyncio.TimeoutError`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Sequence

from .config import SDKConfig
from .errors import ExecutionError, RpcError
from .events import LogNotification
from .executor import SimulationResult, TransactionLogs
from .publickey import PublicKey
from .rpc.http import RpcClient
from .rpc.ws import WsClient
from .tx.instruction import TransactionInstruction
from .tx.message import Transaction
from .wallet.keypair import Keypair

__all__ = ["Connection"]

log = logging.getLogger(__name__)

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}
# simulateTransaction replaces the blockhash, so any 32 bytes will do
_PLACEHOLDER_BLOCKHASH = bytes(32)


class Connection:
    def __init__(
        self,
        rpc: RpcClient,
        ws: Optional[WsClient] = None,
        *,
        commitment: str = "confirmed",
        confirm_timeout: float = 60.0,
        poll_interval: float = 0.5,
    ) -> None:
        self.rpc = rpc
        self.ws = ws
        self.commitment = commitment
        self.confirm_timeout = confirm_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_config(cls, config: Optional[SDKConfig] = None) -> "Connection":
        cfg = config or SDKConfig.from_env()
        rpc = RpcClient(cfg.rpc_url, timeout=cfg.request_timeout, headers=cfg.http_headers())
        ws = WsClient(cfg.effective_ws_url, request_timeout=cfg.request_timeout)
        return cls(
            rpc,
            ws,
            commitment=cfg.commitment,
            confirm_timeout=cfg.confirm_timeout,
            poll_interval=cfg.poll_interval,
        )

    async def close(self) -> None:
        await self.rpc.close()
        if self.ws is not None:
            await self.ws.close()

    # --- submission ---

    async def get_latest_blockhash(self) -> str:
        res = await self.rpc.request("getLatestBlockhash", [{"commitment": self.commitment}])
        try:
            return str(res["value"]["blockhash"])
        except (TypeError, KeyError) as e:
            raise RpcError(code=-32603, message="Malformed getLatestBlockhash result", data=res) from e

    async def send_transaction(self, tx: Transaction) -> str:
        res = await self.rpc.request(
            "sendTransaction",
            [tx.to_base64(), {"encoding": "base64", "preflightCommitment": self.commitment}],
        )
        return str(res)

    async def confirm_transaction(self, signature: str) -> None:
        """Poll the signature status until it reaches the configured commitment."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.confirm_timeout
        want = _COMMITMENT_RANK.get(self.commitment, 1)
        while True:
            res = await self.rpc.request(
                "getSignatureStatuses", [[signature], {"searchTransactionHistory": True}]
            )
            statuses = (res or {}).get("value") or [None]
            status = statuses[0]
            if status is not None:
                if status.get("err") is not None:
                    raise ExecutionError(
                        message=f"transaction {signature} failed: {status['err']}",
                        signature=signature,
                    )
                level = status.get("confirmationStatus")
                if level is None or _COMMITMENT_RANK.get(level, -1) >= want:
                    return
            if loop.time() >= deadline:
                raise asyncio.TimeoutError(
                    f"transaction {signature} not {self.commitment} after {self.confirm_timeout}s"
                )
            await asyncio.sleep(self.poll_interval)

    async def send_and_confirm(
        self, instructions: Sequence[TransactionInstruction], signers: Sequence[Keypair]
    ) -> str:
        blockhash = await self.get_latest_blockhash()
        tx = Transaction.build(instructions, signers, blockhash)
        signature = await self.send_transaction(tx)
        log.debug("sent transaction %s", signature)
        await self.confirm_transaction(signature)
        return signature

    async def get_transaction_logs(self, signature: str) -> TransactionLogs:
        # getTransaction does not accept "processed"
        commitment = "confirmed" if self.commitment == "processed" else self.commitment
        res = await self.rpc.request(
            "getTransaction",
            [signature, {"encoding": "json", "commitment": commitment, "maxSupportedTransactionVersion": 0}],
        )
        if not res:
            raise RpcError(code=-32004, message=f"transaction {signature} not found", method="getTransaction")
        meta = res.get("meta") or {}
        return TransactionLogs(
            logs=list(meta.get("logMessages") or []),
            compute_units_used=meta.get("computeUnitsConsumed"),
        )

    # --- simulation ---

    async def simulate(
        self, instructions: Sequence[TransactionInstruction], signers: Sequence[Keypair]
    ) -> SimulationResult:
        tx = Transaction.build(instructions, signers, _PLACEHOLDER_BLOCKHASH)
        res = await self.rpc.request(
            "simulateTransaction",
            [
                tx.to_base64(),
                {
                    "encoding": "base64",
                    "sigVerify": False,
                    "replaceRecentBlockhash": True,
                    "commitment": self.commitment,
                },
            ],
        )
        value = (res or {}).get("value") or {}
        return SimulationResult(
            err=value.get("err"),
            logs=list(value.get("logs") or []),
            compute_units_used=value.get("unitsConsumed"),
        )

    # --- log subscription ---

    async def on_logs(self, program_id: PublicKey, callback: Callable[[LogNotification], None]) -> Any:
        if self.ws is None:
            raise RpcError(code=-32098, message="no websocket endpoint configured", method="logsSubscribe")
        if not self.ws.connected:
            await self.ws.connect()

        def handler(result: Any) -> None:
            value = (result or {}).get("value") or {}
            callback(
                LogNotification(
                    logs=list(value.get("logs") or []),
                    err=value.get("err"),
                    signature=value.get("signature"),
                )
            )

        return await self.ws.subscribe(
            "logsSubscribe",
            [{"mentions": [str(program_id)]}, {"commitment": self.commitment}],
            on_event=handler,
        )

    async def remove_on_logs(self, subscription_id: Any) -> None:
        if self.ws is None:
            return
        await self.ws.unsubscribe("logsUnsubscribe", subscription_id)
