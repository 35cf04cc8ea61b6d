"""
solang_sdk.rpc
--------------

Lightweight RPC helpers.

This package exposes:
- RpcClient: async HTTP JSON-RPC client (see .http)
- WsClient:  async WebSocket subscription client (see .ws)

Import style:

    from solang_sdk.rpc import RpcClient, WsClient
    rpc = RpcClient(url="http://127.0.0.1:8899")
    ws  = WsClient(url="ws://127.0.0.1:8900")
"""

from __future__ import annotations

from .http import RpcClient
from .ws import WsClient

__all__ = ["RpcClient", "WsClient"]
