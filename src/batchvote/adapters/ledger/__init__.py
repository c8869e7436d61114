from __future__ import annotations

from .rpc import JsonRpcLedgerClient

__all__ = ["JsonRpcLedgerClient"]
