"""
chains/ - Blockchain interaction layer.

Modules:
- providers: JSON-RPC provider management with failover
"""

from chains.providers import (
    ProviderRegistry,
    RPCProvider,
    RPCResponse,
    RPCStats,
)

__all__ = [
    "ProviderRegistry",
    "RPCProvider",
    "RPCResponse",
    "RPCStats",
]
