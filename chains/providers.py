"""
chains/providers.py - JSON-RPC provider with failover.

Provides RPC access with:
- Multiple endpoint failover
- Request timeout handling
- Connection reuse
- Latency tracking per endpoint
"""

import os
from dataclasses import dataclass
from typing import Any

import httpx

from core.constants import ErrorCode
from core.exceptions import InfraError
from core.logging import get_logger
from core.time import now_ms

logger = get_logger(__name__)


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


@dataclass
class RPCResponse:
    """Response from an RPC call."""
    result: Any
    latency_ms: int
    endpoint_used: str


class RPCProvider:
    """
    RPC provider with failover support.

    Tries endpoints in order until one succeeds.
    """

    def __init__(
        self,
        chain: str,
        rpc_urls: list[str] | tuple[str, ...],
        timeout_seconds: float = 10,
        client: httpx.AsyncClient | None = None,
    ):
        self.chain = chain
        self.timeout_seconds = timeout_seconds
        self.rpc_urls = [os.path.expandvars(url) for url in rpc_urls]
        self._client = client
        self._request_id = 0

        self.stats: dict[str, RPCStats] = {
            url: RPCStats(url=url) for url in self.rpc_urls
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def call(
        self,
        method: str,
        params: list | None = None,
    ) -> RPCResponse:
        """
        Make an RPC call with failover.

        Raises:
            InfraError: If every endpoint fails
        """
        if not self.rpc_urls:
            raise InfraError(
                f"No RPC endpoints configured for {self.chain}",
                details={"chain": self.chain},
            )

        client = await self._get_client()
        last_error: str | None = None

        for url in self.rpc_urls:
            stats = self.stats[url]
            stats.total_requests += 1

            payload = {
                "jsonrpc": "2.0",
                "method": method,
                "params": params or [],
                "id": self._next_request_id(),
            }

            start_ms = now_ms()

            try:
                resp = await client.post(url, json=payload)
                latency_ms = now_ms() - start_ms
                body = resp.json()
            except httpx.TimeoutException:
                stats.failed_requests += 1
                stats.last_error = last_error = f"Timeout after {self.timeout_seconds}s"
                logger.debug(f"RPC timeout for {url}", extra={"context": {"method": method}})
                continue
            except (httpx.HTTPError, ValueError) as e:
                stats.failed_requests += 1
                stats.last_error = last_error = str(e)
                logger.debug(f"RPC failed for {url}: {e}", extra={"context": {"method": method}})
                continue

            if "error" in body:
                error = body["error"]
                message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
                stats.failed_requests += 1
                stats.last_error = last_error = message
                logger.debug(f"RPC error from {url}: {message}", extra={"context": {"method": method}})
                continue

            stats.successful_requests += 1
            stats.total_latency_ms += latency_ms

            return RPCResponse(
                result=body.get("result"),
                latency_ms=latency_ms,
                endpoint_used=url,
            )

        raise InfraError(
            f"All RPC endpoints failed for {self.chain}",
            code=ErrorCode.INFRA_RPC_ERROR,
            details={
                "chain": self.chain,
                "method": method,
                "endpoints_tried": len(self.rpc_urls),
                "last_error": last_error,
            },
        )

    async def eth_call(
        self,
        to: str,
        data: str,
        block: str = "latest",
    ) -> RPCResponse:
        """Make eth_call against a contract."""
        return await self.call(
            "eth_call",
            [{"to": to, "data": data}, block],
        )

    def get_stats_summary(self) -> dict:
        """Get statistics summary for all endpoints."""
        return {
            url: {
                "total_requests": s.total_requests,
                "success_rate": round(s.success_rate, 3),
                "avg_latency_ms": s.avg_latency_ms,
                "last_error": s.last_error,
            }
            for url, s in self.stats.items()
        }


class ProviderRegistry:
    """
    Registry of RPC providers by chain name.

    Manages provider lifecycle.
    """

    def __init__(self):
        self._providers: dict[str, RPCProvider] = {}

    def register(
        self,
        chain: str,
        rpc_urls: list[str] | tuple[str, ...],
        timeout_seconds: float = 10,
    ) -> RPCProvider:
        """Register a provider for a chain."""
        provider = RPCProvider(chain, rpc_urls, timeout_seconds)
        self._providers[chain] = provider
        return provider

    def get(self, chain: str) -> RPCProvider | None:
        return self._providers.get(chain)

    def get_or_register(
        self,
        chain: str,
        rpc_urls: list[str] | tuple[str, ...],
        timeout_seconds: float = 10,
    ) -> RPCProvider:
        """Reuse the chain's provider if one is registered."""
        provider = self.get(chain)
        if provider is None:
            provider = self.register(chain, rpc_urls, timeout_seconds)
        return provider

    async def close_all(self) -> None:
        """Close all providers."""
        for provider in self._providers.values():
            await provider.close()
        self._providers.clear()

    @property
    def chains(self) -> list[str]:
        return list(self._providers.keys())
