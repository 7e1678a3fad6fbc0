"""
chains/providers.py - RPC provider management with failover.

Provides RPC access for factory lookups with:
- Multiple endpoint failover
- Request timeout handling
- Connection reuse
- Latency tracking

Synchronous: pricing runs inside single-threaded event handling and every
lookup completes before the next event is processed.
"""

import os
import time
from dataclasses import dataclass
from typing import Any

import httpx
from dotenv import load_dotenv

from config import get_chain_config
from core.constants import ErrorCode
from core.exceptions import InfraError
from core.logging import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

API_KEY_PLACEHOLDER = "${RPC_API_KEY}"


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None
    last_success_ts: int | None = None

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


def _now_ms() -> int:
    return int(time.time() * 1000)


class RPCProvider:
    """
    RPC provider with failover support.

    Tries endpoints in order until one succeeds.
    Tracks statistics per endpoint for monitoring.
    """

    def __init__(
        self,
        chain_id: int,
        rpc_urls: list[str],
        timeout_seconds: int = 10,
        transport: httpx.BaseTransport | None = None,
    ):
        self.chain_id = chain_id
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.Client | None = None
        self._request_id = 0

        self.rpc_urls = self._resolve_urls(rpc_urls)

        self.stats: dict[str, RPCStats] = {
            url: RPCStats(url=url) for url in self.rpc_urls
        }

    @classmethod
    def from_config(cls, chain_key: str, **kwargs: Any) -> "RPCProvider":
        """Build a provider from config/chains.yaml."""
        chain = get_chain_config(chain_key)
        return cls(
            chain_id=chain["chain_id"],
            rpc_urls=chain.get("rpc_endpoints", []),
            timeout_seconds=chain.get("timeout_seconds", 10),
            **kwargs,
        )

    def _resolve_urls(self, urls: list[str]) -> list[str]:
        """Resolve the API key placeholder in URLs."""
        api_key = os.getenv("RPC_API_KEY", "")
        resolved = []
        for url in urls:
            if API_KEY_PLACEHOLDER in url and not api_key:
                # Endpoint needs a key we don't have
                continue
            resolved.append(url.replace(API_KEY_PLACEHOLDER, api_key))
        return resolved

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "RPCProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def call(
        self,
        method: str,
        params: list | None = None,
    ) -> RPCResponse:
        """
        Make an RPC call with failover.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            RPCResponse with result and metadata

        Raises:
            InfraError: If all endpoints fail
        """
        if not self.rpc_urls:
            raise InfraError(
                code=ErrorCode.INFRA_RPC_ERROR,
                message="No RPC endpoints configured",
                details={"chain_id": self.chain_id},
            )

        client = self._get_client()
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

            start_ms = _now_ms()

            try:
                resp = client.post(url, json=payload)
                resp.raise_for_status()
                result = resp.json()
            except httpx.TimeoutException:
                latency_ms = _now_ms() - start_ms
                stats.failed_requests += 1
                stats.last_error = f"Timeout after {latency_ms}ms"
                last_error = stats.last_error
                logger.debug(
                    "RPC timeout",
                    extra={"context": {"url": url, "method": method, "latency_ms": latency_ms}},
                )
                continue
            except (httpx.HTTPError, ValueError) as e:
                stats.failed_requests += 1
                stats.last_error = str(e)
                last_error = stats.last_error
                logger.debug(
                    "RPC request failed",
                    extra={"context": {"url": url, "method": method, "error": str(e)}},
                )
                continue

            latency_ms = _now_ms() - start_ms

            if not isinstance(result, dict) or "error" in result:
                error = result.get("error") if isinstance(result, dict) else result
                error_msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
                stats.failed_requests += 1
                stats.last_error = error_msg
                last_error = error_msg
                logger.debug(
                    "RPC error response",
                    extra={"context": {"url": url, "method": method, "error": error_msg}},
                )
                continue

            stats.successful_requests += 1
            stats.total_latency_ms += latency_ms
            stats.last_success_ts = _now_ms()

            return RPCResponse(
                result=result.get("result"),
                latency_ms=latency_ms,
                endpoint_used=url,
            )

        raise InfraError(
            code=ErrorCode.INFRA_RPC_ERROR,
            message=f"All RPC endpoints failed for chain {self.chain_id}",
            details={
                "chain_id": self.chain_id,
                "method": method,
                "endpoints_tried": len(self.rpc_urls),
                "last_error": last_error,
            },
        )

    def get_chain_id(self) -> int:
        """Get chain ID from RPC."""
        response = self.call("eth_chainId")
        return int(response.result, 16)

    def get_block_number(self) -> tuple[int, int]:
        """
        Get latest block number.

        Returns:
            (block_number, latency_ms)
        """
        response = self.call("eth_blockNumber")
        return int(response.result, 16), response.latency_ms

    def eth_call(
        self,
        to: str,
        data: str,
        block: str = "latest",
    ) -> RPCResponse:
        """
        Make eth_call.

        Args:
            to: Contract address
            data: Encoded call data
            block: Block number (hex) or "latest"

        Returns:
            RPCResponse with call result
        """
        return self.call(
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
