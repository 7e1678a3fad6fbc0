"""
tests/unit/test_providers.py - RPCProvider failover tests.

All traffic goes through httpx.MockTransport; no network access.
"""

import json

import httpx
import pytest

from chains.providers import RPCProvider
from core.constants import ErrorCode
from core.exceptions import InfraError

PRIMARY = "https://primary.rpc"
BACKUP = "https://backup.rpc"


def ok(request: httpx.Request, result) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def provider_for(handler, urls=(PRIMARY, BACKUP)) -> RPCProvider:
    return RPCProvider(chain_id=250, rpc_urls=list(urls), transport=httpx.MockTransport(handler))


class TestFailover:
    def test_first_endpoint_used(self):
        provider = provider_for(lambda r: ok(r, "0xfa"))
        response = provider.call("eth_chainId")
        assert response.result == "0xfa"
        assert response.endpoint_used == PRIMARY

    def test_http_error_falls_through(self):
        def handler(request):
            if request.url.host == "primary.rpc":
                return httpx.Response(502)
            return ok(request, "0x10")

        provider = provider_for(handler)
        response = provider.call("eth_blockNumber")

        assert response.endpoint_used == BACKUP
        assert provider.stats[PRIMARY].failed_requests == 1
        assert provider.stats[BACKUP].successful_requests == 1

    def test_timeout_falls_through(self):
        def handler(request):
            if request.url.host == "primary.rpc":
                raise httpx.ReadTimeout("slow", request=request)
            return ok(request, "0x10")

        provider = provider_for(handler)
        assert provider.call("eth_blockNumber").endpoint_used == BACKUP
        assert provider.stats[PRIMARY].last_error.startswith("Timeout")

    def test_json_rpc_error_falls_through(self):
        def handler(request):
            if request.url.host == "primary.rpc":
                body = json.loads(request.content)
                return httpx.Response(
                    200,
                    json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": "header not found"}},
                )
            return ok(request, "0x10")

        provider = provider_for(handler)
        assert provider.call("eth_blockNumber").endpoint_used == BACKUP
        assert provider.stats[PRIMARY].last_error == "header not found"

    def test_invalid_json_falls_through(self):
        def handler(request):
            if request.url.host == "primary.rpc":
                return httpx.Response(200, content=b"<html>")
            return ok(request, "0x10")

        provider = provider_for(handler)
        assert provider.call("eth_blockNumber").endpoint_used == BACKUP

    def test_all_endpoints_fail(self):
        provider = provider_for(lambda r: httpx.Response(500))
        with pytest.raises(InfraError) as exc_info:
            provider.call("eth_blockNumber")
        assert exc_info.value.code == ErrorCode.INFRA_RPC_ERROR
        assert exc_info.value.details["endpoints_tried"] == 2

    def test_no_endpoints(self):
        provider = provider_for(lambda r: ok(r, "0x1"), urls=())
        with pytest.raises(InfraError):
            provider.call("eth_chainId")


class TestHelpers:
    def test_get_chain_id(self):
        with provider_for(lambda r: ok(r, "0xfa")) as provider:
            assert provider.get_chain_id() == 250

    def test_get_block_number(self):
        provider = provider_for(lambda r: ok(r, "0x1d1a94a"))
        block, latency_ms = provider.get_block_number()
        assert block == 30517578
        assert latency_ms >= 0

    def test_eth_call_payload(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return ok(request, "0x")

        provider = provider_for(handler)
        provider.eth_call("0x" + "1" * 40, "0xdeadbeef", block="0x10")

        assert seen[0]["method"] == "eth_call"
        assert seen[0]["params"] == [{"to": "0x" + "1" * 40, "data": "0xdeadbeef"}, "0x10"]

    def test_request_ids_increment(self):
        ids = []

        def handler(request):
            ids.append(json.loads(request.content)["id"])
            return ok(request, "0x1")

        provider = provider_for(handler)
        provider.call("eth_chainId")
        provider.call("eth_chainId")
        assert ids == [1, 2]

    def test_stats_summary(self):
        provider = provider_for(lambda r: ok(r, "0x1"))
        provider.call("eth_chainId")
        summary = provider.get_stats_summary()
        assert summary[PRIMARY]["total_requests"] == 1
        assert summary[PRIMARY]["success_rate"] == 1.0
        assert summary[BACKUP]["total_requests"] == 0


class TestUrlResolution:
    def test_keyed_endpoint_skipped_without_key(self, monkeypatch):
        monkeypatch.delenv("RPC_API_KEY", raising=False)
        provider = RPCProvider(chain_id=250, rpc_urls=[PRIMARY, "https://keyed.rpc/${RPC_API_KEY}"])
        assert provider.rpc_urls == [PRIMARY]

    def test_keyed_endpoint_resolved_with_key(self, monkeypatch):
        monkeypatch.setenv("RPC_API_KEY", "secret")
        provider = RPCProvider(chain_id=250, rpc_urls=["https://keyed.rpc/${RPC_API_KEY}"])
        assert provider.rpc_urls == ["https://keyed.rpc/secret"]

    def test_from_config(self, monkeypatch):
        monkeypatch.delenv("RPC_API_KEY", raising=False)
        provider = RPCProvider.from_config("fantom")
        assert provider.chain_id == 250
        assert provider.timeout_seconds == 10
        assert "https://rpc.ftm.tools" in provider.rpc_urls
        assert all("${RPC_API_KEY}" not in url for url in provider.rpc_urls)
