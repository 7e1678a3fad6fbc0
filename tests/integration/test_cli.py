# PATH: tests/integration/test_cli.py
"""
Integration tests for the pricer CLI.

Runs run_pricing.main end to end against a snapshot file and a pricing
config written to a temp directory. No network access.
"""

import json
import logging
from decimal import Decimal

import httpx
import pytest
from click.testing import CliRunner

from chains.providers import RPCProvider
from core.logging import clear_global_context
from core.models import Bundle, Pair, Token
from data.store import InMemoryEntityStore
from run_pricing import main

WFTM = "0x" + "1" * 40
USDC = "0x" + "2" * 40
BOO = "0x" + "4" * 40
SPIRIT = "0x" + "5" * 40
USDC_WFTM = "0x" + "a" * 40
BOO_WFTM = "0x" + "b" * 40
BOO_SPIRIT = "0x" + "e" * 40
FACTORY = "0x" + "f" * 40

PRICING_YAML = f"""
testnet:
  base_token: "{WFTM}"
  usd_reference_pair: "{USDC_WFTM}"
  factory: "{FACTORY}"
  whitelist:
    - "{WFTM}"
    - "{USDC}"
  min_liquidity_base: "1"
  min_usd_new_pairs: "1"
  min_lp_count: 5
"""


def _close_all_handlers():
    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    _close_all_handlers()
    clear_global_context()


def _pair(address, token0, token1, r0, r1, reserve_base, lps=10):
    pair = Pair(
        address=address,
        token0=token0,
        token1=token1,
        reserve_base=Decimal(reserve_base),
        liquidity_provider_count=lps,
    )
    pair.sync_reserves(Decimal(r0), Decimal(r1))
    return pair


@pytest.fixture
def files(tmp_path):
    store = InMemoryEntityStore(
        tokens=[
            Token(address=WFTM, symbol="WFTM", derived_base_price=Decimal("1")),
            Token(address=USDC, symbol="USDC", decimals=6, derived_base_price=Decimal("2.5")),
            Token(address=BOO, symbol="BOO", derived_base_price=Decimal("0.5")),
            Token(address=SPIRIT, symbol="SPIRIT", derived_base_price=Decimal("0.1")),
        ],
        pairs=[
            _pair(USDC_WFTM, USDC, WFTM, "400", "1000", "1000"),
            _pair(BOO_WFTM, BOO, WFTM, "1000", "500", "500"),
            _pair(BOO_SPIRIT, BOO, SPIRIT, "10", "50", "5"),
        ],
        bundle=Bundle(base_price_usd=Decimal("0.4")),
    )
    snapshot = tmp_path / "state.json"
    store.save_snapshot(snapshot)

    config = tmp_path / "pricing.yaml"
    config.write_text(PRICING_YAML, encoding="utf-8")
    return snapshot, config


def invoke(files, *args):
    snapshot, config = files
    runner = CliRunner()
    return runner.invoke(
        main,
        ["--snapshot", str(snapshot), "--config", str(config), "--chain", "testnet", *args],
    )


def last_json(result) -> dict:
    return json.loads(result.output.strip().splitlines()[-1])


class TestDerive:
    def test_derive_json(self, files):
        result = invoke(files, "--json", "derive", BOO)

        assert result.exit_code == 0, result.output
        payload = last_json(result)
        assert payload["token"] == BOO
        assert payload["stable"] is False
        assert Decimal(payload["derived_base_price"]) == Decimal("0.5")
        assert payload["source"]["pair_address"] == BOO_WFTM
        assert payload["source"]["side"] == "token0"

    def test_derive_human(self, files):
        result = invoke(files, "derive", BOO)

        assert result.exit_code == 0, result.output
        assert "BOO: 0.500000000000000000" in result.output
        assert BOO_WFTM in result.output

    def test_derive_base_token(self, files):
        result = invoke(files, "--json", "derive", WFTM)
        payload = last_json(result)
        assert Decimal(payload["derived_base_price"]) == Decimal("1")

    def test_derive_stable_finds_nothing(self, files):
        result = invoke(files, "--json", "derive", BOO, "--stable")
        payload = last_json(result)
        assert Decimal(payload["derived_base_price"]) == Decimal("0")
        assert payload["source"] is None

    def test_unknown_token(self, files):
        result = invoke(files, "derive", "0x" + "9" * 40)
        assert result.exit_code == 1
        assert "Token not in snapshot" in result.output


class TestBasePrice:
    def test_base_price(self, files):
        result = invoke(files, "--json", "base-price")

        assert result.exit_code == 0, result.output
        payload = last_json(result)
        assert payload["reference_pair"] == USDC_WFTM
        assert Decimal(payload["base_price_usd"]) == Decimal("0.4")

    def test_base_price_human(self, files):
        result = invoke(files, "base-price")
        assert "$0.40" in result.output


class TestTrackers:
    def test_volume(self, files):
        # WFTM side only: 20 * 1 * 0.4
        result = invoke(files, "--json", "volume", BOO_WFTM, "10", "20")

        assert result.exit_code == 0, result.output
        assert Decimal(last_json(result)["tracked_volume_usd"]) == Decimal("8")

    def test_volume_untrusted_pair(self, files):
        result = invoke(files, "--json", "volume", BOO_SPIRIT, "10", "20")
        assert Decimal(last_json(result)["tracked_volume_usd"]) == Decimal("0")

    def test_volume_bad_amount(self, files):
        result = invoke(files, "volume", BOO_WFTM, "ten", "20")
        assert result.exit_code == 2
        assert "not a decimal" in result.output

    def test_volume_raw_amounts(self, files):
        # 3 USDC (6 decimals) and 7 WFTM (18 decimals): (3 * 1 + 7 * 0.4) / 2
        result = invoke(files, "--json", "volume", "--raw", USDC_WFTM, "3000000", str(7 * 10**18))

        assert result.exit_code == 0, result.output
        assert Decimal(last_json(result)["tracked_volume_usd"]) == Decimal("2.9")

    def test_volume_raw_rejects_fractions(self, files):
        result = invoke(files, "volume", "--raw", BOO_WFTM, "1.5", "20")
        assert result.exit_code == 2
        assert "not a raw integer amount" in result.output

    def test_liquidity(self, files):
        # 500 WFTM * 0.4 * 2
        result = invoke(files, "--json", "liquidity", BOO_WFTM)

        assert result.exit_code == 0, result.output
        assert Decimal(last_json(result)["tracked_liquidity_usd"]) == Decimal("400")

    def test_liquidity_both_whitelisted_human(self, files):
        # 400 USDC * 2.5 * 0.4 + 1000 WFTM * 0.4
        result = invoke(files, "liquidity", USDC_WFTM)
        assert "$800.00" in result.output

    def test_unknown_pair(self, files):
        result = invoke(files, "liquidity", "0x" + "9" * 40)
        assert result.exit_code == 1
        assert "Pair not in snapshot" in result.output


class TestErrors:
    def test_unknown_chain(self, files):
        snapshot, config = files
        result = CliRunner().invoke(
            main,
            ["--snapshot", str(snapshot), "--config", str(config), "--chain", "mainnet", "base-price"],
        )
        assert result.exit_code == 1
        assert "CONFIG_UNKNOWN_CHAIN" in result.output

    def test_invalid_snapshot(self, files, tmp_path):
        _, config = files
        bad = tmp_path / "bad.json"
        bad.write_text("[]", encoding="utf-8")
        result = CliRunner().invoke(
            main,
            ["--snapshot", str(bad), "--config", str(config), "--chain", "testnet", "base-price"],
        )
        assert result.exit_code == 1
        assert "STORE_SNAPSHOT_INVALID" in result.output


class TestFactoryLookup:
    """--rpc resolves pairs through the factory over a mocked RPC transport."""

    @pytest.fixture
    def rpc_calls(self, monkeypatch):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            calls.append(body)
            data = body["params"][0]["data"]
            # only the volatile BOO/WFTM pair exists
            if "4" * 40 in data and "1" * 40 in data and data.endswith("0" * 64):
                result = "0x" + "0" * 24 + BOO_WFTM[2:]
            else:
                result = "0x" + "0" * 64
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

        def from_config(chain_key):
            return RPCProvider(chain_id=250, rpc_urls=["https://rpc.test"], transport=httpx.MockTransport(handler))

        monkeypatch.setattr(RPCProvider, "from_config", from_config)
        return calls

    def test_derive_through_factory(self, files, rpc_calls):
        result = invoke(files, "--rpc", "--json", "derive", BOO)

        assert result.exit_code == 0, result.output
        payload = last_json(result)
        assert Decimal(payload["derived_base_price"]) == Decimal("0.5")
        assert payload["source"]["pair_address"] == BOO_WFTM
        assert rpc_calls
        assert all(call["params"][0]["to"] == FACTORY for call in rpc_calls)

    def test_stable_variant_not_found(self, files, rpc_calls):
        result = invoke(files, "--rpc", "--json", "derive", BOO, "--stable")

        assert result.exit_code == 0, result.output
        assert Decimal(last_json(result)["derived_base_price"]) == Decimal("0")
        # WFTM and USDC asked for a stable pool, once for the price and once for the source
        assert len(rpc_calls) == 4

    def test_rpc_failure_exits(self, files, monkeypatch):
        def from_config(chain_key):
            return RPCProvider(
                chain_id=250,
                rpc_urls=["https://rpc.test"],
                transport=httpx.MockTransport(lambda request: httpx.Response(500)),
            )

        monkeypatch.setattr(RPCProvider, "from_config", from_config)
        result = invoke(files, "--rpc", "derive", BOO)

        assert result.exit_code == 1
        assert "INFRA_RPC_ERROR" in result.output

    def test_missing_factory(self, files, tmp_path):
        snapshot, _ = files
        config = tmp_path / "no_factory.yaml"
        config.write_text(
            PRICING_YAML.replace(f'  factory: "{FACTORY}"\n', ""),
            encoding="utf-8",
        )
        result = CliRunner().invoke(
            main,
            ["--snapshot", str(snapshot), "--config", str(config), "--chain", "testnet", "--rpc", "base-price"],
        )
        assert result.exit_code == 1
        assert "CONFIG_INVALID" in result.output
