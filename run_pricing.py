#!/usr/bin/env python3
"""
run_pricing.py - CLI entrypoint for evaluating pricing against a snapshot.

Usage:
    pricer --snapshot state.json derive 0x841fad6eae12c286d1fd18d1d525dffa75c7effe
    pricer --snapshot state.json --rpc derive 0x841fad6eae12c286d1fd18d1d525dffa75c7effe
    pricer --snapshot state.json base-price
    pricer --snapshot state.json volume <pair> 10 20
    pricer --snapshot state.json volume --raw <pair> 10000000 20000000000000000000
    pricer --snapshot state.json liquidity <pair>

Pairs are looked up among the snapshot's pairs, or with --rpc through the
chain's pair factory (endpoints from config/chains.yaml).
"""

import json
import sys
from decimal import Decimal
from pathlib import Path

import click

from chains.providers import RPCProvider
from core.constants import DEFAULT_CHAIN
from core.exceptions import ConfigError, PricerError, ValidationError
from core.format_money import format_price, format_usd
from core.logging import get_logger, set_global_context, setup_logging
from core.math import safe_decimal, safe_int
from core.models import Token
from data.store import InMemoryEntityStore
from discovery.registry import FactoryPairRegistry, PairRegistry, StaticPairRegistry
from pricing.config import PricingConfig, load_pricing_config
from pricing.oracle import PriceOracle

logger = get_logger("pricer.cli")


def _build_registry(
    ctx: click.Context,
    store: InMemoryEntityStore,
    config: PricingConfig,
    use_rpc: bool,
) -> PairRegistry:
    if not use_rpc:
        return StaticPairRegistry.from_pairs(store.pairs)

    if config.factory is None:
        raise ConfigError(
            f"No pair factory configured for {config.chain}",
            {"chain": config.chain},
        )

    provider = RPCProvider.from_config(config.chain)

    def _close_provider() -> None:
        logger.debug(
            "RPC stats",
            extra={"context": {"endpoints": provider.get_stats_summary()}},
        )
        provider.close()

    ctx.call_on_close(_close_provider)
    return FactoryPairRegistry(provider, config.factory)


def _load_oracle(
    ctx: click.Context,
    snapshot: Path,
    chain: str,
    config_path: Path | None,
    use_rpc: bool,
) -> PriceOracle:
    config = load_pricing_config(chain=chain, config_path=config_path)
    store = InMemoryEntityStore.load_snapshot(snapshot)
    registry = _build_registry(ctx, store, config, use_rpc)
    logger.info(
        "Snapshot loaded",
        extra={
            "context": {
                "snapshot": str(snapshot),
                "chain": chain,
                "tokens": len(store.tokens),
                "pairs": len(store.pairs),
                "registry": type(registry).__name__,
            }
        },
    )
    return PriceOracle(store, registry, config)


def _emit(ctx: click.Context, payload: dict, human: str) -> None:
    if ctx.obj["json_output"]:
        click.echo(json.dumps(payload, default=str))
    else:
        click.echo(human)


def _fail(error: PricerError) -> None:
    click.echo(str(error), err=True)
    sys.exit(1)


def _decimal_arg(value: str, name: str) -> Decimal:
    try:
        return safe_decimal(value)
    except ValidationError:
        raise click.BadParameter(f"not a decimal: {value!r}", param_hint=name)


def _amount_arg(value: str, name: str, token: Token, raw: bool) -> Decimal:
    """Swap amount, either scaled or raw on-chain units of token."""
    if not raw:
        return _decimal_arg(value, name)
    try:
        return token.amount_from_raw(safe_int(value))
    except ValidationError:
        raise click.BadParameter(f"not a raw integer amount: {value!r}", param_hint=name)


@click.group()
@click.option(
    "--snapshot",
    "-s",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON snapshot of indexed tokens, pairs and bundle",
)
@click.option(
    "--chain",
    "-c",
    default=DEFAULT_CHAIN,
    help="Chain key in pricing.yaml",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Pricing config file (default: config/pricing.yaml)",
)
@click.option(
    "--log-level",
    "-l",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON log format",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Print results as JSON",
)
@click.option(
    "--rpc",
    "use_rpc",
    is_flag=True,
    default=False,
    help="Look pairs up through the on-chain factory instead of the snapshot",
)
@click.pass_context
def main(
    ctx: click.Context,
    snapshot: Path,
    chain: str,
    config_path: Path | None,
    log_level: str,
    json_logs: bool,
    json_output: bool,
    use_rpc: bool,
) -> None:
    """
    PRICER - derived prices and tracked volume/liquidity.

    Evaluates the pricing functions against a snapshot of indexed state.
    """
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="pricer", chain=chain)

    try:
        oracle = _load_oracle(ctx, snapshot, chain, config_path, use_rpc)
    except PricerError as e:
        _fail(e)

    ctx.obj = {"oracle": oracle, "json_output": json_output}


@main.command()
@click.argument("token_address")
@click.option("--stable/--volatile", default=False, help="Pool variant to price through")
@click.pass_context
def derive(ctx: click.Context, token_address: str, stable: bool) -> None:
    """Derive TOKEN_ADDRESS's price in base currency."""
    oracle: PriceOracle = ctx.obj["oracle"]

    token = oracle.store.load_token(token_address)
    if token is None:
        click.echo(f"Token not in snapshot: {token_address}", err=True)
        sys.exit(1)

    try:
        price = oracle.derive_price_in_base(token, stable)
        source = None if token.address == oracle.config.base_token else oracle.price_source(token, stable)
    except PricerError as e:
        _fail(e)

    payload = {
        "token": token.address,
        "stable": stable,
        "derived_base_price": str(price),
        "source": source.to_dict() if source else None,
    }
    human = f"{token.symbol or token.address}: {format_price(price)}"
    if source:
        human += f" (via {source.pair_address})"
    _emit(ctx, payload, human)


@main.command("base-price")
@click.pass_context
def base_price(ctx: click.Context) -> None:
    """Base currency USD price from the reference pair."""
    oracle: PriceOracle = ctx.obj["oracle"]
    price = oracle.base_price_usd()
    _emit(
        ctx,
        {"reference_pair": oracle.config.usd_reference_pair, "base_price_usd": str(price)},
        format_usd(price),
    )


def _pair_and_tokens(oracle: PriceOracle, pair_address: str):
    pair = oracle.store.load_pair(pair_address)
    if pair is None:
        click.echo(f"Pair not in snapshot: {pair_address}", err=True)
        sys.exit(1)

    token0 = oracle.store.load_token(pair.token0)
    token1 = oracle.store.load_token(pair.token1)
    if token0 is None or token1 is None:
        click.echo(f"Pair tokens not in snapshot: {pair_address}", err=True)
        sys.exit(1)
    return pair, token0, token1


@main.command()
@click.argument("pair_address")
@click.argument("amount0")
@click.argument("amount1")
@click.option("--raw", is_flag=True, default=False, help="Amounts are raw on-chain integers")
@click.pass_context
def volume(ctx: click.Context, pair_address: str, amount0: str, amount1: str, raw: bool) -> None:
    """Tracked USD volume of a swap of AMOUNT0/AMOUNT1 on PAIR_ADDRESS."""
    oracle: PriceOracle = ctx.obj["oracle"]
    pair, token0, token1 = _pair_and_tokens(oracle, pair_address)

    tracked = oracle.tracked_volume_usd(
        _amount_arg(amount0, "AMOUNT0", token0, raw), token0,
        _amount_arg(amount1, "AMOUNT1", token1, raw), token1,
        pair,
    )
    _emit(ctx, {"pair": pair.address, "tracked_volume_usd": str(tracked)}, format_usd(tracked))


@main.command()
@click.argument("pair_address")
@click.pass_context
def liquidity(ctx: click.Context, pair_address: str) -> None:
    """Tracked USD liquidity of PAIR_ADDRESS's current reserves."""
    oracle: PriceOracle = ctx.obj["oracle"]
    pair, token0, token1 = _pair_and_tokens(oracle, pair_address)

    tracked = oracle.tracked_liquidity_usd(pair.reserve0, token0, pair.reserve1, token1)
    _emit(ctx, {"pair": pair.address, "tracked_liquidity_usd": str(tracked)}, format_usd(tracked))


if __name__ == "__main__":
    main()
