#!/usr/bin/env python3
"""
strategy/jobs/run_arb.py - CLI entrypoint for the polling arbitrage bot.

Usage:
    python -m strategy.jobs.run_arb
    python -m strategy.jobs.run_arb --interval 30 --cycles 100 --no-json-logs
    arb-bot --live --log-file arb-bot.jsonl
"""

import asyncio
import signal
import sys
from pathlib import Path

import click

from chains.providers import ProviderRegistry
from core.constants import ExecutionMode
from core.exceptions import ConfigError
from core.logging import get_logger, set_global_context, setup_logging
from dex.adapters.uniswap_v3 import UniswapV3PoolReader, fetch_pool_pair
from strategy.config import ArbConfig, load_arb_config
from strategy.scheduler import PollingScheduler, SessionStats

logger = get_logger("arb.bot")


async def run_bot(config: ArbConfig, max_cycles: int | None) -> SessionStats:
    """Wire providers, readers and the scheduler, then poll until stopped."""
    registry = ProviderRegistry()
    venue_a, venue_b = config.venue_a, config.venue_b

    reader_a = UniswapV3PoolReader(
        registry.get_or_register(venue_a.chain, config.chains[venue_a.chain].rpc_urls)
    )
    reader_b = UniswapV3PoolReader(
        registry.get_or_register(venue_b.chain, config.chains[venue_b.chain].rpc_urls)
    )

    async def quote_source():
        return await fetch_pool_pair(
            reader_a, venue_a.pool_address, reader_b, venue_b.pool_address
        )

    scheduler = PollingScheduler(config, quote_source)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.stop)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass

    try:
        return await scheduler.run(max_cycles=max_cycles)
    finally:
        await registry.close_all()


@click.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Arbitrage YAML config (default: bundled config/arbitrage.yaml)",
)
@click.option(
    "--interval",
    "-i",
    default=None,
    type=float,
    help="Polling interval in seconds (default: from config)",
)
@click.option(
    "--cycles",
    "-n",
    default=None,
    type=int,
    help="Stop after this many cycles (default: run until interrupted)",
)
@click.option(
    "--live/--dry-run",
    default=None,
    help="Override LIVE_MODE: execute for real or simulate every leg",
)
@click.option(
    "--log-level",
    "-l",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON log format on the console",
)
@click.option(
    "--log-file",
    default=None,
    help="Also write JSON logs to this file",
)
def main(
    config_path: Path | None,
    interval: float | None,
    cycles: int | None,
    live: bool | None,
    log_level: str,
    json_logs: bool,
    log_file: str | None,
) -> None:
    """
    Cross-chain USDC/USDT arbitrage bot.

    Polls both pools, simulates both round-trip directions and executes the
    first profitable one.
    """
    setup_logging(level=log_level, json_output=json_logs, log_file=log_file)

    try:
        config = load_arb_config(config_path)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    overrides = {}
    if interval is not None:
        overrides["poll_interval_seconds"] = interval
    if live is not None:
        overrides["execution_mode"] = ExecutionMode.LIVE if live else ExecutionMode.SIMULATED
    if overrides:
        config = config.with_overrides(**overrides)

    set_global_context(service="arb-bot", mode=config.execution_mode.value)

    logger.info(
        "Starting arbitrage bot",
        extra={
            "context": {
                "venue_a": f"{config.venue_a.name}@{config.venue_a.chain}",
                "venue_b": f"{config.venue_b.name}@{config.venue_b.chain}",
                "start_amount": str(config.start_amount),
                "interval_seconds": config.poll_interval_seconds,
            }
        },
    )

    try:
        stats = asyncio.run(run_bot(config, cycles))
    except KeyboardInterrupt:
        logger.info("Arbitrage bot interrupted")
        return

    summary = stats.get_summary()
    click.echo("\n" + "=" * 60)
    click.echo("ARBITRAGE SESSION SUMMARY")
    click.echo("=" * 60)
    click.echo(f"Duration: {summary['elapsed_seconds']} seconds")
    click.echo(f"Mode: {config.execution_mode.value}")
    click.echo(f"Cycles: {summary['cycles']} ({summary['failed_cycles']} failed)")
    click.echo(f"Opportunities: {summary['opportunities']}")
    click.echo(f"Executions: {summary['executions']}")
    click.echo(f"Realized profit: {summary['realized_profit']}")
    click.echo("=" * 60)


if __name__ == "__main__":
    main()
