"""
tests/unit/test_run_arb_cli.py - arb-bot command line.
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from core.constants import ExecutionMode
from strategy.jobs import run_arb
from strategy.scheduler import SessionStats


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_run_bot():
    stats = SessionStats(cycles=3, failed_cycles=1, opportunities=1, executions=1,
                         realized_profit=Decimal("0.08822"))
    # Root handlers and global log context stay untouched across tests
    with patch.object(run_arb, "setup_logging"), patch.object(run_arb, "set_global_context"):
        with patch.object(run_arb, "run_bot", new=AsyncMock(return_value=stats)) as mock:
            yield mock


class TestCli:
    def test_summary_output(self, runner, fake_run_bot, monkeypatch):
        monkeypatch.delenv("LIVE_MODE", raising=False)
        result = runner.invoke(run_arb.main, ["--cycles", "3"])

        assert result.exit_code == 0, result.output
        assert "ARBITRAGE SESSION SUMMARY" in result.output
        assert "Cycles: 3 (1 failed)" in result.output
        assert "Realized profit: 0.08822" in result.output

        config, max_cycles = fake_run_bot.await_args.args
        assert max_cycles == 3
        assert config.execution_mode == ExecutionMode.SIMULATED

    def test_flags_override_config(self, runner, fake_run_bot):
        result = runner.invoke(run_arb.main, ["--live", "--interval", "2.5"])

        assert result.exit_code == 0, result.output
        config, max_cycles = fake_run_bot.await_args.args
        assert config.execution_mode == ExecutionMode.LIVE
        assert config.poll_interval_seconds == 2.5
        assert max_cycles is None

    def test_invalid_config_exits(self, runner, fake_run_bot, monkeypatch):
        monkeypatch.setenv("START_USDC", "-5")
        result = runner.invoke(run_arb.main, [])

        assert result.exit_code == 2
        fake_run_bot.assert_not_called()
