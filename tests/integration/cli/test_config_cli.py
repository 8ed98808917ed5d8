"""
Integration tests for config CLI commands.
"""
import argparse

from cargo_scanner.adapters.primary.cli.config_cli import (
    set_params_command,
    set_thresholds_command,
    show_config_command,
)
from cargo_scanner.configuration.config import get_config


def _thresholds_args(low=None, high=None, clear=False):
    return argparse.Namespace(low=low, high=high, clear=clear)


class TestThresholdsCommand:
    """Integration tests for config thresholds"""

    def test_set_and_show_thresholds(self, capsys):
        assert set_thresholds_command(_thresholds_args(1000.0, 5000.0)) == 0
        assert "Profit thresholds set to 1,000 / 5,000" in capsys.readouterr().out

        assert set_thresholds_command(_thresholds_args()) == 0
        assert "RED < 1,000 <= YELLOW < 5,000 <= GREEN" in capsys.readouterr().out

    def test_inverted_thresholds_are_rejected(self, capsys):
        assert set_thresholds_command(_thresholds_args(5000.0, 1000.0)) == 1
        assert "❌ Error" in capsys.readouterr().out
        assert get_config().profit_thresholds is None

    def test_clear_thresholds(self, capsys):
        set_thresholds_command(_thresholds_args(1000.0, 5000.0))

        assert set_thresholds_command(_thresholds_args(clear=True)) == 0
        assert get_config().profit_thresholds is None

    def test_thresholds_survive_reload(self):
        set_thresholds_command(_thresholds_args(100.0, 200.0))
        config = get_config()

        reloaded = type(config)(config.config_path)

        assert reloaded.profit_thresholds.low == 100.0
        assert reloaded.profit_thresholds.high == 200.0


class TestParamsCommand:
    """Integration tests for config params and show"""

    def test_save_params_then_show(self, capsys):
        args = argparse.Namespace(risk=0.2, crew_hourly=15.0, crew_size=3, minutes=45.0)

        assert set_params_command(args) == 0
        assert "risk 20%, crew 3 x 15/h, 45 min" in capsys.readouterr().out

        assert show_config_command(argparse.Namespace()) == 0
        output = capsys.readouterr().out
        assert "Profitability params: risk 20%" in output
        assert "Profit thresholds: not set" in output
        assert "Home system: Stanton" in output

    def test_risk_above_cap_is_rejected(self, capsys):
        args = argparse.Namespace(risk=0.5, crew_hourly=15.0, crew_size=3, minutes=45.0)

        assert set_params_command(args) == 1
        assert "risk_pct must be within" in capsys.readouterr().out
