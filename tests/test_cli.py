"""CLI tests using click's CliRunner."""

import json

import pytest
from click.testing import CliRunner

from pathrisk.__main__ import cli


def _without_timing(output):
    return [line for line in output.splitlines() if not line.startswith("Time:")]


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("PATHRISK_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("PATHRISK_SIMULATION_MAX_WORKERS", "1")
    return CliRunner()


@pytest.fixture
def config_path(tmp_path, runner):
    path = tmp_path / "sim.json"
    result = runner.invoke(cli, ["init-config", str(path)])
    assert result.exit_code == 0, result.output
    return path


class TestInitConfig:
    def test_writes_gbm_config(self, config_path):
        data = json.loads(config_path.read_text())
        assert data["model_type"] == "GBM"
        assert data["gbm_params"] == {"mu": 0.0002, "sigma": 0.015}


class TestSimulate:
    def test_gbm_run_and_export(self, runner, config_path, tmp_path):
        export = tmp_path / "summary.csv"
        result = runner.invoke(cli, ["simulate", "-c", str(config_path), "--export", str(export)])
        assert result.exit_code == 0, result.output
        assert "VaR95" in result.output
        assert export.read_text().startswith("Metric,Value\n")

    def test_same_output_twice(self, runner, config_path):
        first = runner.invoke(cli, ["simulate", "-c", str(config_path)])
        second = runner.invoke(cli, ["simulate", "-c", str(config_path)])
        assert _without_timing(first.output) == _without_timing(second.output)

    def test_bootstrap_requires_data(self, runner, tmp_path, config_path):
        data = json.loads(config_path.read_text())
        data["model_type"] = "Bootstrap"
        config_path.write_text(json.dumps(data))
        result = runner.invoke(cli, ["simulate", "-c", str(config_path)])
        assert result.exit_code != 0

    def test_bootstrap_from_csv(self, runner, config_path, price_csv):
        data = json.loads(config_path.read_text())
        data["model_type"] = "Bootstrap"
        config_path.write_text(json.dumps(data))
        result = runner.invoke(
            cli, ["simulate", "-c", str(config_path), "-d", str(price_csv), "-t", "AAA"]
        )
        assert result.exit_code == 0, result.output
        assert "Model:   Bootstrap" in result.output

    def test_estimate_from_history(self, runner, config_path, price_csv):
        result = runner.invoke(
            cli, ["simulate", "-c", str(config_path), "-d", str(price_csv), "-t", "BBB", "--estimate"]
        )
        assert result.exit_code == 0, result.output
        assert "Estimated mu=" in result.output

    def test_invalid_config_reports_error(self, runner, config_path):
        data = json.loads(config_path.read_text())
        data["model_type"] = "Heston"
        config_path.write_text(json.dumps(data))
        result = runner.invoke(cli, ["simulate", "-c", str(config_path)])
        assert result.exit_code == 1
        assert "Unknown model type: Heston" in result.output


class TestPortfolio:
    def test_run(self, runner, price_csv):
        result = runner.invoke(cli, [
            "portfolio", "-d", str(price_csv), "-a", "AAA:60", "-a", "BBB:40",
            "--capital", "5000", "--paths", "200", "--horizon", "10",
        ])
        assert result.exit_code == 0, result.output
        assert "AAA:" in result.output
        assert "Model:   Portfolio" in result.output

    def test_unknown_ticker_fails(self, runner, price_csv):
        result = runner.invoke(cli, [
            "portfolio", "-d", str(price_csv), "-a", "AAA:50", "-a", "ZZZ:50",
        ])
        assert result.exit_code == 1
        assert "ZZZ" in result.output

    def test_bad_asset_spec(self, runner, price_csv):
        result = runner.invoke(cli, ["portfolio", "-d", str(price_csv), "-a", "AAA"])
        assert result.exit_code == 2


class TestInfo:
    def test_lists_tickers(self, runner, price_csv):
        result = runner.invoke(cli, ["info", "-d", str(price_csv)])
        assert result.output.split() == ["AAA", "BBB", "CCC"]

    def test_describe(self, runner, price_csv):
        result = runner.invoke(cli, ["info", "-d", str(price_csv), "-t", "CCC"])
        assert "Record Count: 40" in result.output
        assert "Log Returns Computed: 39" in result.output

    def test_malformed_file_reports_error(self, runner, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("ticker,date,close\nAAA,20240101,1.0\n")
        result = runner.invoke(cli, ["info", "-d", str(path)])
        assert result.exit_code == 1
        assert "Missing columns" in result.output
        assert not isinstance(result.exception, ValueError)
