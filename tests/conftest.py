"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from pathrisk.sim_models import GBMParams
from pathrisk.simulation import SimulationRequest


@pytest.fixture
def sample_log_returns():
    """Realistic daily log returns (~1.5% daily vol)."""
    rng = np.random.default_rng(42)
    return rng.normal(0.0003, 0.015, 200)


@pytest.fixture
def gbm_request():
    return SimulationRequest(
        initial_price=100.0,
        horizon=30,
        num_paths=200,
        seed=12345,
        use_antithetic=False,
        dt=1.0,
        model=GBMParams(mu=0.0002, sigma=0.015),
    )


def make_prices(returns, start=100.0):
    prices = [start]
    for r in returns:
        prices.append(prices[-1] * np.exp(r))
    return prices


@pytest.fixture
def price_history():
    """Three tickers: AAA (80 closes), BBB (60, correlated with AAA), CCC (40)."""
    rng = np.random.default_rng(7)
    common = rng.normal(0.0, 0.01, 79)
    aaa = make_prices(common + rng.normal(0.0005, 0.005, 79), start=50.0)
    bbb = make_prices(common[-59:] + rng.normal(0.0, 0.008, 59), start=120.0)
    ccc = make_prices(rng.normal(0.0002, 0.02, 39), start=10.0)
    return {"AAA": aaa, "BBB": bbb, "CCC": ccc}


@pytest.fixture
def price_csv(tmp_path, price_history):
    """Write ``price_history`` in bracket-header CSV layout, newest dates first."""
    lines = ["<Ticker>,<DTYYYYMMDD>,<Open>,<High>,<Low>,<Close>,<Volume>"]
    rows = []
    for ticker, closes in price_history.items():
        n = len(closes)
        for i, close in enumerate(closes):
            day = np.datetime64("2024-01-01") + (100 - n + i)
            date_str = str(day).replace("-", "")
            rows.append((date_str, ticker, close))
    for date_str, ticker, close in sorted(rows, reverse=True):
        lines.append(f"{ticker},{date_str},{close},{close},{close},{close},1000")
    path = tmp_path / "prices.csv"
    path.write_text("\n".join(lines) + "\n")
    return path
