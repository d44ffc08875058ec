"""Tests for price-file loading and parameter estimation."""

import numpy as np
import pytest

from pathrisk.data_io import (
    describe_ticker,
    estimate_parameters,
    list_tickers,
    load_all_records,
    price_history_map,
    ticker_closes,
    ticker_log_returns,
)
from pathrisk.errors import DataFormatError, InsufficientDataError


class TestLoadRecords:
    def test_columns_and_sorting(self, price_csv):
        df = load_all_records(price_csv)
        assert list(df.columns) == ["ticker", "date", "open", "high", "low", "close", "volume"]
        assert df["date"].is_monotonic_increasing

    def test_tickers(self, price_csv):
        assert list_tickers(load_all_records(price_csv)) == ["AAA", "BBB", "CCC"]

    def test_closes_oldest_first(self, price_csv, price_history):
        df = load_all_records(price_csv)
        np.testing.assert_allclose(ticker_closes(df, "AAA"), price_history["AAA"])

    def test_history_map(self, price_csv, price_history):
        history = price_history_map(load_all_records(price_csv))
        assert set(history) == {"AAA", "BBB", "CCC"}
        assert len(history["CCC"]) == len(price_history["CCC"])

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("ticker,date,close\nAAA,20240101,1.0\n")
        with pytest.raises(DataFormatError, match="Missing columns"):
            load_all_records(path)

    def test_bad_date(self, tmp_path):
        path = tmp_path / "bad_date.csv"
        path.write_text(
            "<Ticker>,<DTYYYYMMDD>,<Open>,<High>,<Low>,<Close>,<Volume>\n"
            "AAA,2024-01-01,1,1,1,1.0,100\n"
        )
        with pytest.raises(DataFormatError, match="DTYYYYMMDD"):
            load_all_records(path)


class TestLogReturns:
    def test_matches_prices(self, price_csv, price_history):
        df = load_all_records(price_csv)
        expected = np.diff(np.log(price_history["BBB"]))
        np.testing.assert_allclose(ticker_log_returns(df, "BBB"), expected, atol=1e-12)

    def test_skips_non_positive_closes(self, tmp_path):
        path = tmp_path / "p.csv"
        path.write_text(
            "<Ticker>,<DTYYYYMMDD>,<Open>,<High>,<Low>,<Close>,<Volume>\n"
            "X,20240101,1,1,1,10.0,1\n"
            "X,20240102,1,1,1,0.0,1\n"
            "X,20240103,1,1,1,11.0,1\n"
            "X,20240104,1,1,1,12.1,1\n"
        )
        returns = ticker_log_returns(load_all_records(path), "X")
        np.testing.assert_allclose(returns, [np.log(1.1)])

    def test_unknown_ticker_empty(self, price_csv):
        assert ticker_log_returns(load_all_records(price_csv), "ZZZ").size == 0


class TestDescribeTicker:
    def test_summary(self, price_csv, price_history):
        summary = describe_ticker(load_all_records(price_csv), "CCC")
        assert summary["record_count"] == 40
        assert summary["log_return_count"] == 39
        assert summary["last_close"] == pytest.approx(price_history["CCC"][-1])
        assert summary["start_date"] < summary["end_date"]

    def test_unknown(self, price_csv):
        assert describe_ticker(load_all_records(price_csv), "ZZZ")["record_count"] == 0


class TestEstimateParameters:
    def test_sample_moments(self, sample_log_returns):
        mu, sigma = estimate_parameters(sample_log_returns)
        assert mu == pytest.approx(np.mean(sample_log_returns))
        assert sigma == pytest.approx(np.std(sample_log_returns, ddof=1))

    def test_two_points_enough(self):
        mu, sigma = estimate_parameters(np.array([0.01, 0.03]))
        assert mu == pytest.approx(0.02)
        assert sigma == pytest.approx(np.sqrt(2e-4))

    @pytest.mark.parametrize("returns", [[], [0.01]])
    def test_too_few_points(self, returns):
        with pytest.raises(InsufficientDataError):
            estimate_parameters(np.array(returns))
