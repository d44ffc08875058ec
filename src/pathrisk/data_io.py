"""Historical price loading.

Reads daily OHLCV exports with bracketed headers
(``<Ticker>,<DTYYYYMMDD>,<Open>,<High>,<Low>,<Close>,<Volume>``) into a
DataFrame and derives the close series and log returns the engine consumes.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from pathrisk.errors import DataFormatError, InsufficientDataError

logger = logging.getLogger(__name__)

COLUMN_MAP = {
    "<Ticker>": "ticker",
    "<DTYYYYMMDD>": "date",
    "<Open>": "open",
    "<High>": "high",
    "<Low>": "low",
    "<Close>": "close",
    "<Volume>": "volume",
}


def load_all_records(path: str | Path) -> pd.DataFrame:
    """Load every record in the file, sorted by date (stable within a date)."""
    df = pd.read_csv(path, dtype={"<Ticker>": str, "<DTYYYYMMDD>": str})

    missing = set(COLUMN_MAP) - set(df.columns)
    if missing:
        raise DataFormatError(f"Missing columns in {path}: {sorted(missing)}")

    df = df.rename(columns=COLUMN_MAP)[list(COLUMN_MAP.values())]
    try:
        df["date"] = pd.to_datetime(df["date"], format="%Y%m%d")
    except ValueError as e:
        raise DataFormatError(f"Unparseable <DTYYYYMMDD> value in {path}: {e}") from e
    df = df.sort_values("date", kind="stable").reset_index(drop=True)

    logger.info("Loaded %d records for %d tickers from %s", len(df), df["ticker"].nunique(), path)
    return df


def list_tickers(df: pd.DataFrame) -> list[str]:
    return sorted(df["ticker"].unique().tolist())


def ticker_closes(df: pd.DataFrame, ticker: str) -> list[float]:
    """Close prices for ``ticker``, oldest first."""
    return df.loc[df["ticker"] == ticker, "close"].astype(float).tolist()


def price_history_map(df: pd.DataFrame) -> dict[str, list[float]]:
    """Ticker -> close prices, oldest first."""
    return {ticker: group["close"].astype(float).tolist() for ticker, group in df.groupby("ticker")}


def ticker_log_returns(df: pd.DataFrame, ticker: str) -> np.ndarray:
    """Log returns between consecutive closes, skipping pairs with a non-positive close."""
    closes = np.asarray(ticker_closes(df, ticker), dtype=float)
    if closes.size < 2:
        return np.empty(0)
    prev, curr = closes[:-1], closes[1:]
    valid = (prev > 0) & (curr > 0)
    return np.log(curr[valid] / prev[valid])


def describe_ticker(df: pd.DataFrame, ticker: str) -> dict:
    """Date range, record count, last close and return count for ``ticker``."""
    rows = df[df["ticker"] == ticker]
    if rows.empty:
        return {"ticker": ticker, "record_count": 0}

    return {
        "ticker": ticker,
        "start_date": rows["date"].iloc[0].date().isoformat(),
        "end_date": rows["date"].iloc[-1].date().isoformat(),
        "record_count": len(rows),
        "last_close": float(rows["close"].iloc[-1]),
        "log_return_count": int(ticker_log_returns(df, ticker).size),
    }


def estimate_parameters(log_returns: np.ndarray) -> tuple[float, float]:
    """Sample mean and standard deviation (``ddof=1``) of per-step log returns.

    Raises:
        InsufficientDataError: With fewer than 2 returns.
    """
    log_returns = np.asarray(log_returns, dtype=float)
    if log_returns.size < 2:
        raise InsufficientDataError(
            "Not enough data to estimate parameters. Need at least 2 log returns."
        )
    return float(np.mean(log_returns)), float(np.std(log_returns, ddof=1))
