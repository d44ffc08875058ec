"""Correlated multi-asset portfolio simulation.

Builds a PortfolioConfig from (ticker, weight %) allocations and per-ticker
close histories, then simulates portfolio-value paths where every step mixes
independent shocks through the Cholesky factor of the assets' empirical
correlation matrix:

  ε_t = L·z_t,  S_j(t+1) = S_j(t)·exp((μ_j − ½σ_j²)dt + σ_j√dt·ε_{j,t})
  V(t) = Σ_j shares_j·S_j(t)
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np

from pathrisk.errors import CorrelationError, InsufficientDataError, InvalidRequestError
from pathrisk.rng import SEED_MODULUS, RandomStream, derive_seed
from pathrisk.simulation import DEFAULT_CHUNK_SIZE, is_integer, run_chunked
from pathrisk.statistics import SummaryStatistics, summarize_ensemble

logger = logging.getLogger(__name__)

MIN_HISTORY_RECORDS = 30
PORTFOLIO_LABEL = "Portfolio"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PortfolioAsset:
    ticker: str
    shares: float
    mu: float
    sigma: float
    last_price: float


@dataclass(frozen=True)
class PortfolioConfig:
    assets: tuple[PortfolioAsset, ...]
    correlation_cholesky: np.ndarray  # lower triangular, (N, N)
    init_value: float


@dataclass(frozen=True)
class PortfolioResult:
    config: PortfolioConfig
    ensemble: np.ndarray  # (num_paths, horizon + 1) portfolio values
    stats: SummaryStatistics
    elapsed_ms: float


# ---------------------------------------------------------------------------
# Numerical helpers
# ---------------------------------------------------------------------------


def log_returns(prices: Sequence[float]) -> np.ndarray:
    """Consecutive log returns ``ln(p[t] / p[t-1])``."""
    prices = np.asarray(prices, dtype=float)
    return np.diff(np.log(prices))


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson correlation of two equal-length series; 0.0 if either is constant."""
    dx = np.asarray(x, dtype=float) - np.mean(x)
    dy = np.asarray(y, dtype=float) - np.mean(y)
    denom_x = float(np.sum(dx * dx))
    denom_y = float(np.sum(dy * dy))
    if denom_x == 0.0 or denom_y == 0.0:
        return 0.0
    return float(np.sum(dx * dy) / math.sqrt(denom_x * denom_y))


def correlation_matrix(series: Sequence[np.ndarray]) -> np.ndarray:
    """Symmetric pairwise Pearson matrix with a unit diagonal."""
    n = len(series)
    corr = np.eye(n)
    for i in range(n):
        for j in range(i + 1, n):
            c = pearson_correlation(series[i], series[j])
            corr[i, j] = c
            corr[j, i] = c
    return corr


def cholesky_factor(matrix: np.ndarray) -> np.ndarray:
    """Lower-triangular ``L`` with ``L @ L.T == matrix``.

    Raises:
        CorrelationError: If ``matrix`` is not symmetric positive definite.
    """
    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise CorrelationError(f"Correlation matrix must be square, got shape {matrix.shape}")
    if not np.allclose(matrix, matrix.T):
        raise CorrelationError("Correlation matrix is not symmetric")
    try:
        return np.linalg.cholesky(matrix)
    except np.linalg.LinAlgError as e:
        raise CorrelationError(
            "Correlation matrix is not positive definite. "
            "Check for duplicate assets or insufficient data."
        ) from e


# ---------------------------------------------------------------------------
# Correlation builder
# ---------------------------------------------------------------------------


def build_portfolio_config(
    allocations: Sequence[tuple[str, float]],
    total_capital: float,
    price_history: Mapping[str, Sequence[float]],
    min_records: int = MIN_HISTORY_RECORDS,
) -> PortfolioConfig:
    """Estimate per-asset dynamics and the shock-mixing operator.

    Args:
        allocations: ``(ticker, weight_pct)`` pairs in portfolio order.
        total_capital: Capital to allocate; becomes the portfolio's init value.
        price_history: Ticker -> close prices, oldest first.
        min_records: Minimum close records required per ticker.

    Returns:
        PortfolioConfig with tail-aligned moment estimates and Cholesky factor.

    Raises:
        InvalidRequestError: Empty allocation, non-positive capital or weight.
        InsufficientDataError: A ticker is missing or has < ``min_records`` closes.
        CorrelationError: The correlation matrix does not factorize.
    """
    if not allocations:
        raise InvalidRequestError("Portfolio has no assets")
    if not math.isfinite(total_capital) or total_capital <= 0:
        raise InvalidRequestError("Total capital must be positive")

    # --- Minimum aligned return length across requested tickers ---------
    min_len = None
    for ticker, weight_pct in allocations:
        if not math.isfinite(weight_pct) or weight_pct <= 0:
            raise InvalidRequestError(f"Ticker {ticker} weight must be positive")
        records = price_history.get(ticker)
        if records is None:
            raise InsufficientDataError(f"Ticker {ticker} not found in loaded data")
        if len(records) < min_records:
            raise InsufficientDataError(
                f"Ticker {ticker} has insufficient data (<{min_records} records)"
            )
        n_returns = len(records) - 1
        min_len = n_returns if min_len is None else min(min_len, n_returns)

    if min_len < 2:
        raise InsufficientDataError("At least 2 aligned log returns per ticker are required")

    total_weight = sum(w for _, w in allocations)
    if not math.isclose(total_weight, 100.0):
        logger.warning("Portfolio weights sum to %.2f%%, not 100%%", total_weight)

    # --- Per-asset estimates over the common window --------------------
    assets: list[PortfolioAsset] = []
    aligned: list[np.ndarray] = []

    for ticker, weight_pct in allocations:
        records = np.asarray(price_history[ticker], dtype=float)
        if np.any(records <= 0) or not np.all(np.isfinite(records)):
            raise InvalidRequestError(f"Ticker {ticker} has non-positive or non-finite closes")

        returns = log_returns(records)
        returns = returns[len(returns) - min_len:]
        last_price = float(records[-1])

        assets.append(PortfolioAsset(
            ticker=ticker,
            shares=total_capital * (weight_pct / 100.0) / last_price,
            mu=float(np.mean(returns)),
            sigma=float(np.std(returns, ddof=1)),
            last_price=last_price,
        ))
        aligned.append(returns)

    corr = correlation_matrix(aligned)
    chol = cholesky_factor(corr)

    logger.info(
        "Built portfolio of %d assets over %d aligned returns",
        len(assets), min_len,
    )
    return PortfolioConfig(assets=tuple(assets), correlation_cholesky=chol, init_value=float(total_capital))


# ---------------------------------------------------------------------------
# Portfolio orchestrator
# ---------------------------------------------------------------------------


def generate_portfolio_path(
    config: PortfolioConfig,
    steps: int,
    dt: float,
    rng: RandomStream,
) -> np.ndarray:
    """Simulate one portfolio-value path of ``steps + 1`` points."""
    mu = np.array([a.mu for a in config.assets])
    sigma = np.array([a.sigma for a in config.assets])
    shares = np.array([a.shares for a in config.assets])
    last_price = np.array([a.last_price for a in config.assets])

    drift = (mu - 0.5 * sigma**2) * dt
    diffusion = sigma * np.sqrt(dt)

    z = rng.standard_normal((steps, len(config.assets)))
    eps = z @ config.correlation_cholesky.T  # row t = L·z_t

    cumulative = np.cumsum(drift + diffusion * eps, axis=0)
    prices = np.empty((steps + 1, len(config.assets)))
    prices[0] = last_price
    prices[1:] = last_price * np.exp(cumulative)

    return prices @ shares


def _generate_portfolio_chunk(
    config: PortfolioConfig,
    steps: int,
    dt: float,
    seed: int,
    use_antithetic: bool,
    start: int,
    stop: int,
) -> tuple[int, np.ndarray]:
    """Picklable worker for ProcessPoolExecutor."""
    values = np.empty((stop - start, steps + 1))
    for row, i in enumerate(range(start, stop)):
        rng = RandomStream(derive_seed(seed, i, use_antithetic), use_antithetic and i % 2 == 1)
        values[row] = generate_portfolio_path(config, steps, dt, rng)
    return start, values


def simulate_portfolio(
    config: PortfolioConfig,
    horizon: int,
    num_paths: int,
    seed: int,
    dt: float = 1.0,
    use_antithetic: bool = False,
    max_workers: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> np.ndarray:
    """Generate ``num_paths`` portfolio-value paths.

    Seeding, ordering and parallelism follow ``simulate_ensemble``.

    Returns:
        Array of shape ``(num_paths, horizon + 1)``.
    """
    if not is_integer(horizon) or horizon < 1:
        raise InvalidRequestError("Horizon must be greater than 0")
    if not is_integer(num_paths) or num_paths < 1:
        raise InvalidRequestError("Number of paths must be greater than 0")
    if not math.isfinite(dt) or dt <= 0:
        raise InvalidRequestError("dt must be positive")
    if not is_integer(seed) or not 0 <= seed < SEED_MODULUS:
        raise InvalidRequestError(f"Seed must be in [0, 2**64), got {seed}")
    if not config.assets:
        raise InvalidRequestError("Portfolio has no assets")

    return run_chunked(
        lambda start, stop: (config, horizon, dt, seed, use_antithetic, start, stop),
        _generate_portfolio_chunk,
        num_paths=num_paths,
        width=horizon + 1,
        max_workers=max_workers,
        chunk_size=chunk_size,
    )


def run_portfolio_simulation(
    config: PortfolioConfig,
    horizon: int,
    num_paths: int,
    seed: int,
    dt: float = 1.0,
    use_antithetic: bool = False,
    max_workers: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> PortfolioResult:
    """Simulate the portfolio and summarize terminal values against ``init_value``."""
    logger.info(
        "Running portfolio simulation: %d assets, %d paths x %d steps (seed=%d)",
        len(config.assets), num_paths, horizon, seed,
    )

    started = time.perf_counter()
    ensemble = simulate_portfolio(
        config, horizon, num_paths, seed, dt, use_antithetic, max_workers, chunk_size
    )
    stats = summarize_ensemble(ensemble, config.init_value, PORTFOLIO_LABEL)
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    logger.info("Portfolio simulation complete in %.1f ms (VaR95=%.4f)", elapsed_ms, stats.var95)
    return PortfolioResult(config=config, ensemble=ensemble, stats=stats, elapsed_ms=elapsed_ms)
