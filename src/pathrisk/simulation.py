"""Monte Carlo ensemble orchestrator.

Validates a SimulationRequest, fans path generation out over a process pool
in contiguous index chunks, and reassembles the ensemble in path order.
Path ``i`` always draws from its own stream seeded by
``derive_seed(seed, i, use_antithetic)``, so the ensemble does not depend on
how many workers run it.
"""

import logging
import math
import numbers
import os
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Callable

import numpy as np

from pathrisk.errors import InsufficientDataError, InvalidRequestError
from pathrisk.rng import SEED_MODULUS, RandomStream, derive_seed
from pathrisk.sim_models import (
    MODEL_TYPES,
    BootstrapParams,
    GARCHParams,
    GBMParams,
    JumpDiffusionParams,
    MeanReversionParams,
    ModelSpec,
)
from pathrisk.sim_models.bootstrap import generate_bootstrap_path
from pathrisk.sim_models.garch import generate_garch_path
from pathrisk.sim_models.gbm import generate_gbm_path
from pathrisk.sim_models.mean_reversion import generate_mean_reversion_path
from pathrisk.sim_models.merton import generate_jump_diffusion_path
from pathrisk.statistics import SummaryStatistics, summarize_ensemble

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_CHUNK_SIZE = 256


# ---------------------------------------------------------------------------
# Request / result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SimulationRequest:
    initial_price: float
    horizon: int
    num_paths: int
    seed: int
    use_antithetic: bool
    dt: float
    model: ModelSpec

    def __post_init__(self):
        validate_request(self)


@dataclass(frozen=True)
class SimulationResult:
    request: SimulationRequest
    ensemble: np.ndarray  # (num_paths, horizon + 1)
    stats: SummaryStatistics
    elapsed_ms: float


def is_integer(value) -> bool:
    """True for ints and numpy integers; bools and integral floats are rejected."""
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def validate_request(request: SimulationRequest) -> None:
    """Reject a request before any simulation work starts.

    Raises:
        InvalidRequestError: On any out-of-range field or unknown model.
    """
    if not isinstance(request.model, MODEL_TYPES):
        raise InvalidRequestError(f"Unknown model type: {type(request.model).__name__}")
    if not math.isfinite(request.initial_price) or request.initial_price <= 0:
        raise InvalidRequestError("Initial price must be positive")
    if not math.isfinite(request.dt) or request.dt <= 0:
        raise InvalidRequestError("dt must be positive")
    if not is_integer(request.horizon) or request.horizon < 1:
        raise InvalidRequestError("Horizon must be greater than 0")
    if not is_integer(request.num_paths) or request.num_paths < 1:
        raise InvalidRequestError("Number of paths must be greater than 0")
    if not is_integer(request.seed) or not 0 <= request.seed < SEED_MODULUS:
        raise InvalidRequestError(f"Seed must be in [0, 2**64), got {request.seed}")


# ---------------------------------------------------------------------------
# Single path
# ---------------------------------------------------------------------------


def generate_path(
    request: SimulationRequest,
    index: int,
    historical_returns: np.ndarray | None = None,
) -> np.ndarray:
    """Generate path ``index`` of the request's ensemble."""
    antithetic = request.use_antithetic and index % 2 == 1
    rng = RandomStream(derive_seed(request.seed, index, request.use_antithetic), antithetic)

    model = request.model
    p0, steps, dt = request.initial_price, request.horizon, request.dt

    if isinstance(model, GBMParams):
        return generate_gbm_path(p0, steps, dt, model.mu, model.sigma, rng)
    elif isinstance(model, BootstrapParams):
        return generate_bootstrap_path(
            p0, steps, _empty_if_none(historical_returns), rng
        )
    elif isinstance(model, MeanReversionParams):
        return generate_mean_reversion_path(
            p0, steps, dt, model.theta, model.mu_long_term, model.sigma, rng
        )
    elif isinstance(model, JumpDiffusionParams):
        return generate_jump_diffusion_path(
            p0, steps, dt, model.mu, model.sigma, model.lam, model.mu_j, model.sigma_j, rng
        )
    elif isinstance(model, GARCHParams):
        return generate_garch_path(
            p0, steps, dt, model.omega, model.alpha, model.beta, rng
        )
    raise InvalidRequestError(f"Unknown model type: {type(model).__name__}")


def _empty_if_none(values: np.ndarray | None) -> np.ndarray:
    if values is None:
        return np.empty(0)
    return np.asarray(values, dtype=float)


def _generate_chunk(
    request: SimulationRequest,
    start: int,
    stop: int,
    historical_returns: np.ndarray | None,
) -> tuple[int, np.ndarray]:
    """Picklable worker for ProcessPoolExecutor.

    Returns:
        (start index, array of paths ``start..stop-1``)
    """
    paths = np.empty((stop - start, request.horizon + 1))
    for row, i in enumerate(range(start, stop)):
        paths[row] = generate_path(request, i, historical_returns)
    return start, paths


# ---------------------------------------------------------------------------
# Ensemble
# ---------------------------------------------------------------------------


def simulate_ensemble(
    request: SimulationRequest,
    historical_returns: np.ndarray | None = None,
    max_workers: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> np.ndarray:
    """Generate every path of ``request``.

    Args:
        request: Validated simulation request.
        historical_returns: Log-return history, required for Bootstrap.
        max_workers: Process count; ``None`` uses ``os.cpu_count()``, ``<= 1``
            runs in-process.
        chunk_size: Paths per worker task.

    Returns:
        Array of shape ``(num_paths, horizon + 1)``; row ``i`` is path ``i``.

    Raises:
        InsufficientDataError: Bootstrap with an empty history.
    """
    if isinstance(request.model, BootstrapParams) and _empty_if_none(historical_returns).size == 0:
        raise InsufficientDataError("Bootstrap requires a non-empty log-return history")

    return run_chunked(
        lambda start, stop: (request, start, stop, historical_returns),
        _generate_chunk,
        num_paths=request.num_paths,
        width=request.horizon + 1,
        max_workers=max_workers,
        chunk_size=chunk_size,
    )


def run_chunked(
    make_args: Callable[[int, int], tuple],
    worker: Callable[..., tuple[int, np.ndarray]],
    num_paths: int,
    width: int,
    max_workers: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> np.ndarray:
    """Run ``worker`` over contiguous path-index chunks and stitch rows by index.

    ``worker(*make_args(start, stop))`` must return ``(start, rows)``.
    """
    chunk_size = max(1, int(chunk_size))
    bounds = [
        (start, min(start + chunk_size, num_paths))
        for start in range(0, num_paths, chunk_size)
    ]

    if max_workers is None:
        max_workers = os.cpu_count() or 1
    max_workers = min(max_workers, len(bounds))

    ensemble = np.empty((num_paths, width))

    if max_workers <= 1:
        for start, stop in bounds:
            _, rows = worker(*make_args(start, stop))
            ensemble[start:stop] = rows
        return ensemble

    logger.debug(
        "Dispatching %d paths in %d chunks to %d workers",
        num_paths, len(bounds), max_workers,
    )
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(worker, *make_args(start, stop)) for start, stop in bounds]
        for future in futures:
            start, rows = future.result()
            ensemble[start:start + len(rows)] = rows

    return ensemble


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_simulation(
    request: SimulationRequest,
    historical_returns: np.ndarray | None = None,
    max_workers: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> SimulationResult:
    """Simulate the request's ensemble and summarize its terminal prices."""
    label = request.model.label.value
    logger.info(
        "Running %s simulation: %d paths x %d steps (seed=%d, antithetic=%s)",
        label, request.num_paths, request.horizon, request.seed, request.use_antithetic,
    )

    started = time.perf_counter()
    ensemble = simulate_ensemble(request, historical_returns, max_workers, chunk_size)
    stats = summarize_ensemble(ensemble, request.initial_price, label)
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    logger.info("%s simulation complete in %.1f ms (VaR95=%.4f)", label, elapsed_ms, stats.var95)
    return SimulationResult(request=request, ensemble=ensemble, stats=stats, elapsed_ms=elapsed_ms)
