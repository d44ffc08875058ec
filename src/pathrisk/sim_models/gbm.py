"""Geometric Brownian Motion (constant volatility) path generator."""

import numpy as np

from pathrisk.rng import RandomStream


def generate_gbm_path(
    initial_price: float,
    steps: int,
    dt: float,
    mu: float,
    sigma: float,
    rng: RandomStream,
) -> np.ndarray:
    """Simulate one GBM price path.

    Args:
        initial_price: Starting price, stored unchanged at ``path[0]``.
        steps: Number of time steps (the path has ``steps + 1`` points).
        dt: Time increment per step.
        mu: Drift per unit time.
        sigma: Volatility per unit time.
        rng: Per-path random stream (antithetic streams negate ``z``).

    Returns:
        Array of ``steps + 1`` prices.
    """
    drift = (mu - 0.5 * sigma**2) * dt
    diffusion = sigma * np.sqrt(dt)

    z = rng.standard_normal(steps)
    log_ret = drift + diffusion * z

    return _path_from_log_returns(initial_price, log_ret)


def _path_from_log_returns(initial_price: float, log_ret: np.ndarray) -> np.ndarray:
    """Compound per-step log returns into a price path starting at ``initial_price``."""
    path = np.empty(len(log_ret) + 1)
    path[0] = initial_price
    path[1:] = initial_price * np.exp(np.cumsum(log_ret))
    return path
