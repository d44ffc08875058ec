"""GARCH(1,1) time-varying volatility simulation.

Each path evolves its own conditional variance:
  σ²_t = max(ω + α·r²_{t−1} + β·σ²_{t−1}, VARIANCE_FLOOR)
  r_t  = σ_t·ε_t·√dt
"""

import numpy as np

from pathrisk.rng import RandomStream


VARIANCE_FLOOR = 1e-12


def unconditional_variance(omega: float, alpha: float, beta: float) -> float:
    """Long-run variance ω / (1 − α − β) of a stationary GARCH(1,1)."""
    return omega / (1.0 - alpha - beta)


def generate_garch_path(
    initial_price: float,
    steps: int,
    dt: float,
    omega: float,
    alpha: float,
    beta: float,
    rng: RandomStream,
) -> np.ndarray:
    """Simulate one GARCH(1,1) price path."""
    path, _ = simulate_garch_variance(initial_price, steps, dt, omega, alpha, beta, rng)
    return path


def simulate_garch_variance(
    initial_price: float,
    steps: int,
    dt: float,
    omega: float,
    alpha: float,
    beta: float,
    rng: RandomStream,
) -> tuple[np.ndarray, np.ndarray]:
    """Simulate one GARCH(1,1) path and return it with its variance trace.

    The recursion starts from the unconditional variance.

    Returns:
        (path of ``steps + 1`` prices, conditional variance used at each step)
    """
    sqrt_dt = np.sqrt(dt)
    eps = rng.standard_normal(steps)

    path = np.empty(steps + 1)
    variances = np.empty(steps)
    path[0] = initial_price

    variance = max(unconditional_variance(omega, alpha, beta), VARIANCE_FLOOR)
    prev_ret = 0.0
    price = initial_price

    for t in range(steps):
        if t > 0:
            variance = max(omega + alpha * prev_ret**2 + beta * variance, VARIANCE_FLOOR)
        variances[t] = variance

        ret = np.sqrt(variance) * eps[t] * sqrt_dt
        price = price * np.exp(ret)
        path[t + 1] = price
        prev_ret = ret

    return path, variances
