"""Ornstein-Uhlenbeck mean reversion on the price level.

  dS = θ(μ_lt − S)dt + σ·dW

Prices are floored at PRICE_FLOOR, so a path never goes non-positive.
"""

import numpy as np

from pathrisk.rng import RandomStream


PRICE_FLOOR = 0.01


def generate_mean_reversion_path(
    initial_price: float,
    steps: int,
    dt: float,
    theta: float,
    mu_long_term: float,
    sigma: float,
    rng: RandomStream,
) -> np.ndarray:
    """Simulate one Euler-discretised OU path.

    Args:
        initial_price: Starting price.
        steps: Number of time steps.
        dt: Time increment per step.
        theta: Speed of reversion toward ``mu_long_term``.
        mu_long_term: Long-run price level.
        sigma: Absolute (price-unit) volatility per unit time.
        rng: Per-path random stream.
    """
    diffusion = sigma * np.sqrt(dt)
    z = rng.standard_normal(steps)

    path = np.empty(steps + 1)
    path[0] = initial_price
    price = initial_price

    for t in range(steps):
        price = price + theta * (mu_long_term - price) * dt + diffusion * z[t]
        price = max(price, PRICE_FLOOR)
        path[t + 1] = price

    return path
