"""Merton-style jump-diffusion simulation.

GBM diffusion plus a compound-Poisson log-jump per step:
  r_t = (μ − ½σ²)dt + σ√dt·z + Σ_{k<N} J_k
  N ~ Poisson(λ·dt), J ~ Normal(μ_j, σ_j)
"""

import numpy as np

from pathrisk.rng import RandomStream
from .gbm import _path_from_log_returns


def generate_jump_diffusion_path(
    initial_price: float,
    steps: int,
    dt: float,
    mu: float,
    sigma: float,
    lam: float,
    mu_j: float,
    sigma_j: float,
    rng: RandomStream,
) -> np.ndarray:
    """Simulate one jump-diffusion path.

    Args:
        initial_price: Starting price.
        steps: Number of time steps.
        dt: Time increment per step.
        mu: Diffusion drift per unit time.
        sigma: Diffusion volatility per unit time.
        lam: Jump intensity (expected jumps per unit time).
        mu_j: Mean log-jump size.
        sigma_j: Log-jump size volatility.
        rng: Per-path random stream.
    """
    drift = (mu - 0.5 * sigma**2) * dt
    diffusion = sigma * np.sqrt(dt)

    z = rng.standard_normal(steps)
    n_jumps = rng.poisson(lam * dt, steps)

    jump_sizes = np.zeros(steps)
    total_jumps = int(n_jumps.sum())
    if total_jumps > 0:
        # Sample all jump sizes at once, then sum them into their steps
        all_jumps = rng.normal(mu_j, sigma_j, total_jumps)
        np.add.at(jump_sizes, np.repeat(np.arange(steps), n_jumps), all_jumps)

    log_ret = drift + diffusion * z + jump_sizes
    return _path_from_log_returns(initial_price, log_ret)
