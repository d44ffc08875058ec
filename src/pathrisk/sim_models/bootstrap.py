"""Historical bootstrap: resample observed log returns with replacement."""

import numpy as np

from pathrisk.errors import InsufficientDataError
from pathrisk.rng import RandomStream
from .gbm import _path_from_log_returns


def generate_bootstrap_path(
    initial_price: float,
    steps: int,
    log_returns: np.ndarray,
    rng: RandomStream,
) -> np.ndarray:
    """Simulate one path by drawing a uniformly random historical return per step.

    Raises:
        InsufficientDataError: If ``log_returns`` is empty.
    """
    log_returns = np.asarray(log_returns, dtype=float)
    if log_returns.size == 0:
        raise InsufficientDataError("Bootstrap requires a non-empty log-return history")

    idx = rng.integers(log_returns.size, steps)
    return _path_from_log_returns(initial_price, log_returns[idx])
