"""Terminal-distribution statistics.

Pure computation over an ensemble's terminal prices. Percentiles use numpy's
``linear`` rank interpolation throughout.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from pathrisk.errors import EmptyEnsembleError, InvalidRequestError

logger = logging.getLogger(__name__)

PERCENTILE_METHOD = "linear"


@dataclass(frozen=True)
class SummaryStatistics:
    model_label: str
    path_count: int
    horizon: int
    mean: float
    std_dev: float
    median: float
    p5: float
    p25: float
    p75: float
    p95: float
    var95: float  # positive loss fraction at 95% confidence


def compute_statistics(
    terminal_prices: np.ndarray,
    reference_price: float,
    model_label: str,
    horizon: int,
) -> SummaryStatistics:
    """Summarize a terminal-price distribution.

    Args:
        terminal_prices: Last price of every path.
        reference_price: Initial price (single asset) or initial value (portfolio).
        model_label: Label recorded on the result.
        horizon: Step count recorded on the result.

    Returns:
        SummaryStatistics with ``var95 = -percentile_5(simple returns)``.

    Raises:
        EmptyEnsembleError: If there are no terminal prices.
        InvalidRequestError: If ``reference_price`` is not positive.
    """
    terminal = np.asarray(terminal_prices, dtype=float)
    if terminal.size == 0:
        raise EmptyEnsembleError("No terminal prices to analyze")
    if not math.isfinite(reference_price) or reference_price <= 0:
        raise InvalidRequestError("Reference price must be positive")

    p5, p25, p50, p75, p95 = np.percentile(
        terminal, [5, 25, 50, 75, 95], method=PERCENTILE_METHOD
    )
    std_dev = float(np.std(terminal, ddof=1)) if terminal.size > 1 else 0.0

    returns = (terminal - reference_price) / reference_price
    var95 = -float(np.percentile(returns, 5, method=PERCENTILE_METHOD))

    logger.debug(
        "%s: %d terminal prices, mean=%.4f, p5=%.4f, var95=%.4f",
        model_label, terminal.size, float(np.mean(terminal)), p5, var95,
    )

    return SummaryStatistics(
        model_label=model_label,
        path_count=int(terminal.size),
        horizon=int(horizon),
        mean=float(np.mean(terminal)),
        std_dev=std_dev,
        median=float(p50),
        p5=float(p5),
        p25=float(p25),
        p75=float(p75),
        p95=float(p95),
        var95=var95,
    )


def summarize_ensemble(
    ensemble: np.ndarray,
    reference_price: float,
    model_label: str,
) -> SummaryStatistics:
    """Statistics over the last column of a ``(num_paths, horizon + 1)`` ensemble."""
    ensemble = np.asarray(ensemble, dtype=float)
    if ensemble.ndim != 2 or ensemble.shape[0] == 0:
        raise EmptyEnsembleError("Ensemble contains no paths")
    return compute_statistics(
        ensemble[:, -1], reference_price, model_label, horizon=ensemble.shape[1] - 1
    )
