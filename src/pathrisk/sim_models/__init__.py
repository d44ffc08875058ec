"""Stochastic price-path models.

Each model is a frozen parameter record plus a generator in its own module:
- GBM: Geometric Brownian Motion (constant volatility)
- BOOTSTRAP: historical log-return resampling
- MEAN_REVERSION: Ornstein-Uhlenbeck on the price level
- JUMP_DIFFUSION: GBM plus compound-Poisson log-jumps
- GARCH: GARCH(1,1) time-varying volatility
"""

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Union

from pathrisk.errors import InvalidRequestError


class SimModel(str, Enum):
    GBM = "GBM"
    BOOTSTRAP = "Bootstrap"
    MEAN_REVERSION = "MeanReversion"
    JUMP_DIFFUSION = "JumpDiffusion"
    GARCH = "GARCH"


def _require_finite(spec) -> None:
    for f in fields(spec):
        value = getattr(spec, f.name)
        if not math.isfinite(value):
            raise InvalidRequestError(f"{spec.label.value} {f.name} must be finite, got {value}")


@dataclass(frozen=True)
class GBMParams:
    mu: float
    sigma: float

    label = SimModel.GBM

    def __post_init__(self):
        _require_finite(self)
        if self.sigma < 0:
            raise InvalidRequestError("GBM sigma must be non-negative")


@dataclass(frozen=True)
class BootstrapParams:
    """Resampling has no parameters; the history is supplied per run."""

    label = SimModel.BOOTSTRAP


@dataclass(frozen=True)
class MeanReversionParams:
    theta: float
    mu_long_term: float
    sigma: float

    label = SimModel.MEAN_REVERSION

    def __post_init__(self):
        _require_finite(self)
        if self.theta <= 0:
            raise InvalidRequestError("MeanReversion theta must be positive")
        if self.sigma < 0:
            raise InvalidRequestError("MeanReversion sigma must be non-negative")


@dataclass(frozen=True)
class JumpDiffusionParams:
    mu: float
    sigma: float
    lam: float  # expected jumps per unit time
    mu_j: float
    sigma_j: float

    label = SimModel.JUMP_DIFFUSION

    def __post_init__(self):
        _require_finite(self)
        if self.lam < 0:
            raise InvalidRequestError("JumpDiffusion lambda must be non-negative")
        if self.sigma < 0:
            raise InvalidRequestError("JumpDiffusion sigma must be non-negative")
        if self.sigma_j < 0:
            raise InvalidRequestError("JumpDiffusion sigma_j must be non-negative")


@dataclass(frozen=True)
class GARCHParams:
    omega: float
    alpha: float
    beta: float

    label = SimModel.GARCH

    def __post_init__(self):
        _require_finite(self)
        if self.omega <= 0:
            raise InvalidRequestError("GARCH omega must be positive")
        if self.alpha < 0:
            raise InvalidRequestError("GARCH alpha must be non-negative")
        if self.beta < 0:
            raise InvalidRequestError("GARCH beta must be non-negative")
        if self.alpha + self.beta >= 1:
            raise InvalidRequestError(
                "GARCH stationarity condition failed: alpha + beta must be < 1"
            )


ModelSpec = Union[GBMParams, BootstrapParams, MeanReversionParams, JumpDiffusionParams, GARCHParams]

MODEL_TYPES: tuple[type, ...] = (
    GBMParams,
    BootstrapParams,
    MeanReversionParams,
    JumpDiffusionParams,
    GARCHParams,
)


__all__ = [
    "SimModel",
    "ModelSpec",
    "MODEL_TYPES",
    "GBMParams",
    "BootstrapParams",
    "MeanReversionParams",
    "JumpDiffusionParams",
    "GARCHParams",
]
