"""Persisted simulation configuration.

JSON layout: flat request fields plus a ``model_type`` label and one optional
parameter block per model (``gbm_params``, ``mean_reversion_params``,
``jump_diffusion_params``, ``garch_params``).
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from pathrisk.errors import InvalidRequestError
from pathrisk.sim_models import (
    BootstrapParams,
    GARCHParams,
    GBMParams,
    JumpDiffusionParams,
    MeanReversionParams,
    ModelSpec,
    SimModel,
)
from pathrisk.simulation import SimulationRequest

logger = logging.getLogger(__name__)


class GBMConfig(BaseModel):
    mu: float
    sigma: float


class MeanReversionConfig(BaseModel):
    theta: float
    mu_long_term: float
    sigma: float


class JumpDiffusionConfig(BaseModel):
    mu: float
    sigma: float
    lam: float = Field(alias="lambda")
    mu_j: float
    sigma_j: float

    model_config = ConfigDict(populate_by_name=True)


class GARCHConfig(BaseModel):
    omega: float
    alpha: float
    beta: float


class SimConfig(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    initial_price: float
    horizon: int
    num_paths: int
    seed: int
    use_antithetic: bool = False
    dt: float = 1.0

    model_type: str = Field(description='"GBM", "Bootstrap", "MeanReversion", "JumpDiffusion" or "GARCH"')

    gbm_params: GBMConfig | None = None
    mean_reversion_params: MeanReversionConfig | None = None
    jump_diffusion_params: JumpDiffusionConfig | None = None
    garch_params: GARCHConfig | None = None

    def to_model_params(self) -> ModelSpec:
        """Resolve ``model_type`` to its parameter record.

        Raises:
            InvalidRequestError: Unknown label, missing block or invalid values.
        """
        try:
            model = SimModel(self.model_type)
        except ValueError:
            raise InvalidRequestError(f"Unknown model type: {self.model_type}") from None

        if model == SimModel.BOOTSTRAP:
            return BootstrapParams()

        block, spec_cls, name = {
            SimModel.GBM: (self.gbm_params, GBMParams, "GBM"),
            SimModel.MEAN_REVERSION: (self.mean_reversion_params, MeanReversionParams, "Mean Reversion"),
            SimModel.JUMP_DIFFUSION: (self.jump_diffusion_params, JumpDiffusionParams, "Jump Diffusion"),
            SimModel.GARCH: (self.garch_params, GARCHParams, "GARCH"),
        }[model]

        if block is None:
            raise InvalidRequestError(f"{name} parameters missing")
        return spec_cls(**block.model_dump())

    def to_request(self) -> SimulationRequest:
        return SimulationRequest(
            initial_price=self.initial_price,
            horizon=self.horizon,
            num_paths=self.num_paths,
            seed=self.seed,
            use_antithetic=self.use_antithetic,
            dt=self.dt,
            model=self.to_model_params(),
        )


def validate_config(config: SimConfig) -> None:
    """Raise InvalidRequestError if the config cannot produce a valid request."""
    config.to_request()


def save_config(config: SimConfig, path: str | Path) -> None:
    Path(path).write_text(
        config.model_dump_json(indent=2, exclude_none=True, by_alias=True), encoding="utf-8"
    )
    logger.debug("Saved simulation config to %s", path)


def load_config(path: str | Path) -> SimConfig:
    config = SimConfig.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.debug("Loaded %s simulation config from %s", config.model_type, path)
    return config
