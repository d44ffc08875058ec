from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PATHRISK_",
    )

    # Simulation defaults
    simulation_num_paths: int = 1000
    simulation_horizon: int = 30
    simulation_dt: float = 1.0
    simulation_seed: int = 12345
    simulation_use_antithetic: bool = False

    # Parallelization
    simulation_max_workers: int = 4
    simulation_chunk_size: int = 256

    # Portfolio
    portfolio_min_history_records: int = 30
    portfolio_total_capital: float = 10000.0

    # Logging
    log_dir: str = "logs"
    log_file: str = "pathrisk.log"
