import logging
from pathlib import Path

import click
from pydantic import ValidationError

from pathrisk.config import Settings
from pathrisk.errors import SimulationError
from pathrisk.logging_config import setup_logging

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """pathrisk - Monte Carlo price paths and risk statistics"""
    settings = Settings()
    setup_logging(settings.log_dir, settings.log_file)
    if verbose:
        for handler in logging.getLogger().handlers:
            handler.setLevel(logging.DEBUG)
    ctx.obj = settings


def _echo_stats(stats, elapsed_ms: float) -> None:
    click.echo(f"Model:   {stats.model_label}")
    click.echo(f"Paths:   {stats.path_count}  Horizon: {stats.horizon}")
    click.echo(f"Mean:    {stats.mean:.4f}  StdDev: {stats.std_dev:.4f}")
    click.echo(f"Median:  {stats.median:.4f}")
    click.echo(f"P5/P25:  {stats.p5:.4f} / {stats.p25:.4f}")
    click.echo(f"P75/P95: {stats.p75:.4f} / {stats.p95:.4f}")
    click.echo(f"VaR95:   {stats.var95:.4%}")
    click.echo(f"Time:    {elapsed_ms:.0f} ms")


@cli.command()
@click.option("--config", "-c", "config_path", required=True,
              type=click.Path(exists=True, dir_okay=False),
              help="Simulation config JSON")
@click.option("--data", "-d", "data_path", default=None,
              type=click.Path(exists=True, dir_okay=False),
              help="Price history CSV (required for Bootstrap or --estimate)")
@click.option("--ticker", "-t", default=None, help="Ticker whose history feeds the model")
@click.option("--estimate", is_flag=True,
              help="Replace GBM mu/sigma with estimates from the ticker's log returns")
@click.option("--workers", "-w", type=int, default=None, help="Worker processes")
@click.option("--export", "export_path", default=None, type=click.Path(dir_okay=False),
              help="Write a Metric,Value summary to this file")
@click.pass_obj
def simulate(settings: Settings, config_path: str, data_path: str | None, ticker: str | None,
             estimate: bool, workers: int | None, export_path: str | None):
    """Run a single-asset simulation from a JSON config."""
    from pathrisk.data_io import estimate_parameters, load_all_records, ticker_log_returns
    from pathrisk.sim_config import GBMConfig, load_config
    from pathrisk.sim_models import SimModel
    from pathrisk.report import write_summary
    from pathrisk.simulation import run_simulation

    try:
        config = load_config(config_path)

        hist_returns = None
        if data_path and ticker:
            df = load_all_records(data_path)
            hist_returns = ticker_log_returns(df, ticker)
            click.echo(f"Loaded {len(hist_returns)} log returns for {ticker}")
        elif estimate or config.model_type == SimModel.BOOTSTRAP.value:
            raise click.UsageError("--data and --ticker are required for this run")

        if estimate:
            mu, sigma = estimate_parameters(hist_returns)
            config = config.model_copy(update={
                "model_type": SimModel.GBM.value,
                "gbm_params": GBMConfig(mu=mu, sigma=sigma),
            })
            click.echo(f"Estimated mu={mu:.6f} sigma={sigma:.6f}")

        request = config.to_request()
        result = run_simulation(
            request,
            historical_returns=hist_returns,
            max_workers=workers if workers is not None else settings.simulation_max_workers,
            chunk_size=settings.simulation_chunk_size,
        )
    except (SimulationError, ValidationError) as e:
        raise click.ClickException(str(e)) from e

    _echo_stats(result.stats, result.elapsed_ms)
    if export_path:
        write_summary(export_path, result.stats, f"{result.elapsed_ms:.0f} ms")
        click.echo(f"Summary written to {export_path}")


def _parse_asset(value: str) -> tuple[str, float]:
    ticker, sep, weight = value.rpartition(":")
    if not sep or not ticker:
        raise click.BadParameter(f"expected TICKER:WEIGHT, got {value!r}")
    try:
        return ticker, float(weight)
    except ValueError:
        raise click.BadParameter(f"weight must be a number, got {weight!r}") from None


@cli.command()
@click.option("--data", "-d", "data_path", required=True,
              type=click.Path(exists=True, dir_okay=False), help="Price history CSV")
@click.option("--asset", "-a", "assets", multiple=True, required=True,
              help="TICKER:WEIGHT_PCT (repeatable)")
@click.option("--capital", type=float, default=None, help="Total capital to allocate")
@click.option("--horizon", type=int, default=None, help="Number of steps")
@click.option("--paths", "num_paths", type=int, default=None, help="Number of paths")
@click.option("--seed", type=int, default=None, help="Base seed")
@click.option("--dt", type=float, default=None, help="Time increment per step")
@click.option("--antithetic/--no-antithetic", default=None, help="Use antithetic variates")
@click.option("--workers", "-w", type=int, default=None, help="Worker processes")
@click.option("--export", "export_path", default=None, type=click.Path(dir_okay=False),
              help="Write a Metric,Value summary to this file")
@click.pass_obj
def portfolio(settings: Settings, data_path: str, assets: tuple[str, ...], capital: float | None,
              horizon: int | None, num_paths: int | None, seed: int | None, dt: float | None,
              antithetic: bool | None, workers: int | None, export_path: str | None):
    """Run a correlated multi-asset portfolio simulation."""
    from pathrisk.data_io import load_all_records, price_history_map
    from pathrisk.portfolio import build_portfolio_config, run_portfolio_simulation
    from pathrisk.report import write_summary

    allocations = [_parse_asset(a) for a in assets]

    try:
        df = load_all_records(data_path)
        config = build_portfolio_config(
            allocations,
            capital if capital is not None else settings.portfolio_total_capital,
            price_history_map(df),
            min_records=settings.portfolio_min_history_records,
        )
        result = run_portfolio_simulation(
            config,
            horizon=horizon if horizon is not None else settings.simulation_horizon,
            num_paths=num_paths if num_paths is not None else settings.simulation_num_paths,
            seed=seed if seed is not None else settings.simulation_seed,
            dt=dt if dt is not None else settings.simulation_dt,
            use_antithetic=antithetic if antithetic is not None else settings.simulation_use_antithetic,
            max_workers=workers if workers is not None else settings.simulation_max_workers,
            chunk_size=settings.simulation_chunk_size,
        )
    except SimulationError as e:
        raise click.ClickException(str(e)) from e

    for asset in config.assets:
        click.echo(
            f"  {asset.ticker}: {asset.shares:.4f} shares @ {asset.last_price:.2f} "
            f"(mu={asset.mu:.6f}, sigma={asset.sigma:.6f})"
        )
    _echo_stats(result.stats, result.elapsed_ms)
    if export_path:
        write_summary(export_path, result.stats, f"{result.elapsed_ms:.0f} ms")
        click.echo(f"Summary written to {export_path}")


@cli.command()
@click.option("--data", "-d", "data_path", required=True,
              type=click.Path(exists=True, dir_okay=False), help="Price history CSV")
@click.option("--ticker", "-t", default=None, help="Ticker to describe (default: list tickers)")
def info(data_path: str, ticker: str | None):
    """List tickers in a price file or describe one of them."""
    from pathrisk.data_io import describe_ticker, list_tickers, load_all_records

    try:
        df = load_all_records(data_path)
    except SimulationError as e:
        raise click.ClickException(str(e)) from e

    if ticker is None:
        for t in list_tickers(df):
            click.echo(t)
        return

    summary = describe_ticker(df, ticker)
    if summary["record_count"] == 0:
        click.echo(f"No data for ticker {ticker}.")
        return
    click.echo(f"Ticker: {summary['ticker']}")
    click.echo(f"Date Range: {summary['start_date']} to {summary['end_date']}")
    click.echo(f"Record Count: {summary['record_count']}")
    click.echo(f"Last Close Price: {summary['last_close']:.2f}")
    click.echo(f"Log Returns Computed: {summary['log_return_count']}")


@cli.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_obj
def init_config(settings: Settings, path: str):
    """Write a default GBM simulation config."""
    from pathrisk.sim_config import GBMConfig, SimConfig, save_config

    config = SimConfig(
        initial_price=100.0,
        horizon=settings.simulation_horizon,
        num_paths=settings.simulation_num_paths,
        seed=settings.simulation_seed,
        use_antithetic=settings.simulation_use_antithetic,
        dt=settings.simulation_dt,
        model_type="GBM",
        gbm_params=GBMConfig(mu=0.0002, sigma=0.015),
    )
    save_config(config, Path(path))
    click.echo(f"Config written to {path}")


if __name__ == "__main__":
    cli()
