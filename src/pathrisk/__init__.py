"""Monte Carlo price-path simulation and risk statistics."""

__version__ = "0.1.0"
