"""Exception hierarchy for the simulation engine."""


class SimulationError(Exception):
    """Base exception for all simulation failures."""


class InvalidRequestError(SimulationError):
    """Raised when a request or model carries missing or out-of-range parameters."""


class InsufficientDataError(SimulationError):
    """Raised when historical data is too short (or absent) for the operation."""


class CorrelationError(SimulationError):
    """Raised when a correlation matrix cannot be Cholesky-factorized."""


class EmptyEnsembleError(SimulationError):
    """Raised when statistics are requested over zero paths."""


class DataFormatError(SimulationError):
    """Raised when a price file is missing columns or holds unparseable values."""
