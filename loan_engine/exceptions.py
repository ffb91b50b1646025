"""Custom exception hierarchy for loan-engine."""


class LoanEngineError(Exception):
    """Base exception for all loan-engine errors."""


class InvalidInputError(LoanEngineError, ValueError):
    """Raised when loan terms or records cannot be computed on."""


class RollupStateError(LoanEngineError):
    """Raised when the roll-up tracker is driven through an illegal transition."""


class ConfigurationError(LoanEngineError):
    """Raised when configuration is invalid or missing."""


class SinkError(LoanEngineError):
    """Raised when an export operation fails."""
