"""
Domain exceptions for the OI momentum engine.

Implements a hierarchy distinguishing between recoverable errors (the
caller can supply more or cleaner data and retry) and fatal errors
(configuration issues) that should stop the process.
"""

from __future__ import annotations

from typing import Optional


class OIMomentumError(Exception):
    """Base class for all OI momentum domain exceptions."""
    pass


class RecoverableError(OIMomentumError):
    """
    Errors the caller can recover from without restarting.

    Examples:
    - Not enough samples yet (show a "loading" state)
    - A malformed sample window from the fetch layer
    """
    pass


class FatalError(OIMomentumError):
    """
    Critical errors requiring operator intervention.

    Examples:
    - Invalid threshold configuration
    - Missing base configuration file
    """
    pass


class InsufficientDataError(RecoverableError):
    """Fewer samples than the analysis requires."""

    def __init__(self, required: int, received: int):
        self.required = required
        self.received = received
        super().__init__(
            f"Need at least {required} data points for momentum analysis, got {received}"
        )


class InvalidSampleError(RecoverableError, ValueError):
    """
    A sample violates the input contract.

    Raised for non-increasing timestamps (zero time delta would divide by
    zero in the per-hour normalization) and for non-positive or non-finite
    OI values (zero previous OI would divide by zero in the percent change).
    """

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        if index is not None:
            message = f"sample[{index}]: {message}"
        super().__init__(message)


class ConfigurationError(FatalError):
    """Invalid engine configuration."""
    pass
