"""OI derivative computation functions.

Pure numpy functions for computing:
- Momentum (first derivative): percent change of OI normalized to a
  per-hour rate, so irregular or cross-timeframe sampling stays comparable
- Acceleration (second derivative): point-to-point change in momentum,
  not further time-normalized

The first point of both series is 0 by convention (nothing to diff against).
Inputs are validated up front: a zero time delta or a non-positive previous
OI would divide by zero, so such windows are rejected rather than allowed to
produce inf/NaN.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from oimomentum.utils.logging_setup import get_logger

from ..exceptions import InsufficientDataError, InvalidSampleError
from .config import MS_PER_HOUR
from .models import OISample

logger = get_logger(__name__)


def validate_samples(samples: Sequence[OISample], min_samples: int = 3) -> None:
    """Enforce the input contract before any derivative is computed.

    Args:
        samples: OI samples, expected ascending by timestamp.
        min_samples: Minimum number of samples required.

    Raises:
        InsufficientDataError: Fewer than ``min_samples`` samples.
        InvalidSampleError: Non-finite or non-positive value, or a timestamp
            that does not strictly increase.
    """
    if len(samples) < min_samples:
        raise InsufficientDataError(required=min_samples, received=len(samples))

    prev_ts: int | None = None
    for i, sample in enumerate(samples):
        if not math.isfinite(sample.value) or sample.value <= 0:
            raise InvalidSampleError(f"OI value must be finite and > 0, got {sample.value}", index=i)
        if prev_ts is not None and sample.timestamp <= prev_ts:
            raise InvalidSampleError(
                f"timestamps must strictly increase ({sample.timestamp} <= {prev_ts})",
                index=i,
            )
        prev_ts = sample.timestamp


def compute_momentum(timestamps: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Per-hour percent rate of change of OI.

    momentum[0] = 0
    momentum[i] = (v[i] - v[i-1]) / v[i-1] * 100 * (3_600_000 / (t[i] - t[i-1]))

    Args:
        timestamps: Epoch-millisecond timestamps, strictly increasing.
        values: OI values, all > 0.

    Returns:
        Momentum series (%/hour), same length as input.
    """
    values = np.asarray(values, dtype=float)
    timestamps = np.asarray(timestamps, dtype=np.int64)

    momentum = np.zeros(len(values), dtype=float)
    if len(values) < 2:
        return momentum

    pct_change = (values[1:] - values[:-1]) / values[:-1] * 100
    delta_t = (timestamps[1:] - timestamps[:-1]).astype(float)
    momentum[1:] = pct_change * (MS_PER_HOUR / delta_t)
    return momentum


def compute_acceleration(momentum: np.ndarray) -> np.ndarray:
    """Change in momentum between consecutive points.

    acceleration[0] = 0
    acceleration[i] = momentum[i] - momentum[i-1]
    """
    momentum = np.asarray(momentum, dtype=float)
    acceleration = np.zeros(len(momentum), dtype=float)
    if len(momentum) >= 2:
        acceleration[1:] = np.diff(momentum)
    return acceleration


def compute_derivatives(
    samples: Sequence[OISample], min_samples: int = 3
) -> tuple[np.ndarray, np.ndarray]:
    """Validate samples and return ``(momentum, acceleration)``."""
    validate_samples(samples, min_samples)

    timestamps = np.fromiter((s.timestamp for s in samples), dtype=np.int64, count=len(samples))
    values = np.fromiter((s.value for s in samples), dtype=float, count=len(samples))

    momentum = compute_momentum(timestamps, values)
    acceleration = compute_acceleration(momentum)

    logger.debug(
        f"Derivatives computed for {len(samples)} samples "
        f"(last momentum={momentum[-1]:.3f}, last acceleration={acceleration[-1]:.3f})"
    )
    return momentum, acceleration
