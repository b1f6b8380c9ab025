"""
Support-recovery scores.

Every scorer binarizes the estimated coefficients (nonzero -> 1) and compares
them with the true coefficient vector. Estimators that prepend an intercept
return p + 1 values; the leading entry is dropped before comparison.
"""

import numpy as np

from .exceptions import DimensionMismatchError
from .records import EstimateRecord


def align_estimate(estimated, beta):
    """
    Binarize an estimated coefficient vector and align it with ``beta``.

    Parameters
    ----------
    estimated : array-like of shape (p,) or (p + 1,)
        Estimated coefficients or a 0/1 selection vector. A length that differs
        from ``beta`` is taken to carry an intercept in position 0.
    beta : array-like of shape (p,)
        True coefficients.

    Returns
    -------
    binary : ndarray of shape (p,)
        1.0 where the estimate is nonzero, 0.0 elsewhere.
    beta : ndarray of shape (p,)
        ``beta`` as a float array.

    Raises
    ------
    DimensionMismatchError
        If the lengths still differ after dropping the intercept.
    """
    estimated = np.asarray(estimated, dtype=float).ravel()
    beta = np.asarray(beta, dtype=float).ravel()

    binary = (estimated != 0).astype(float)
    if len(binary) != len(beta):
        binary = binary[1:]
    if len(binary) != len(beta):
        raise DimensionMismatchError(
            f"Estimated vector of length {len(estimated)} cannot be aligned "
            f"with beta of length {len(beta)}"
        )
    return binary, beta


def var_retention(estimated, beta):
    """Count strongly significant variables (beta == 1) kept nonzero."""
    binary, beta = align_estimate(estimated, beta)
    return int(np.sum((binary == 1) & (beta == 1)))


def var_identification(estimated, beta):
    """
    Count variables whose binary selection status equals ``beta``.

    The comparison is literal, so it is only an exact identification count
    when ``beta`` is itself 0/1 valued. Entries of a weak-sparsity tail never
    match.
    """
    binary, beta = align_estimate(estimated, beta)
    return int(np.sum(binary == beta))


def var_nonzero(estimated, beta):
    """Count variables selected as nonzero."""
    binary, _ = align_estimate(estimated, beta)
    return int(np.sum(binary))


def score_selection(estimated, beta, error_metric=None):
    """
    Apply all three scorers and bundle them with an error metric.

    A missing or non-finite ``error_metric`` is stored as None.

    Returns
    -------
    record : EstimateRecord
    """
    if error_metric is not None:
        error_metric = float(error_metric)
        if not np.isfinite(error_metric):
            error_metric = None
    return EstimateRecord(
        retention=var_retention(estimated, beta),
        identification=var_identification(estimated, beta),
        nonzero=var_nonzero(estimated, beta),
        error_metric=error_metric,
    )
