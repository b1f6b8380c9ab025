"""
Exceptions raised by the simulation harness.

All input errors derive from ``ValueError`` so callers that already guard
against bad arguments keep working.
"""


class SparseRecoveryError(Exception):
    """Base class for errors raised by sparse_recovery."""


class InvalidParameterError(SparseRecoveryError, ValueError):
    """A sparsity, SNR, rho, decay value or other parameter is out of range."""


class DimensionMismatchError(SparseRecoveryError, ValueError):
    """A vector length does not agree with the number of covariates."""


class AllMissingError(SparseRecoveryError, ValueError):
    """An aggregation step has no valid values to average."""
