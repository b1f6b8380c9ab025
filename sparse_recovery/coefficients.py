"""
Ground-truth coefficient vectors for the simulation study.

Three sparsity patterns are provided:
- equally spaced ones across the covariates
- a leading block of ones
- weak sparsity: a leading block of ones followed by a geometric tail
"""

import numpy as np

from .exceptions import InvalidParameterError


def _check_sparsity(p, s):
    if int(p) != p or p < 1:
        raise InvalidParameterError(f"p must be a positive integer, got {p}")
    if int(s) != s or s < 0:
        raise InvalidParameterError(f"s must be a non-negative integer, got {s}")
    if s > p:
        raise InvalidParameterError(
            f"Sparsity s={s} exceeds the number of covariates p={p}"
        )
    return int(p), int(s)


def _freeze(beta):
    beta.setflags(write=False)
    return beta


def beta_equally_spaced(p, s):
    """
    Coefficient vector with ``s`` equally spaced ones, the rest zeros.

    Locations are ``round(linspace(1, p, s))`` on 1-based indices. When ``s`` is
    large relative to ``p`` rounding can map two locations onto the same index,
    in which case the vector holds fewer than ``s`` ones.

    Parameters
    ----------
    p : int
        Number of covariates.
    s : int
        Degree of sparsity (number of requested ones).

    Returns
    -------
    beta : ndarray of shape (p,)
        Read-only coefficient vector.

    Examples
    --------
    >>> beta_equally_spaced(10, 3)
    array([1., 0., 0., 0., 0., 1., 0., 0., 0., 1.])
    """
    p, s = _check_sparsity(p, s)
    beta = np.zeros(p)
    if s > 0:
        loc = np.round(np.linspace(1, p, s)).astype(int)
        beta[loc - 1] = 1.0
    return _freeze(beta)


def beta_leading_block(p, s):
    """Coefficient vector with ones in the first ``s`` entries, the rest zeros."""
    p, s = _check_sparsity(p, s)
    beta = np.concatenate([np.ones(s), np.zeros(p - s)])
    return _freeze(beta)


def beta_weak_decay(p, s, value):
    """
    Coefficient vector with weak sparsity.

    The first ``s`` entries are one and the remaining ``p - s`` entries decay
    geometrically as ``value**k`` for ``k = 1, ..., p - s``.

    Parameters
    ----------
    p : int
        Number of covariates.
    s : int
        Number of leading ones.
    value : float
        Decay base, strictly between 0 and 1.

    Returns
    -------
    beta : ndarray of shape (p,)
        Read-only coefficient vector.

    Raises
    ------
    InvalidParameterError
        If ``s > p``, if ``p <= s`` leaves no decay segment, or if ``value``
        lies outside (0, 1).
    """
    p, s = _check_sparsity(p, s)
    if p <= s:
        raise InvalidParameterError(
            f"Weak sparsity needs p > s to build a decay segment, got p={p}, s={s}"
        )
    if not 0 < value < 1:
        raise InvalidParameterError(
            f"Decay value must lie strictly between 0 and 1, got {value}"
        )
    tail = value ** np.arange(1, p - s + 1, dtype=float)
    beta = np.concatenate([np.ones(s), tail])
    return _freeze(beta)


BETA_GENERATORS = {
    'spaced': beta_equally_spaced,
    'block': beta_leading_block,
    'weak': beta_weak_decay,
}


def make_beta(beta_type, p, s, value=None):
    """
    Build a coefficient vector by pattern name.

    Parameters
    ----------
    beta_type : {'spaced', 'block', 'weak'}
        Sparsity pattern.
    p, s : int
        Number of covariates and degree of sparsity.
    value : float or None
        Decay base, required for ``'weak'``.
    """
    if beta_type not in BETA_GENERATORS:
        raise InvalidParameterError(
            f"Unknown beta_type '{beta_type}'. "
            f"Valid types are: {list(BETA_GENERATORS)}"
        )
    if beta_type == 'weak':
        if value is None:
            raise InvalidParameterError("beta_type='weak' requires a decay value")
        return beta_weak_decay(p, s, value)
    return BETA_GENERATORS[beta_type](p, s)


def true_sparsity(beta):
    """Number of strongly significant coefficients (entries equal to one)."""
    return int(np.sum(np.asarray(beta) == 1))
