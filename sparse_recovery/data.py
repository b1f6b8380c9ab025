"""
Synthetic linear-regression data with correlated covariates.

Model: Y = X @ beta + sigma * eps, with rows of X drawn from N(0, Sigma),
Sigma[i, j] = rho^|i-j|, and sigma calibrated so that the population
signal-to-noise ratio beta' Sigma beta / sigma^2 equals the requested SNR.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.linalg import toeplitz
from sklearn.utils import check_random_state

from .exceptions import DimensionMismatchError, InvalidParameterError


@dataclass(frozen=True)
class SyntheticDataset:
    """One simulated replicate."""
    X: np.ndarray
    y: np.ndarray
    sigma: float
    Sigma: np.ndarray

    @property
    def n_samples(self) -> int:
        return self.X.shape[0]

    @property
    def n_features(self) -> int:
        return self.X.shape[1]

    def to_frame(self) -> pd.DataFrame:
        """Return the replicate as a DataFrame, response first (Y, X1, ..., Xp)."""
        columns = [f'X{i+1}' for i in range(self.n_features)]
        df = pd.DataFrame(self.X, columns=columns)
        df.insert(0, 'Y', self.y)
        return df


def toeplitz_covariance(p, rho):
    """
    Covariance matrix with geometric decay by lag, Sigma[i, j] = rho^|i-j|.

    Parameters
    ----------
    p : int
        Number of covariates.
    rho : float
        Decay parameter in [0, 1). rho=0 gives the identity.

    Returns
    -------
    Sigma : ndarray of shape (p, p)
    """
    if int(p) != p or p < 1:
        raise InvalidParameterError(f"p must be a positive integer, got {p}")
    if not 0 <= rho < 1:
        raise InvalidParameterError(f"rho must lie in [0, 1), got {rho}")
    # 0.0 ** 0 == 1.0 keeps the diagonal at one when rho is zero
    return toeplitz(float(rho) ** np.arange(int(p)))


def signal_variance(beta, Sigma):
    """Population variance of the linear signal, beta' Sigma beta."""
    beta = np.asarray(beta, dtype=float)
    return float(beta @ Sigma @ beta)


def simulate(n, p, rho, beta, SNR, random_state=None):
    """
    Generate one synthetic dataset.

    Parameters
    ----------
    n : int
        Number of observations.
    p : int
        Number of covariates.
    rho : float
        Covariance decay in [0, 1).
    beta : array-like of shape (p,)
        True coefficients.
    SNR : float
        Target signal-to-noise ratio, strictly positive.
    random_state : int, RandomState instance or None, default=None
        Source of randomness. The generator holds no seed of its own; pass the
        same seed (or an identically seeded RandomState) to reproduce a draw.

    Returns
    -------
    dataset : SyntheticDataset
        Design matrix, response, noise scale and covariance matrix.

    Raises
    ------
    DimensionMismatchError
        If ``len(beta) != p``.
    InvalidParameterError
        If ``n`` or ``p`` is not a positive integer, ``rho`` is outside
        [0, 1) or ``SNR <= 0``.

    Examples
    --------
    >>> data = simulate(100, 5, 0.35, [1, 0, 1, 0, 1], SNR=2.0, random_state=42)
    >>> data.X.shape
    (100, 5)
    """
    beta = np.asarray(beta, dtype=float).ravel()
    if int(n) != n or n < 1:
        raise InvalidParameterError(f"n must be a positive integer, got {n}")
    if len(beta) != p:
        raise DimensionMismatchError(
            f"Number of beta coefficients ({len(beta)}) unequal to p={p}"
        )
    if not SNR > 0:
        raise InvalidParameterError(f"SNR must be strictly positive, got {SNR}")

    Sigma = toeplitz_covariance(p, rho)
    rng = check_random_state(random_state)

    X = rng.multivariate_normal(np.zeros(int(p)), Sigma, size=int(n))

    # Noise scale solved from the population SNR, not the sample one
    var_mu = signal_variance(beta, Sigma)
    sigma = float(np.sqrt(var_mu / SNR))

    y = X @ beta + rng.standard_normal(int(n)) * sigma

    return SyntheticDataset(X=X, y=y, sigma=sigma, Sigma=Sigma)
