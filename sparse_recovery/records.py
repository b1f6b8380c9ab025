"""
Data classes for simulation configuration and per-replicate results.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Tuple

import numpy as np

from .coefficients import make_beta
from .exceptions import InvalidParameterError


# Ten SNR values log-spaced between 0.05 and 6
DEFAULT_SNR_VALUES = tuple(
    float(v) for v in np.round(np.exp(np.linspace(np.log(0.05), np.log(6), 10)), 4)
)


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters of one data-generating process."""
    n: int
    p: int
    rho: float
    SNR: float

    def __post_init__(self):
        if int(self.n) != self.n or self.n < 1:
            raise InvalidParameterError(f"n must be a positive integer, got {self.n}")
        if int(self.p) != self.p or self.p < 1:
            raise InvalidParameterError(f"p must be a positive integer, got {self.p}")
        if not 0 <= self.rho < 1:
            raise InvalidParameterError(f"rho must lie in [0, 1), got {self.rho}")
        if not self.SNR > 0:
            raise InvalidParameterError(f"SNR must be strictly positive, got {self.SNR}")


@dataclass(frozen=True)
class EstimateRecord:
    """
    Scores of one estimator on one replicate.

    ``error_metric`` is the cross-validated MSE or out-of-bag error of the
    fit, or None when it is undefined (the estimator selected no variable).
    """
    retention: int
    identification: int
    nonzero: int
    error_metric: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


@dataclass
class StudyConfig:
    """
    Configuration of a full simulation study.

    Defaults follow the reference experiment: n=100 observations, p=10
    covariates, five equally spaced true signals, rho=0.35 and ten SNR
    values between 0.05 and 6.
    """
    n: int = 100
    p: int = 10
    rho: float = 0.35
    sparsity: int = 5
    beta_type: str = 'spaced'
    decay_value: Optional[float] = None
    snr_values: Tuple[float, ...] = DEFAULT_SNR_VALUES
    n_replications: int = 100
    methods: List[str] = field(
        default_factory=lambda: ['Lasso', 'Lasso_min', 'Relaxed_Lasso', 'RF']
    )
    base_seed: int = 42
    cv_folds: int = 10
    n_jobs: int = 4
    verbose: int = 0

    def validate(self):
        """Check every field eagerly; raises InvalidParameterError."""
        if len(self.snr_values) == 0:
            raise InvalidParameterError("snr_values must not be empty")
        for snr in self.snr_values:
            SimulationConfig(n=self.n, p=self.p, rho=self.rho, SNR=snr)
        if int(self.n_replications) != self.n_replications or self.n_replications < 1:
            raise InvalidParameterError(
                f"n_replications must be a positive integer, got {self.n_replications}"
            )
        if self.sparsity < 1 or self.sparsity > self.p:
            raise InvalidParameterError(
                f"Sparsity s={self.sparsity} must lie in [1, p={self.p}]"
            )
        # Pattern-specific checks (weak decay needs p > s and a value in (0, 1))
        make_beta(self.beta_type, self.p, self.sparsity, self.decay_value)
        if self.cv_folds < 2:
            raise InvalidParameterError(f"cv_folds must be at least 2, got {self.cv_folds}")
        if not self.methods:
            raise InvalidParameterError("At least one method is required")
        return self

    def to_dict(self) -> Dict:
        d = asdict(self)
        d['snr_values'] = [float(v) for v in self.snr_values]
        return d
