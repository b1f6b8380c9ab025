"""
Sparse Recovery Simulation
==========================

Monte Carlo comparison of variable-selection methods on synthetic linear
regression data with correlated covariates, across signal-to-noise ratios and
sparsity patterns.

Main Components
---------------
simulate : Correlated design, SNR-calibrated noise and response
beta_equally_spaced, beta_leading_block, beta_weak_decay : True coefficients
var_retention, var_identification, var_nonzero : Support-recovery scores
LassoSelector, RandomForestSelector : Selection methods under comparison
retention_frequency, error_rate, summarize_results : Aggregation
run_study : Full SNR x replication x method loop

Quick Start
-----------
>>> import sparse_recovery as sr
>>>
>>> beta = sr.beta_equally_spaced(p=10, s=5)
>>> data = sr.simulate(n=100, p=10, rho=0.35, beta=beta, SNR=1.0, random_state=42)
>>> record = sr.LassoSelector(rule='1se').evaluate(data, beta)
>>> print(record.retention, record.nonzero)
>>>
>>> results, beta = sr.run_study(sr.StudyConfig(n_replications=10, methods=['Lasso']))
>>> summary = sr.summarize_results(results, sr.true_sparsity(beta))
"""

from .exceptions import (
    SparseRecoveryError,
    InvalidParameterError,
    DimensionMismatchError,
    AllMissingError,
)
from .coefficients import (
    beta_equally_spaced,
    beta_leading_block,
    beta_weak_decay,
    make_beta,
    true_sparsity,
    BETA_GENERATORS,
)
from .data import SyntheticDataset, simulate, toeplitz_covariance, signal_variance
from .records import SimulationConfig, EstimateRecord, StudyConfig, DEFAULT_SNR_VALUES
from .scoring import (
    align_estimate,
    var_retention,
    var_identification,
    var_nonzero,
    score_selection,
)
from .estimators import LassoSelector, RandomForestSelector, METHODS, make_selector
from .aggregation import (
    retention_frequency,
    error_rate,
    records_to_frame,
    summarize_results,
)
from .study import run_study, analyze_results, print_summary

__version__ = "0.1.0"

__all__ = [
    # Errors
    'SparseRecoveryError',
    'InvalidParameterError',
    'DimensionMismatchError',
    'AllMissingError',

    # Coefficients
    'beta_equally_spaced',
    'beta_leading_block',
    'beta_weak_decay',
    'make_beta',
    'true_sparsity',
    'BETA_GENERATORS',

    # Data generation
    'SyntheticDataset',
    'simulate',
    'toeplitz_covariance',
    'signal_variance',

    # Records and configuration
    'SimulationConfig',
    'EstimateRecord',
    'StudyConfig',
    'DEFAULT_SNR_VALUES',

    # Scoring
    'align_estimate',
    'var_retention',
    'var_identification',
    'var_nonzero',
    'score_selection',

    # Estimators
    'LassoSelector',
    'RandomForestSelector',
    'METHODS',
    'make_selector',

    # Aggregation
    'retention_frequency',
    'error_rate',
    'records_to_frame',
    'summarize_results',

    # Study
    'run_study',
    'analyze_results',
    'print_summary',
]
