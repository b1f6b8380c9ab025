"""
Monte Carlo study loop.

For every SNR value and replication a fresh dataset is simulated from one
fixed coefficient vector, every configured method is fitted and scored, and
the scores are collected into the flat results table.

Seeds are derived from ``base_seed`` so the same configuration reproduces the
same table: replication r at SNR index i uses seed
``base_seed + i * n_replications + r`` for the data and the same seed for
the method's internal randomness.
"""

import time
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd

from .aggregation import (
    error_rate,
    records_by_group,
    records_to_frame,
    retention_frequency,
    summarize_results,
)
from .coefficients import make_beta, true_sparsity
from .data import simulate
from .estimators import METHODS, make_selector
from .exceptions import AllMissingError, InvalidParameterError
from .records import StudyConfig


def replicate_seed(config: StudyConfig, snr_index: int, replication: int) -> int:
    """Seed for one (SNR, replication) cell."""
    return int(config.base_seed + snr_index * config.n_replications + replication)


def study_beta(config: StudyConfig) -> np.ndarray:
    """True coefficient vector for a configuration."""
    return make_beta(config.beta_type, config.p, config.sparsity, config.decay_value)


def run_replicate(config: StudyConfig, beta, snr: float, seed: int):
    """
    Simulate one dataset and score every configured method on it.

    Returns
    -------
    list of (method, EstimateRecord)
    """
    dataset = simulate(config.n, config.p, config.rho, beta, snr, random_state=seed)
    scored = []
    for method in config.methods:
        selector = make_selector(
            method,
            cv=config.cv_folds,
            n_jobs=config.n_jobs,
            random_state=seed,
            verbose=max(config.verbose - 1, 0),
        )
        scored.append((method, selector.evaluate(dataset, beta)))
    return scored


def run_study(config: Optional[StudyConfig] = None) -> Tuple[pd.DataFrame, np.ndarray]:
    """
    Run the full simulation study.

    Parameters
    ----------
    config : StudyConfig or None
        Study configuration. None uses the defaults.

    Returns
    -------
    results : pd.DataFrame
        One row per (SNR, Method, Replication).
    beta : ndarray
        True coefficient vector used for every replicate.
    """
    config = (config or StudyConfig()).validate()
    unknown = [m for m in config.methods if m not in METHODS]
    if unknown:
        raise InvalidParameterError(
            f"Unknown methods {unknown}. Valid methods are: {list(METHODS)}"
        )

    beta = study_beta(config)

    if config.verbose >= 1:
        print("=" * 60)
        print("Variable selection simulation")
        print("=" * 60)
        print(f"  n={config.n}, p={config.p}, rho={config.rho}")
        print(f"  beta ({config.beta_type}): {np.round(beta, 3).tolist()}")
        print(f"  SNR values: {[float(s) for s in config.snr_values]}")
        print(f"  Replications: {config.n_replications}")
        print(f"  Methods: {config.methods}")
        print()

    tagged = []
    start_time = time.time()
    n_snr = len(config.snr_values)

    for i, snr in enumerate(config.snr_values):
        for r in range(config.n_replications):
            seed = replicate_seed(config, i, r)
            for method, record in run_replicate(config, beta, snr, seed):
                tagged.append((snr, method, r, record))
            if config.verbose >= 2:
                print(f"    SNR={snr:.3f} replication {r + 1}/{config.n_replications} done")

        if config.verbose >= 1:
            elapsed = time.time() - start_time
            print(f"  SNR {i + 1}/{n_snr} ({snr:.3f}) finished | "
                  f"Elapsed: {elapsed / 60:.1f} min")

    results = records_to_frame(tagged)

    if config.verbose >= 1:
        print(f"\nTotal time: {(time.time() - start_time) / 60:.1f} minutes")

    return results, beta


def analyze_results(results: pd.DataFrame, beta) -> Dict:
    """
    Summary statistics of a results table.

    Returns
    -------
    dict with keys
        'summary'    : AggregatedSummary table (per SNR and method)
        'frequency'  : per (SNR, method) mean scores, retention in percent,
                       and the error rate (NaN when every fit lacked one)
        'true_sparsity' : number of strongly significant coefficients
    """
    sparsity = true_sparsity(beta)
    summary = summarize_results(results, sparsity)

    rows = []
    for snr, method, records in records_by_group(results):
        means = retention_frequency(records, sparsity)
        try:
            err = error_rate(r.error_metric for r in records)
        except AllMissingError:
            err = np.nan
        rows.append({
            'SNR': snr,
            'Method': method,
            'Retention_pct': means['retention'],
            'Identification': means['identification'],
            'Nonzero': means['nonzero'],
            'Error_rate': err,
        })

    return {
        'summary': summary,
        'frequency': pd.DataFrame(rows),
        'true_sparsity': sparsity,
    }


def print_summary(analysis: Dict):
    """Print the per-method frequency table."""
    freq = analysis['frequency']

    print("\n" + "=" * 72)
    print("SIMULATION RESULTS SUMMARY")
    print(f"True sparsity: {analysis['true_sparsity']}")
    print("=" * 72)
    print(f"{'SNR':>8} {'Method':<15} {'Ret %':>8} {'Ident':>8} {'Nonzero':>8} {'Error':>10}")
    print("-" * 72)
    for row in freq.itertuples(index=False):
        print(f"{row.SNR:>8.3f} {row.Method:<15} {row.Retention_pct:>8.1f} "
              f"{row.Identification:>8.2f} {row.Nonzero:>8.2f} {row.Error_rate:>10.4f}")
    print("=" * 72)
