"""
Aggregation of per-replicate scores into summary tables.

The flat results table has one row per (SNR, Method, Replication) with columns
Retention, Identification, Nonzero and Prediction (the error metric, NaN when
undefined). The summary table has one row per (SNR, Method) group with columns
Mean_Ret, Mean_Zero, Mean_Pred, SD_Ret, SD_Zero, SD_Pred, retention given as a
percentage of the true sparsity.
"""

from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from .exceptions import AllMissingError, InvalidParameterError
from .records import EstimateRecord


RESULT_COLUMNS = ['SNR', 'Method', 'Replication', 'Retention',
                  'Identification', 'Nonzero', 'Prediction']

SUMMARY_COLUMNS = ['SNR', 'Method', 'Mean_Ret', 'Mean_Zero', 'Mean_Pred',
                   'SD_Ret', 'SD_Zero', 'SD_Pred']


def _check_sparsity(true_sparsity):
    if not true_sparsity > 0:
        raise InvalidParameterError(
            f"true_sparsity must be positive to express retention as a percentage, "
            f"got {true_sparsity}"
        )


def _as_error(value) -> float:
    """Error metric as float, NaN for None and non-finite values."""
    if value is None:
        return np.nan
    value = float(value)
    return value if np.isfinite(value) else np.nan


def retention_frequency(records: Iterable[EstimateRecord], true_sparsity: int) -> pd.Series:
    """
    Mean scores across replicates, retention as a percentage.

    Parameters
    ----------
    records : iterable of EstimateRecord
        Scores of one method at one SNR.
    true_sparsity : int
        Number of strongly significant coefficients. Passed explicitly.

    Returns
    -------
    means : pd.Series
        Index retention (percent), identification, nonzero, error_metric.
        Missing error metrics are skipped in their mean.

    Examples
    --------
    >>> recs = [EstimateRecord(2, 8, 3, 1.0), EstimateRecord(2, 9, 2, 1.5)]
    >>> retention_frequency(recs, true_sparsity=4)['retention']
    50.0
    """
    _check_sparsity(true_sparsity)
    records = list(records)
    if not records:
        raise AllMissingError("No records to average")

    df = pd.DataFrame([r.to_dict() for r in records])
    df['error_metric'] = df['error_metric'].map(_as_error)
    means = df.mean(skipna=True)
    means['retention'] = means['retention'] / true_sparsity * 100
    return means


def error_rate(errors: Iterable[Optional[float]]) -> float:
    """
    Mean error ignoring missing values.

    None, NaN and infinite entries are missing; infinity is how some forest
    implementations report the OOB error of an empty model.

    Raises
    ------
    AllMissingError
        If every value is missing.

    Examples
    --------
    >>> error_rate([float('inf'), 2.0, 4.0])
    3.0
    """
    values = np.array([_as_error(e) for e in errors], dtype=float)
    valid = values[~np.isnan(values)]
    if valid.size == 0:
        raise AllMissingError("Every error metric is missing; the mean is undefined")
    return float(valid.mean())


def records_to_frame(tagged_records: Iterable[tuple]) -> pd.DataFrame:
    """
    Flatten tagged records into the results table.

    Parameters
    ----------
    tagged_records : iterable of (snr, method, replication, EstimateRecord)

    Returns
    -------
    pd.DataFrame
        Columns SNR, Method, Replication, Retention, Identification, Nonzero,
        Prediction.
    """
    rows = []
    for snr, method, replication, record in tagged_records:
        rows.append({
            'SNR': float(snr),
            'Method': method,
            'Replication': int(replication),
            'Retention': record.retention,
            'Identification': record.identification,
            'Nonzero': record.nonzero,
            'Prediction': _as_error(record.error_metric),
        })
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def summarize_results(results: pd.DataFrame, true_sparsity: int) -> pd.DataFrame:
    """
    Per (SNR, Method) means and standard deviations.

    Infinite Prediction values are treated as missing. Standard deviations
    use ddof=1 and are NaN for single-replicate groups.

    Parameters
    ----------
    results : pd.DataFrame
        Results table as returned by ``records_to_frame`` or ``run_study``.
    true_sparsity : int
        Number of strongly significant coefficients.

    Returns
    -------
    summary : pd.DataFrame
        Columns SNR, Method, Mean_Ret, Mean_Zero, Mean_Pred, SD_Ret, SD_Zero,
        SD_Pred.
    """
    _check_sparsity(true_sparsity)
    missing = {'SNR', 'Method', 'Retention', 'Nonzero', 'Prediction'} - set(results.columns)
    if missing:
        raise InvalidParameterError(f"Results table lacks columns: {sorted(missing)}")

    df = (
        results
        .assign(
            Retention=lambda d: d['Retention'] / true_sparsity * 100,
            Prediction=lambda d: d['Prediction'].replace([np.inf, -np.inf], np.nan),
        )
    )

    summary = (
        df.groupby(['SNR', 'Method'], sort=True)
        .agg(
            Mean_Ret=('Retention', 'mean'),
            Mean_Zero=('Nonzero', 'mean'),
            Mean_Pred=('Prediction', 'mean'),
            SD_Ret=('Retention', 'std'),
            SD_Zero=('Nonzero', 'std'),
            SD_Pred=('Prediction', 'std'),
        )
        .reset_index()
    )
    return summary[SUMMARY_COLUMNS]


def records_by_group(results: pd.DataFrame) -> List[tuple]:
    """Group the results table back into (snr, method, [EstimateRecord, ...]) tuples."""
    groups = []
    for (snr, method), group in results.groupby(['SNR', 'Method'], sort=True):
        records = [
            EstimateRecord(
                retention=int(row.Retention),
                identification=int(row.Identification),
                nonzero=int(row.Nonzero),
                error_metric=None if np.isnan(row.Prediction) else float(row.Prediction),
            )
            for row in group.itertuples(index=False)
        ]
        groups.append((snr, method, records))
    return groups
