"""
Tests for aggregation utilities.
"""
import numpy as np
import pandas as pd
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sparse_recovery import (
    EstimateRecord,
    retention_frequency,
    error_rate,
    records_to_frame,
    summarize_results,
    AllMissingError,
    InvalidParameterError,
)
from sparse_recovery.aggregation import records_by_group, SUMMARY_COLUMNS


class TestErrorRate:
    """Tests for error_rate."""

    def test_infinity_is_missing(self):
        assert error_rate([np.inf, 2.0, 4.0]) == 3.0

    def test_none_and_nan_are_missing(self):
        assert error_rate([None, 1.0, np.nan, 3.0]) == 2.0

    def test_all_missing(self):
        with pytest.raises(AllMissingError):
            error_rate([None, np.inf, np.nan])

    def test_empty(self):
        with pytest.raises(AllMissingError):
            error_rate([])


class TestRetentionFrequency:
    """Tests for retention_frequency."""

    @pytest.fixture
    def records(self):
        return [
            EstimateRecord(retention=1, identification=7, nonzero=3, error_metric=2.0),
            EstimateRecord(retention=3, identification=9, nonzero=5, error_metric=None),
        ]

    def test_percentage(self, records):
        """Mean raw retention 2 of a true sparsity of 4 is 50 percent."""
        means = retention_frequency(records, true_sparsity=4)
        assert means['retention'] == pytest.approx(50.0)

    def test_other_fields_are_means(self, records):
        means = retention_frequency(records, true_sparsity=4)
        assert means['identification'] == pytest.approx(8.0)
        assert means['nonzero'] == pytest.approx(4.0)
        assert means['error_metric'] == pytest.approx(2.0)

    def test_sparsity_is_explicit(self, records):
        """Changing true_sparsity changes the percentage; no hidden state."""
        assert retention_frequency(records, 2)['retention'] == pytest.approx(100.0)
        assert retention_frequency(records, 8)['retention'] == pytest.approx(25.0)

    def test_invalid_sparsity(self, records):
        with pytest.raises(InvalidParameterError):
            retention_frequency(records, 0)

    def test_no_records(self):
        with pytest.raises(AllMissingError):
            retention_frequency([], 4)


class TestTables:
    """Tests for the results and summary tables."""

    @pytest.fixture
    def results(self):
        tagged = [
            (1.0, 'Lasso', 0, EstimateRecord(2, 8, 3, 1.0)),
            (1.0, 'Lasso', 1, EstimateRecord(4, 10, 5, np.inf)),
            (1.0, 'RF', 0, EstimateRecord(0, 6, 0, None)),
            (1.0, 'RF', 1, EstimateRecord(2, 8, 2, 3.0)),
            (2.0, 'Lasso', 0, EstimateRecord(4, 10, 4, 0.5)),
            (2.0, 'Lasso', 1, EstimateRecord(4, 10, 4, 0.7)),
        ]
        return records_to_frame(tagged)

    def test_results_columns(self, results):
        assert list(results.columns) == ['SNR', 'Method', 'Replication', 'Retention',
                                         'Identification', 'Nonzero', 'Prediction']
        assert len(results) == 6

    def test_missing_error_is_nan(self, results):
        assert results['Prediction'].isna().sum() == 2

    def test_summary_columns(self, results):
        summary = summarize_results(results, true_sparsity=4)
        assert list(summary.columns) == SUMMARY_COLUMNS
        assert len(summary) == 3

    def test_summary_values(self, results):
        summary = summarize_results(results, true_sparsity=4)
        row = summary[(summary['SNR'] == 1.0) & (summary['Method'] == 'Lasso')].iloc[0]

        assert row['Mean_Ret'] == pytest.approx(75.0)
        assert row['SD_Ret'] == pytest.approx(np.std([50.0, 100.0], ddof=1))
        assert row['Mean_Zero'] == pytest.approx(4.0)
        assert row['SD_Zero'] == pytest.approx(np.sqrt(2.0))
        assert row['Mean_Pred'] == pytest.approx(1.0)
        assert np.isnan(row['SD_Pred'])

    def test_summary_treats_infinity_as_missing(self):
        results = pd.DataFrame({
            'SNR': [1.0, 1.0, 1.0],
            'Method': ['RF'] * 3,
            'Retention': [1, 1, 1],
            'Nonzero': [1, 1, 1],
            'Prediction': [np.inf, 2.0, 4.0],
        })
        summary = summarize_results(results, true_sparsity=2)
        assert summary['Mean_Pred'].iloc[0] == pytest.approx(3.0)

    def test_summary_missing_column(self, results):
        with pytest.raises(InvalidParameterError):
            summarize_results(results.drop(columns=['Nonzero']), true_sparsity=4)

    def test_records_by_group(self, results):
        groups = records_by_group(results)
        assert [(snr, method) for snr, method, _ in groups] == [
            (1.0, 'Lasso'), (1.0, 'RF'), (2.0, 'Lasso')
        ]
        _, _, rf_records = groups[1]
        assert rf_records[0].error_metric is None
        assert rf_records[1] == EstimateRecord(2, 8, 2, 3.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
