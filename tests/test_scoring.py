"""
Tests for support-recovery scores.
"""
import numpy as np
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sparse_recovery import (
    align_estimate,
    var_retention,
    var_identification,
    var_nonzero,
    score_selection,
    EstimateRecord,
    DimensionMismatchError,
)


class TestAlignEstimate:
    """Tests for binarization and intercept stripping."""

    def test_binarizes(self):
        binary, _ = align_estimate([0.0, -0.3, 2.0], [1, 0, 1])
        np.testing.assert_array_equal(binary, [0, 1, 1])

    def test_strips_leading_intercept(self):
        binary, _ = align_estimate([5.0, 0.0, 1.2, 0.0], [1, 0, 1])
        np.testing.assert_array_equal(binary, [0, 1, 0])

    def test_irreconcilable_length(self):
        with pytest.raises(DimensionMismatchError):
            align_estimate([1, 0, 1, 0, 1], [1, 0, 1])

    def test_too_short(self):
        with pytest.raises(DimensionMismatchError):
            align_estimate([1, 0], [1, 0, 1])


class TestScorers:
    """Tests for retention, identification and nonzero counts."""

    @pytest.fixture
    def binary_beta(self):
        return np.array([1.0, 0.0, 1.0, 0.0, 1.0])

    def test_perfect_estimate(self, binary_beta):
        estimated = binary_beta.copy()
        assert var_retention(estimated, binary_beta) == 3
        assert var_identification(estimated, binary_beta) == 5
        assert var_nonzero(estimated, binary_beta) == 3

    def test_coefficients_not_just_ones(self, binary_beta):
        """Any nonzero estimate counts as selected."""
        estimated = np.array([0.4, 0.0, -2.1, 0.0, 0.01])
        assert var_retention(estimated, binary_beta) == 3
        assert var_identification(estimated, binary_beta) == 5

    def test_intercept_example(self, binary_beta):
        """[0, 1, 1, 0, 0, 1] minus its intercept aligns to [1, 1, 0, 0, 1]."""
        estimated = [0, 1, 1, 0, 0, 1]
        assert var_retention(estimated, binary_beta) == 2
        assert var_identification(estimated, binary_beta) == 3
        assert var_nonzero(estimated, binary_beta) == 3

    def test_intercept_value_ignored(self, binary_beta):
        """A nonzero intercept never counts as a selected variable."""
        estimated = [7.5, 0, 0, 0, 0, 0]
        assert var_nonzero(estimated, binary_beta) == 0
        assert var_retention(estimated, binary_beta) == 0
        assert var_identification(estimated, binary_beta) == 2

    def test_empty_selection(self, binary_beta):
        estimated = np.zeros(5)
        assert var_retention(estimated, binary_beta) == 0
        assert var_identification(estimated, binary_beta) == 2
        assert var_nonzero(estimated, binary_beta) == 0

    def test_select_everything(self, binary_beta):
        estimated = np.ones(5)
        assert var_retention(estimated, binary_beta) == 3
        assert var_identification(estimated, binary_beta) == 3
        assert var_nonzero(estimated, binary_beta) == 5

    def test_weak_beta_identification_is_literal(self):
        """Decaying coefficients never equal a 0/1 selection status."""
        beta = np.array([1.0, 1.0, 0.5, 0.25])
        estimated = np.array([0.9, 1.1, 0.4, 0.0])
        assert var_retention(estimated, beta) == 2
        assert var_identification(estimated, beta) == 2
        assert var_nonzero(estimated, beta) == 3

    def test_retention_counts_only_unit_coefficients(self):
        beta = np.array([1.0, 0.5, 0.0])
        assert var_retention([1, 1, 1], beta) == 1

    def test_return_types(self, binary_beta):
        assert isinstance(var_retention(binary_beta, binary_beta), int)
        assert isinstance(var_identification(binary_beta, binary_beta), int)
        assert isinstance(var_nonzero(binary_beta, binary_beta), int)


class TestScoreSelection:
    """Tests for score_selection."""

    def test_builds_record(self):
        record = score_selection([1, 0, 1], [1, 1, 0], error_metric=0.75)
        assert record == EstimateRecord(retention=1, identification=1, nonzero=2,
                                        error_metric=0.75)

    @pytest.mark.parametrize("err", [None, np.inf, np.nan])
    def test_undefined_error_is_none(self, err):
        record = score_selection([0, 0, 0], [1, 1, 0], error_metric=err)
        assert record.error_metric is None

    def test_record_is_immutable(self):
        record = score_selection([1, 0], [1, 0], 1.0)
        with pytest.raises(AttributeError):
            record.retention = 5

    def test_mismatch_propagates(self):
        with pytest.raises(DimensionMismatchError):
            score_selection([1, 0, 1, 1, 1], [1, 0, 1], 1.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
