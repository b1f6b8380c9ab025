"""
Tests for the true-coefficient generators.
"""
import numpy as np
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sparse_recovery import (
    beta_equally_spaced,
    beta_leading_block,
    beta_weak_decay,
    make_beta,
    true_sparsity,
    InvalidParameterError,
)


class TestEquallySpaced:
    """Tests for beta_equally_spaced."""

    def test_known_locations(self):
        """linspace(1, 10, 3) = [1, 5.5, 10] rounds to indices 1, 6, 10."""
        beta = beta_equally_spaced(10, 3)
        np.testing.assert_array_equal(beta, [1, 0, 0, 0, 0, 1, 0, 0, 0, 1])

    def test_half_rounds_to_even(self):
        """linspace(1, 4, 3) = [1, 2.5, 4]; 2.5 rounds to 2."""
        beta = beta_equally_spaced(4, 3)
        np.testing.assert_array_equal(beta, [1, 1, 0, 1])

    @pytest.mark.parametrize("p,s", [(10, 1), (10, 5), (10, 10), (7, 4), (50, 13)])
    def test_count_of_ones(self, p, s):
        """For s <= p the spacing is at least one, so no locations collapse."""
        beta = beta_equally_spaced(p, s)
        assert len(beta) == p
        assert set(np.unique(beta)) <= {0.0, 1.0}
        assert np.sum(beta) == s

    def test_zero_sparsity(self):
        beta = beta_equally_spaced(5, 0)
        np.testing.assert_array_equal(beta, np.zeros(5))

    def test_sparsity_exceeds_p(self):
        with pytest.raises(InvalidParameterError):
            beta_equally_spaced(5, 6)

    def test_read_only(self):
        beta = beta_equally_spaced(5, 2)
        with pytest.raises(ValueError):
            beta[0] = 3.0


class TestLeadingBlock:
    """Tests for beta_leading_block."""

    @pytest.mark.parametrize("p,s", [(10, 0), (10, 3), (10, 10), (1, 1)])
    def test_first_s_ones(self, p, s):
        beta = beta_leading_block(p, s)
        assert len(beta) == p
        assert np.all(beta[:s] == 1)
        assert np.all(beta[s:] == 0)
        assert np.sum(beta) == s

    def test_sparsity_exceeds_p(self):
        with pytest.raises(InvalidParameterError):
            beta_leading_block(3, 4)

    def test_invalid_p(self):
        with pytest.raises(InvalidParameterError):
            beta_leading_block(0, 0)


class TestWeakDecay:
    """Tests for beta_weak_decay."""

    def test_values(self):
        beta = beta_weak_decay(6, 2, 0.5)
        np.testing.assert_allclose(beta, [1, 1, 0.5, 0.25, 0.125, 0.0625])

    def test_tail_strictly_decreasing(self):
        beta = beta_weak_decay(20, 5, 0.8)
        tail = beta[5:]
        assert np.all(np.diff(tail) < 0)
        assert np.all(tail > 0)

    def test_no_decay_segment(self):
        """p == s leaves nothing to decay."""
        with pytest.raises(InvalidParameterError):
            beta_weak_decay(5, 5, 0.5)

    def test_sparsity_exceeds_p(self):
        with pytest.raises(InvalidParameterError):
            beta_weak_decay(5, 7, 0.5)

    @pytest.mark.parametrize("value", [0.0, 1.0, 1.5, -0.3])
    def test_value_out_of_range(self, value):
        with pytest.raises(InvalidParameterError):
            beta_weak_decay(10, 2, value)


class TestMakeBeta:
    """Tests for the dispatcher and true_sparsity."""

    def test_dispatch(self):
        np.testing.assert_array_equal(make_beta('block', 5, 2), beta_leading_block(5, 2))
        np.testing.assert_array_equal(make_beta('spaced', 5, 2), beta_equally_spaced(5, 2))
        np.testing.assert_allclose(make_beta('weak', 5, 2, 0.5), beta_weak_decay(5, 2, 0.5))

    def test_weak_requires_value(self):
        with pytest.raises(InvalidParameterError):
            make_beta('weak', 5, 2)

    def test_unknown_type(self):
        with pytest.raises(InvalidParameterError):
            make_beta('random', 5, 2)

    def test_true_sparsity_counts_ones_only(self):
        assert true_sparsity(beta_weak_decay(10, 3, 0.5)) == 3
        assert true_sparsity(beta_equally_spaced(10, 4)) == 4
        assert true_sparsity([0, 0, 0]) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
