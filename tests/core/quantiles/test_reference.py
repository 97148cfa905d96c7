"""
Tests for the reference percentile curves and the buoy error metric.
"""

import pytest
from scipy import stats

from src.core.quantiles.reference import (
    get_error,
    reference_curve,
    truncated_gaussian_distribution,
    uniform_reference_curve,
)


class TestReferenceCurves:
    def test_uniform_reference_curve(self):
        assert uniform_reference_curve(100) == list(range(101))
        curve = uniform_reference_curve(999999)
        assert curve[0] == 0
        assert curve[1] == 9999
        assert curve[50] == 499999
        assert curve[100] == 999999

    def test_reference_curve_for_uniform_distribution(self):
        assert reference_curve(stats.uniform(), 100) == list(range(101))

    def test_reference_curve_for_beta(self):
        curve = reference_curve(stats.beta(1, 5), 999999)
        assert curve[0] == 0
        assert curve[100] == 999999
        # 0.9-quantile of Beta(1, 5) is 1 - 0.1 ** 0.2
        assert curve[90] == pytest.approx((1 - 0.1**0.2) * 999999, abs=1)
        assert curve == sorted(curve)

    def test_truncated_gaussian_curve_is_symmetric(self):
        curve = reference_curve(truncated_gaussian_distribution(), 1000000)
        assert curve[0] == 0
        assert curve[50] == 500000
        assert curve[100] == 1000000
        for k in range(101):
            assert abs(curve[k] + curve[100 - k] - 1000000) <= 1


class TestGetError:
    def test_perfect_curve_has_no_error(self):
        assert get_error(uniform_reference_curve(999999), 999999) == 0.0

    def test_known_error(self):
        all_buoys = [value + 1 for value in range(101)]
        # Each buoy is off by one against a reference summing to 5050
        assert get_error(all_buoys, 100) == pytest.approx(101 / 5050)

    def test_error_is_symmetric_in_sign(self):
        reference = uniform_reference_curve(1000)
        above = [value + 5 for value in reference]
        below = [value - 5 for value in reference]
        assert get_error(above, 1000) == pytest.approx(get_error(below, 1000))

    def test_wrong_length(self):
        with pytest.raises(ValueError, match="Expected 101 buoys"):
            get_error([0, 1, 2], 100)

    def test_zero_range(self):
        with pytest.raises(ValueError, match="range_max must be positive"):
            get_error([0] * 101, 0)
