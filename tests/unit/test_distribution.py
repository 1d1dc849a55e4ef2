import pytest

from app.modeling.distribution import DEFAULT_DISTRIBUTION, TimeDistribution, split_cohort


def test_default_split_of_580():
    assert split_cohort(580, DEFAULT_DISTRIBUTION) == (516, 58, 6)


def test_independent_split_stays_within_one_unit():
    for amount in range(0, 3000):
        parts = split_cohort(amount, DEFAULT_DISTRIBUTION)
        assert abs(sum(parts) - amount) <= 1


def test_largest_remainder_conserves_total():
    for amount in range(0, 3000):
        assert sum(split_cohort(amount, DEFAULT_DISTRIBUTION, "largest_remainder")) == amount


def test_largest_remainder_breaks_ties_toward_earlier_quarter():
    even = TimeDistribution(5000, 5000, 0)
    assert split_cohort(1, even) == (1, 1, 0)
    assert split_cohort(1, even, "largest_remainder") == (1, 0, 0)


def test_unknown_split_method():
    with pytest.raises(ValueError):
        split_cohort(100, DEFAULT_DISTRIBUTION, "banker")


def test_shifted_clamps_without_renormalising():
    d = DEFAULT_DISTRIBUTION.shifted(same=2000, two=-500)
    assert d.weights == (10000, 1000, 0)
    assert d.total_bp == 11000
    assert not d.is_normalized
    assert DEFAULT_DISTRIBUTION.is_normalized
