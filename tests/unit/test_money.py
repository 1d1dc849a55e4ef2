import pytest

from app.modeling.money import (
    bp_to_percent,
    dollars_to_cents,
    div_round_half_up,
    from_display,
    multiplier_to_bp,
    opps_to_scaled,
    percent_to_bp,
    scale_bp,
    scaled_to_opps,
    to_display,
)


def test_div_round_half_up_rounds_halves_away_from_zero():
    assert div_round_half_up(5, 10) == 1
    assert div_round_half_up(4, 10) == 0
    assert div_round_half_up(15, 10) == 2
    assert div_round_half_up(-5, 10) == -1
    assert div_round_half_up(-15, 10) == -2
    assert div_round_half_up(0, 7) == 0


def test_div_round_half_up_zero_denominator():
    with pytest.raises(ZeroDivisionError):
        div_round_half_up(1, 0)


def test_display_conversions():
    assert dollars_to_cents(12.345) == 1235
    assert percent_to_bp(5.8) == 580
    assert bp_to_percent(580) == 5.8
    assert multiplier_to_bp(1.1) == 11000
    assert opps_to_scaled(5.8) == 580
    assert scaled_to_opps(580) == 5.8


def test_scale_bp():
    assert scale_bp(500, 1.2) == 600
    assert scale_bp(580, 1.1) == 638
    assert scale_bp(580, 0) == 0


def test_unit_dispatch():
    assert to_display(12345, "cents") == 123.45
    assert from_display(123.45, "cents") == 12345
    assert from_display(1.5, "multiplier_bp") == 15000
    with pytest.raises(ValueError):
        to_display(1, "furlongs")
    with pytest.raises(ValueError):
        from_display(1, "furlongs")


def test_non_finite_values_do_not_round():
    for bad in (float("nan"), float("inf"), float("-inf")):
        with pytest.raises(ValueError):
            percent_to_bp(bad)
        with pytest.raises(ValueError):
            dollars_to_cents(bad)
