import math

import pytest

from app.modeling.cascade import ForecastInputs, total_revenue
from app.modeling.conversion import ConversionModel, ConversionRate, DealEconomics
from app.modeling.errors import ForecastInputError
from app.modeling.history import HistoricalSqlRecord
from app.modeling.whatif import WhatIfAdjustment, change_pct_bp, evaluate_what_if


def _inputs(records=None):
    if records is None:
        records = [HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 100)]
    return ForecastInputs(
        records=tuple(records),
        model=ConversionModel(
            [ConversionRate("NORAM", "INBOUND", 580, 2500, 3000)],
            [DealEconomics("NORAM", 500000, 200000)],
        ),
    )


def test_change_pct_bp():
    assert change_pct_bp(1, 3) == 3333
    assert change_pct_bp(-10, 100) == -1000
    assert change_pct_bp(5, 0) == 0


def test_identity_adjustment_has_no_impact():
    result = evaluate_what_if(_inputs(), WhatIfAdjustment())
    assert result.adjusted == result.baseline
    assert result.impact.total_revenue_change == 0
    assert result.impact.total_opportunities_change == 0
    assert result.impact.distribution_normalized


def test_doubling_coverage_doubles_opportunities():
    impact = evaluate_what_if(_inputs(), WhatIfAdjustment(conversion_rate_multiplier=2.0)).impact
    assert impact.total_opportunities_change == 580
    assert impact.total_opportunities_change_pct_bp == 10000
    assert impact.total_opportunities_change_percent == 100.0
    assert [q.label for q in impact.quarterly] == ["2024-Q1", "2024-Q2", "2024-Q3"]


def test_revenue_is_monotonic_in_multiplier():
    inputs = _inputs([
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 1, 100),
        HistoricalSqlRecord("NORAM", "INBOUND", 2024, 2, 73),
    ])
    totals = [
        total_revenue(evaluate_what_if(inputs, WhatIfAdjustment(conversion_rate_multiplier=m)).adjusted)
        for m in (0.0, 0.5, 0.9, 1.0, 1.25, 2.0)
    ]
    assert totals == sorted(totals)


def test_zero_multiplier_removes_all_opportunities():
    impact = evaluate_what_if(_inputs(), WhatIfAdjustment(conversion_rate_multiplier=0.0)).impact
    assert impact.total_opportunities_change == -580
    assert impact.total_opportunities_change_pct_bp == -10000


def test_zero_baseline_reports_zero_percent():
    result = evaluate_what_if(_inputs([]), WhatIfAdjustment(conversion_rate_multiplier=1.5))
    assert result.baseline == ()
    assert result.impact.total_revenue_change_pct_bp == 0
    assert result.impact.total_opportunities_change_pct_bp == 0


def test_acv_adjustment_changes_revenue_not_opportunities():
    impact = evaluate_what_if(_inputs(), WhatIfAdjustment(acv_new_adjustment=100000)).impact
    assert impact.total_opportunities_change == 0
    assert impact.total_revenue_change == 145000


def test_negative_acv_is_rejected():
    with pytest.raises(ForecastInputError):
        evaluate_what_if(_inputs(), WhatIfAdjustment(acv_new_adjustment=-600000))


@pytest.mark.parametrize("multiplier", [math.inf, math.nan, -0.5])
def test_invalid_multiplier_is_rejected(multiplier):
    with pytest.raises(ForecastInputError):
        evaluate_what_if(_inputs(), WhatIfAdjustment(conversion_rate_multiplier=multiplier))


def test_distribution_shift_is_not_renormalised():
    result = evaluate_what_if(_inputs(), WhatIfAdjustment(same_quarter_adjustment=500))
    assert result.impact.distribution_total_bp == 10500
    assert not result.impact.distribution_normalized
    assert result.impact.total_opportunities_change > 0


def test_evaluation_is_deterministic():
    adj = WhatIfAdjustment(conversion_rate_multiplier=1.3, next_quarter_adjustment=-200)
    assert evaluate_what_if(_inputs(), adj) == evaluate_what_if(_inputs(), adj)
