from app.modeling.cascade import ForecastRow
from app.modeling.dashboard import ForecastQuery
from app.modeling.performance import ActualRecord, compare_actuals


FORECASTS = [
    ForecastRow("NORAM", "INBOUND", 2024, 1, 100, 500, 80000, 20000),
    ForecastRow("NORAM", "INBOUND", 2024, 2, 100, 500, 200000, 0),
    ForecastRow("EMESA_NORTH", "EVENT", 2024, 1, 10, 50, 5000, 0),
]

ACTUALS = [
    ActualRecord("NORAM", "INBOUND", 2024, 1, 90, 480, 110000),
    ActualRecord("NORAM", "INBOUND", 2024, 2, 100, 500, 180000),
]


def test_variance_per_quarter_and_total():
    report = compare_actuals(FORECASTS, ACTUALS, ForecastQuery(region="NORAM"))
    q1, q2 = report.quarters
    assert (q1.label, q1.predicted_revenue, q1.actual_revenue) == ("2024-Q1", 100000, 110000)
    assert q1.variance == 10000
    assert q1.variance_pct_bp == 1000
    assert q2.variance == -20000
    assert q2.variance_pct_bp == -1000
    assert report.total_predicted == 300000
    assert report.total_actual == 290000
    assert report.total_variance == -10000
    assert report.total_variance_pct_bp == -333
    assert report.accuracy_bp == 9667


def test_actuals_without_forecast():
    report = compare_actuals([], ACTUALS)
    assert report.total_predicted == 0
    assert report.accuracy_bp == 0
    assert all(q.variance_pct_bp == 0 for q in report.quarters)


def test_unfiltered_report_includes_every_region():
    report = compare_actuals(FORECASTS, ACTUALS)
    assert report.total_predicted == 305000
