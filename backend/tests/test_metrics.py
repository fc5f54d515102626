import math
from procurement.utils.metrics import growth_series, money, percentage, safe_div, safe_mean


def test_safe_div_zero_denominator():
    assert safe_div(10, 0) == 0.0
    assert safe_div(0, 0) == 0.0
    assert safe_div(10, 4) == 2.5


def test_percentage_guarded_and_rounded():
    assert percentage(50, 0) == 0.0
    assert percentage(1, 3) == 33.33
    assert percentage(0, 10) == 0.0
    assert not math.isnan(percentage(0, 0))


def test_safe_mean():
    assert safe_mean([]) == 0.0
    assert safe_mean([100, 200, 300]) == 200.0
    assert safe_mean(v for v in (1.0, 2.0)) == 1.5


def test_growth_series_spec_examples():
    assert growth_series([100, 150, 0, 50]) == [0, 50, -100, 0]
    assert growth_series([100, 0, 50]) == [0, -100, 0]
    assert growth_series([]) == []
    assert growth_series([42]) == [0]


def test_money_rounds_and_defaults():
    assert money(None) == 0.0
    assert money(10.005) in (10.0, 10.01)
    assert money(3) == 3.0
