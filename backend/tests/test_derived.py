import math

import pytest

from uplink.derived import (
    c_to_f,
    compute_derived,
    dew_point,
    f_to_c,
    heat_index,
    heat_index_f,
)


def _regression(t, rh):
    return (
        -42.379 + 2.04901523 * t + 10.14333127 * rh - 0.22475541 * t * rh
        - 0.00683783 * t * t - 0.05481717 * rh * rh + 0.00122874 * t * t * rh
        + 0.00085282 * t * rh * rh - 0.00000199 * t * t * rh * rh
    )


def test_dew_point_typical_indoor_air():
    assert dew_point(25.0, 50.0) == pytest.approx(13.86, abs=0.01)


def test_dew_point_equals_temperature_at_saturation():
    assert dew_point(18.0, 100.0) == pytest.approx(18.0, abs=1e-9)


def test_dew_point_clamps_humidity():
    assert dew_point(20.0, 0.0) == dew_point(20.0, 1.0)
    assert dew_point(20.0, -5.0) == dew_point(20.0, 1.0)
    assert dew_point(20.0, 130.0) == dew_point(20.0, 100.0)
    assert math.isfinite(dew_point(20.0, 0.0))


def test_heat_index_matches_nws_table():
    # NWS chart: 95°F at 50% RH reads 105°F
    result = heat_index_f(95.0, 50.0)
    assert result is not None
    assert abs(result - 105.0) <= 1.0


def test_heat_index_simple_formula_below_80():
    expected = 0.5 * (77.0 + 61.0 + (77.0 - 68.0) * 1.2 + 40.0 * 0.094)
    assert heat_index_f(77.0, 40.0) == pytest.approx(expected)


def test_heat_index_dry_air_adjustment():
    t, rh = 100.0, 10.0
    adjust = ((13.0 - rh) / 4.0) * math.sqrt((17.0 - abs(t - 95.0)) / 17.0)
    assert heat_index_f(t, rh) == pytest.approx(_regression(t, rh) - adjust)


def test_heat_index_humid_air_adjustment():
    t, rh = 85.0, 90.0
    adjust = ((rh - 85.0) / 10.0) * ((87.0 - t) / 5.0)
    assert heat_index_f(t, rh) == pytest.approx(_regression(t, rh) + adjust)


def test_heat_index_no_adjustment_in_middle_band():
    assert heat_index_f(95.0, 50.0) == pytest.approx(_regression(95.0, 50.0))


@pytest.mark.parametrize(
    "t_f, rh",
    [(75.0, 50.0), (127.0, 50.0), (90.0, -0.1), (90.0, 100.5)],
)
def test_heat_index_not_applicable_outside_domain(t_f, rh):
    assert heat_index_f(t_f, rh) is None


def test_heat_index_domain_uses_rounded_temperature():
    assert heat_index_f(75.5, 50.0) is not None
    assert heat_index_f(75.49, 50.0) is None
    assert heat_index_f(126.49, 0.0) is not None


def test_heat_index_not_applicable_above_reference_table():
    assert heat_index_f(126.0, 100.0) is None


def test_heat_index_celsius_wrapper():
    assert heat_index(35.0, 50.0) == pytest.approx(f_to_c(heat_index_f(95.0, 50.0)))
    assert heat_index(20.0, 50.0) is None


def test_temperature_conversions():
    assert c_to_f(35.0) == 95.0
    assert f_to_c(212.0) == 100.0


def test_compute_derived_keeps_not_applicable_distinct():
    cool = compute_derived(20.0, 60.0)
    assert cool.heat_index_c is None
    assert cool.dew_point_c == pytest.approx(dew_point(20.0, 60.0))

    hot = compute_derived(35.0, 50.0)
    assert hot.heat_index_c is not None
    assert hot.heat_index_c > 35.0


@pytest.mark.parametrize(
    "t_f, rh",
    [(math.nan, 50.0), (90.0, math.nan), (math.inf, 50.0), (90.0, -math.inf)],
)
def test_heat_index_not_applicable_for_non_finite_inputs(t_f, rh):
    assert heat_index_f(t_f, rh) is None
    assert heat_index(t_f, rh) is None


@pytest.mark.parametrize("t_c, rh", [(math.nan, 50.0), (20.0, math.nan), (math.inf, 50.0)])
def test_dew_point_rejects_non_finite_inputs(t_c, rh):
    with pytest.raises(ValueError, match="finite"):
        dew_point(t_c, rh)
