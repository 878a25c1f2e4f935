"""Quantities derived from decoded temperature and relative humidity.

Both calculations are pure functions of (°C, %RH). Dew point uses the
Magnus form with the Alduchov-Eskridge constants; heat index follows the
NWS regression including its two empirical adjustments and is only
defined where the NWS reference table has data.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

MAGNUS_C1 = 243.04
MAGNUS_C2 = 17.625

HEAT_INDEX_MIN_F = 76
HEAT_INDEX_MAX_F = 126
# the reference table stops at 183°F (rounded)
HEAT_INDEX_CEILING_F = 183.5


def c_to_f(t_c: float) -> float:
    return t_c * 9.0 / 5.0 + 32.0


def f_to_c(t_f: float) -> float:
    return (t_f - 32.0) * 5.0 / 9.0


def dew_point(t_c: float, rh_pct: float) -> float:
    """Return the dew point in °C.

    Humidity is clamped to [1, 100] %; at or below 1 % the logarithm would
    run away, so such readings are treated as 1 %. NaN or infinite inputs
    raise ValueError instead of producing a NaN dew point.
    """

    if not (math.isfinite(t_c) and math.isfinite(rh_pct)):
        raise ValueError(f"dew point needs finite inputs, got t={t_c!r} rh={rh_pct!r}")

    h = rh_pct / 100.0
    if h <= 0.01:
        h = 0.01
    elif h > 1.0:
        h = 1.0

    lnh = math.log(h)
    txc2_tpc1 = t_c * MAGNUS_C2 / (t_c + MAGNUS_C1)
    return MAGNUS_C1 * (lnh + txc2_tpc1) / (MAGNUS_C2 - lnh - txc2_tpc1)


def heat_index_f(t_f: float, rh_pct: float) -> Optional[float]:
    """NWS heat index in °F, or None where the model is not applicable.

    NaN or infinite inputs are outside the model and also give None.
    """

    if not (math.isfinite(t_f) and math.isfinite(rh_pct)):
        return None
    t_rounded = math.floor(t_f + 0.5)
    if t_rounded < HEAT_INDEX_MIN_F or t_rounded > HEAT_INDEX_MAX_F:
        return None
    if rh_pct < 0 or rh_pct > 100:
        return None

    # Steadman's simple form; the NWS uses it while its mean with t stays under 80°F
    easy = 0.5 * (t_f + 61.0 + ((t_f - 68.0) * 1.2) + (rh_pct * 0.094))
    if (easy + t_f) < 160.0:
        return easy

    t2 = t_f * t_f
    rh2 = rh_pct * rh_pct
    result = (
        -42.379
        + 2.04901523 * t_f
        + 10.14333127 * rh_pct
        - 0.22475541 * t_f * rh_pct
        - 0.00683783 * t2
        - 0.05481717 * rh2
        + 0.00122874 * t2 * rh_pct
        + 0.00085282 * t_f * rh2
        - 0.00000199 * t2 * rh2
    )

    if rh_pct < 13.0 and 80.0 <= t_f <= 112.0:
        result -= ((13.0 - rh_pct) / 4.0) * math.sqrt((17.0 - abs(t_f - 95.0)) / 17.0)
    elif rh_pct > 85.0 and 80.0 <= t_f <= 87.0:
        result += ((rh_pct - 85.0) / 10.0) * ((87.0 - t_f) / 5.0)

    if result >= HEAT_INDEX_CEILING_F:
        return None
    return result


def heat_index(t_c: float, rh_pct: float) -> Optional[float]:
    """Heat index in °C for a temperature in °C; None when not applicable."""

    result = heat_index_f(c_to_f(t_c), rh_pct)
    if result is None:
        return None
    return f_to_c(result)


@dataclass(frozen=True)
class DerivedValues:
    dew_point_c: float
    heat_index_c: Optional[float]  # None: outside the NWS model's domain


def compute_derived(t_c: float, rh_pct: float) -> DerivedValues:
    return DerivedValues(dew_point_c=dew_point(t_c, rh_pct), heat_index_c=heat_index(t_c, rh_pct))
