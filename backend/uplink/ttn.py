"""Network-server console style wrapper around the record decoder.

Mirrors the uplink decoder contract used by LoRaWAN network consoles:
input ``{"bytes": [...], "fPort": n}``, output ``{"data": {...}}`` with the
console's field names, and ``{"data": None}`` for a port we do not own.
"""

from __future__ import annotations

from typing import Any

from .config import DEFAULT_PORT
from .record import DecodedRecord, TrailingPolicy, decode_record

# record field name -> console field name
CONSOLE_NAMES = {
    "battery_v": "Vbat",
    "system_v": "VDD",
    "boot": "boot",
    "temp_c": "t",
    "rh_pct": "rh",
    "bus_v": "Vbus",
    "probe_temp_c": "Tprobe",
}


def to_console(record: DecodedRecord) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, value in record.values.items():
        if name == "light_wm2":
            out["irradiance"] = {"White": value}
        else:
            out[CONSOLE_NAMES[name]] = value

    derived = record.derived()
    if derived is not None:
        out["tDew"] = derived.dew_point_c
        out["tHeatIndexC"] = derived.heat_index_c
    return out


def decode_uplink(
    uplink: dict[str, Any],
    *,
    port: int = DEFAULT_PORT,
    trailing: TrailingPolicy | str = TrailingPolicy.IGNORE,
) -> dict[str, Any]:
    if uplink.get("fPort") != port:
        return {"data": None}
    record = decode_record(bytes(uplink.get("bytes") or b""), trailing=trailing)
    return {"data": to_console(record)}
