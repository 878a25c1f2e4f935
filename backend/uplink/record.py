# record.py
# Bitmap-gated uplink record: one flag byte, then the present fields in bit order.

from __future__ import annotations

import enum
import logging
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from .derived import DerivedValues, compute_derived
from .errors import MalformedRecord, TrailingData, TruncatedRecord
from .scalars import (
    decode_signed_fixed_point,
    decode_uflt16,
    decode_unsigned_fixed_point,
    encode_signed_fixed_point,
    encode_uflt16,
    encode_unsigned_fixed_point,
)

logger = logging.getLogger(__name__)

VOLT_SCALE = 1 / 4096
TEMP_SCALE = 1 / 256
RH_SCALE = 100 / 65535
# light arrives in W/m2 and travels as a uflt16 fraction of 2**24
LIGHT_SCALE = float(1 << 24)

RESERVED_BIT = 7


class TrailingPolicy(str, enum.Enum):
    IGNORE = "ignore"
    REJECT = "reject"


@dataclass(frozen=True)
class Readings:
    """One reporting cycle of sensor values; ``None`` means not measured."""

    battery_v: Optional[float] = None
    system_v: Optional[float] = None
    boot: Optional[int] = None
    temp_c: Optional[float] = None
    rh_pct: Optional[float] = None
    light_wm2: Optional[float] = None
    bus_v: Optional[float] = None
    probe_temp_c: Optional[float] = None

    def as_dict(self) -> dict[str, float]:
        return {name: value for name, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class Reading:
    name: str; bit: int; value: float; unit: str


# -------------------- per-field codecs --------------------

def _volts_out(r: Readings, name: str) -> bytes:
    return encode_signed_fixed_point(getattr(r, name), VOLT_SCALE, 2)


def _volts_in(data: bytes) -> tuple[float, ...]:
    return (decode_signed_fixed_point(data, VOLT_SCALE),)


def _boot_out(r: Readings, name: str) -> bytes:
    return bytes([int(r.boot) % 256])


def _boot_in(data: bytes) -> tuple[float, ...]:
    return (data[0],)


def _temp_rh_out(r: Readings, name: str) -> bytes:
    return encode_signed_fixed_point(r.temp_c, TEMP_SCALE, 2) + encode_unsigned_fixed_point(r.rh_pct, RH_SCALE, 2)


def _temp_rh_in(data: bytes) -> tuple[float, ...]:
    return decode_signed_fixed_point(data[:2], TEMP_SCALE), decode_unsigned_fixed_point(data[2:], RH_SCALE)


def _light_out(r: Readings, name: str) -> bytes:
    return encode_uflt16(r.light_wm2 / LIGHT_SCALE).to_bytes(2, "big")


def _light_in(data: bytes) -> tuple[float, ...]:
    return (decode_uflt16(int.from_bytes(data, "big")) * LIGHT_SCALE,)


def _temp_out(r: Readings, name: str) -> bytes:
    return encode_signed_fixed_point(getattr(r, name), TEMP_SCALE, 2)


def _temp_in(data: bytes) -> tuple[float, ...]:
    return (decode_signed_fixed_point(data, TEMP_SCALE),)


@dataclass(frozen=True)
class FieldSpec:
    bit: int; name: str; width: int; values: tuple[str, ...]; units: tuple[str, ...]
    encode: Callable[[Readings, str], bytes]
    decode: Callable[[bytes], tuple[float, ...]]

    @property
    def mask(self) -> int:
        return 1 << self.bit

    def present_in(self, readings: Readings) -> bool:
        return all(getattr(readings, v) is not None for v in self.values)


# Shared verbatim by encoder and decoder; order is wire order.
FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(0, "battery", 2, ("battery_v",), ("V",), _volts_out, _volts_in),
    FieldSpec(1, "system", 2, ("system_v",), ("V",), _volts_out, _volts_in),
    FieldSpec(2, "boot", 1, ("boot",), ("-",), _boot_out, _boot_in),
    FieldSpec(3, "temp_rh", 4, ("temp_c", "rh_pct"), ("°C", "%RH"), _temp_rh_out, _temp_rh_in),
    FieldSpec(4, "light", 2, ("light_wm2",), ("W/m²",), _light_out, _light_in),
    FieldSpec(5, "bus", 2, ("bus_v",), ("V",), _volts_out, _volts_in),
    FieldSpec(6, "probe", 2, ("probe_temp_c",), ("°C",), _temp_out, _temp_in),
)


def record_length(bitmap: int) -> int:
    """Total bytes a record with ``bitmap`` occupies, flag byte included."""

    return 1 + sum(spec.width for spec in FIELDS if bitmap & spec.mask)


# -------------------- encoder --------------------

def encode_record(readings: Readings) -> bytes:
    """
    Layout: [bitmap u8][field 0]...[field 6], only fields whose bit is set.
    A field is sent only when all of its values are supplied, so a lone
    temperature or humidity is dropped. Never raises for numeric input;
    out-of-range values saturate.
    """
    bitmap = 0
    body = bytearray()
    for spec in FIELDS:
        if not spec.present_in(readings):
            continue
        chunk = spec.encode(readings, spec.values[0])
        bitmap |= spec.mask
        body += chunk
    return bytes([bitmap]) + bytes(body)


# -------------------- decoder --------------------

@dataclass(frozen=True)
class DecodedRecord:
    bitmap: int
    fields: Mapping[str, Reading]

    @property
    def values(self) -> dict[str, float]:
        return {name: r.value for name, r in self.fields.items()}

    @property
    def present_bits(self) -> frozenset[int]:
        return frozenset(r.bit for r in self.fields.values())

    def to_readings(self) -> Readings:
        return Readings(**self.values)

    def derived(self) -> DerivedValues | None:
        """Dew point and heat index, or None unless temperature and humidity were sent."""
        if "temp_c" not in self.fields or "rh_pct" not in self.fields:
            return None
        return compute_derived(self.fields["temp_c"].value, self.fields["rh_pct"].value)


def decode_record(payload: bytes, *, trailing: TrailingPolicy | str = TrailingPolicy.IGNORE) -> DecodedRecord:
    """Parse ``payload`` into the fields its bitmap announces.

    All-or-nothing: the lengths are checked before any field is built, so a
    short buffer raises :class:`TruncatedRecord` without partial output.
    Bit 7 is reserved and ignored. Extra bytes after the last field are
    ignored or raise :class:`TrailingData` according to ``trailing``.
    """
    policy = TrailingPolicy(trailing)
    payload = bytes(payload)
    if len(payload) < 1:
        raise MalformedRecord()

    bitmap = payload[0]
    if bitmap & (1 << RESERVED_BIT):
        logger.debug("Reserved bit set in bitmap 0x%02X; ignoring", bitmap)

    cursor = 1
    slices: list[tuple[FieldSpec, bytes]] = []
    for spec in FIELDS:
        if not bitmap & spec.mask:
            continue
        available = len(payload) - cursor
        if available < spec.width:
            raise TruncatedRecord(spec.name, spec.width, available)
        slices.append((spec, payload[cursor:cursor + spec.width]))
        cursor += spec.width

    extra = len(payload) - cursor
    if extra:
        if policy is TrailingPolicy.REJECT:
            raise TrailingData(extra)
        logger.warning("Ignoring %d trailing byte(s) after record with bitmap 0x%02X", extra, bitmap)

    out: dict[str, Reading] = {}
    for spec, chunk in slices:
        for name, unit, value in zip(spec.values, spec.units, spec.decode(chunk)):
            out[name] = Reading(name=name, bit=spec.bit, value=value, unit=unit)

    logger.debug("Decoded record bitmap=0x%02X fields=%s", bitmap, list(out))
    return DecodedRecord(bitmap=bitmap & ~(1 << RESERVED_BIT), fields=MappingProxyType(out))


def parse_hex(text: str) -> bytes:
    """Accept "3D 43 A7", "3d43a7" or "3D-43-A7"."""
    cleaned = "".join(ch for ch in text if ch not in " -:\t\n")
    return bytes.fromhex(cleaned)


def to_hex(payload: bytes) -> str:
    return payload.hex().upper()
