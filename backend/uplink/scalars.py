# scalars.py
# Fixed-width wire codecs for engineering values (network byte order).

from __future__ import annotations

import math
import struct

_SIGNED = {1: ">b", 2: ">h"}
_UNSIGNED = {1: ">B", 2: ">H"}

UFLT16_MAX = 0xFFFF
_UFLT16_BIAS = 15
_UFLT16_FRACTION_BITS = 12


def _fmt(table: dict[int, str], width: int) -> str:
    try:
        return table[width]
    except KeyError:
        raise ValueError(f"unsupported width {width}; expected 1 or 2") from None


def _range(width: int, signed: bool) -> tuple[int, int]:
    bits = 8 * width
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def _to_int(value: float, scale: float, lo: int, hi: int) -> int:
    # NaN encodes as zero
    if math.isnan(value):
        return 0
    scaled = value / scale
    if math.isinf(scaled):
        return hi if scaled > 0 else lo
    return max(lo, min(hi, int(round(scaled))))


def encode_signed_fixed_point(value: float, scale: float, width: int = 2) -> bytes:
    """Encode ``value`` as a big-endian two's-complement integer of ``value / scale``.

    Values outside the representable range saturate at the nearest bound,
    matching the node firmware.
    """

    fmt = _fmt(_SIGNED, width)
    lo, hi = _range(width, signed=True)
    return struct.pack(fmt, _to_int(float(value), scale, lo, hi))


def decode_signed_fixed_point(data: bytes, scale: float) -> float:
    (raw,) = struct.unpack(_fmt(_SIGNED, len(data)), data)
    return raw * scale


def encode_unsigned_fixed_point(value: float, scale: float, width: int = 2) -> bytes:
    """Unsigned twin of :func:`encode_signed_fixed_point` (saturates at 0 and 2**bits - 1)."""

    fmt = _fmt(_UNSIGNED, width)
    lo, hi = _range(width, signed=False)
    return struct.pack(fmt, _to_int(float(value), scale, lo, hi))


def decode_unsigned_fixed_point(data: bytes, scale: float) -> float:
    (raw,) = struct.unpack(_fmt(_UNSIGNED, len(data)), data)
    return raw * scale


def decode_uflt16(raw: int) -> float:
    """Decode a uflt16 into the half-open interval [0, 1.0).

    Bits 15..12 hold the exponent (bias 15), bits 11..0 the fraction. The
    leading fraction bit is explicit, so unnormalized inputs decode the
    same way as normalized ones.
    """

    raw &= 0xFFFF
    exponent = (raw >> _UFLT16_FRACTION_BITS) & 0xF
    fraction = (raw & 0xFFF) / 4096.0
    return math.ldexp(fraction, exponent - _UFLT16_BIAS)


def encode_uflt16(value: float) -> int:
    """Encode a value in [0, 1.0) as uflt16, rounding to the nearest step.

    Out-of-contract inputs are clamped: NaN and anything <= 0 give 0x0000,
    anything >= 1.0 gives 0xFFFF (4095/4096, the largest value).
    """

    value = float(value)
    if not value > 0.0:
        return 0
    if value >= 1.0:
        return UFLT16_MAX

    _, exponent = math.frexp(value)  # value = m * 2**exponent, 0.5 <= m < 1
    biased = max(exponent + _UFLT16_BIAS, 0)
    fraction = round(math.ldexp(value, _UFLT16_BIAS - biased) * 4096)
    if fraction >= 4096:
        # rounded up into the next binade
        biased += 1
        fraction >>= 1
    if biased > 0xF:
        return UFLT16_MAX
    return (biased << _UFLT16_FRACTION_BITS) | fraction
