"""Codec for the bitmap-gated environmental sensor uplink record."""

from .derived import DerivedValues, compute_derived, dew_point, heat_index, heat_index_f
from .errors import MalformedRecord, RecordError, TrailingData, TruncatedRecord
from .record import (
    FIELDS,
    DecodedRecord,
    Reading,
    Readings,
    TrailingPolicy,
    decode_record,
    encode_record,
)
from .scalars import (
    decode_signed_fixed_point,
    decode_uflt16,
    decode_unsigned_fixed_point,
    encode_signed_fixed_point,
    encode_uflt16,
    encode_unsigned_fixed_point,
)

__all__ = [
    "FIELDS",
    "DecodedRecord",
    "DerivedValues",
    "MalformedRecord",
    "Reading",
    "Readings",
    "RecordError",
    "TrailingData",
    "TrailingPolicy",
    "TruncatedRecord",
    "compute_derived",
    "decode_record",
    "decode_signed_fixed_point",
    "decode_uflt16",
    "decode_unsigned_fixed_point",
    "dew_point",
    "encode_record",
    "encode_signed_fixed_point",
    "encode_uflt16",
    "encode_unsigned_fixed_point",
    "heat_index",
    "heat_index_f",
]
