import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ..config import Settings, load_settings
from ..errors import RecordError
from ..record import Readings, decode_record, encode_record, to_hex
from ..schemas import DecodeIn, DecodeOut, DerivedOut, EncodeOut, ReadingsIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/uplinks", tags=["uplinks"])


def get_settings() -> Settings:
    return load_settings()


def _decode(payload: bytes, port: int, settings: Settings) -> DecodeOut:
    if port != settings.port:
        logger.warning("Rejected uplink on port %d (expected %d)", port, settings.port)
        raise HTTPException(status_code=422, detail=f"unsupported port {port}; expected {settings.port}")
    try:
        record = decode_record(payload, trailing=settings.trailing)
    except RecordError as exc:
        logger.warning("Rejected uplink %s: %s", to_hex(payload) or "<empty>", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    derived = record.derived()
    return DecodeOut(
        port=port,
        bitmap=record.bitmap,
        fields=record.values,
        units={name: r.unit for name, r in record.fields.items()},
        derived=DerivedOut(dew_point_c=derived.dew_point_c, heat_index_c=derived.heat_index_c) if derived else None,
    )


@router.post("/decode", response_model=DecodeOut)
async def decode(body: DecodeIn, settings: Settings = Depends(get_settings)):
    port = settings.port if body.port is None else body.port
    return _decode(body.payload(), port, settings)


@router.post("/decode/raw", response_model=DecodeOut)
async def decode_raw(
    request: Request,
    x_port: Optional[int] = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    payload = await request.body()
    port = settings.port if x_port is None else x_port
    return _decode(payload, port, settings)


@router.post("/encode", response_model=EncodeOut)
async def encode(body: ReadingsIn):
    payload = encode_record(Readings(**body.model_dump()))
    return EncodeOut(payload_hex=to_hex(payload), bitmap=payload[0], length=len(payload))
