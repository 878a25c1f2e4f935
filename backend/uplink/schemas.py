from typing import Annotated, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from .record import parse_hex

Byte = Annotated[int, Field(ge=0, le=255)]


class DecodeIn(BaseModel):
    payload_hex: Optional[str] = Field(default=None, validation_alias=AliasChoices("payload_hex", "hex", "payload"))
    data: Optional[list[Byte]] = Field(default=None, validation_alias=AliasChoices("bytes", "data"))
    port: Optional[int] = Field(default=None, validation_alias=AliasChoices("fPort", "port", "f_port"))

    @field_validator("payload_hex")
    @classmethod
    def _check_hex(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            parse_hex(value)
        except ValueError:
            raise ValueError("payload_hex is not a valid hex string") from None
        return value

    @model_validator(mode="after")
    def _one_payload(self) -> "DecodeIn":
        if (self.payload_hex is None) == (self.data is None):
            raise ValueError("supply exactly one of payload_hex or bytes")
        return self

    def payload(self) -> bytes:
        if self.payload_hex is not None:
            return parse_hex(self.payload_hex)
        return bytes(self.data or [])


class DerivedOut(BaseModel):
    dew_point_c: float
    heat_index_c: Optional[float] = None


class DecodeOut(BaseModel):
    port: int
    bitmap: int
    fields: dict[str, float]
    units: dict[str, str]
    derived: Optional[DerivedOut] = None


class ReadingsIn(BaseModel):
    battery_v: Optional[float] = Field(default=None, validation_alias=AliasChoices("battery_v", "Vbat"))
    system_v: Optional[float] = Field(default=None, validation_alias=AliasChoices("system_v", "VDD"))
    boot: Optional[int] = None
    temp_c: Optional[float] = Field(default=None, validation_alias=AliasChoices("temp_c", "t"))
    rh_pct: Optional[float] = Field(default=None, validation_alias=AliasChoices("rh_pct", "rh"))
    light_wm2: Optional[float] = Field(default=None, validation_alias=AliasChoices("light_wm2", "light"))
    bus_v: Optional[float] = Field(default=None, validation_alias=AliasChoices("bus_v", "Vbus"))
    probe_temp_c: Optional[float] = Field(default=None, validation_alias=AliasChoices("probe_temp_c", "Tprobe"))


class EncodeOut(BaseModel):
    payload_hex: str
    bitmap: int
    length: int
