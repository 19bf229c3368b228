from typing import Optional, Union

from pydantic import BaseModel, Field, validator

MAX_U64 = 2**64 - 1


def _coerce_hash(v: Union[bytes, bytearray, str, None]) -> Optional[bytes]:
    if v is None or isinstance(v, bytes):
        return v
    if isinstance(v, bytearray):
        return bytes(v)
    if isinstance(v, str):
        text = v[2:] if v.lower().startswith("0x") else v
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise ValueError(f"Invalid hex string: {v}")
    raise ValueError(f"Unsupported hash type: {type(v).__name__}")


class Timestamp(BaseModel):
    seconds: int = Field(description="Seconds since the Unix epoch")
    nanos: int = Field(default=0, ge=0, le=999_999_999, description="Sub-second nanoseconds")

    class Config:
        frozen = True


class BlockHeader(BaseModel):
    parent_hash: bytes = Field(default=b"", description="Hash of the parent block")
    timestamp: Optional[Timestamp] = Field(None, description="Block production time")

    @validator("parent_hash", pre=True)
    def parse_parent_hash(cls, v):
        return _coerce_hash(v)


class Block(BaseModel):
    number: int = Field(ge=0, le=MAX_U64, description="Block height")
    hash: bytes = Field(default=b"", description="Block hash")
    header: Optional[BlockHeader] = Field(None, description="Block header")

    @validator("hash", pre=True)
    def parse_hash(cls, v):
        return _coerce_hash(v)
