# mc_rcon/packet.py
"""
RCON wire format, little-endian throughout:

    [ size:i32 | id:i32 | type:i32 | payload | 0x00 | 0x00 ]

`size` counts every byte after the size field itself.
"""
from __future__ import annotations

import random
import struct
from dataclasses import dataclass
from enum import IntEnum

from .errors import DecodeError

ENCODING = "utf-8"

HEADER = struct.Struct("<iii")
HEADER_SIZE = HEADER.size      # size + id + type
SIZE_FIELD = 4
TERMINATORS = b"\x00\x00"      # payload terminator + packet terminator

MAX_REQUEST_PAYLOAD = 1446
MAX_RESPONSE_PAYLOAD = 4096
# 4 (size) + 4 (id) + 4 (type) + payload + 1 + 1
MAX_REQUEST_SIZE = HEADER_SIZE + MAX_REQUEST_PAYLOAD + len(TERMINATORS)    # 1460
MAX_RESPONSE_SIZE = HEADER_SIZE + MAX_RESPONSE_PAYLOAD + len(TERMINATORS)  # 4110

AUTH_FAILED_ID = -1


class RequestType(IntEnum):
    EXEC_COMMAND = 2
    AUTH = 3


class ResponseType(IntEnum):
    RESPONSE_VALUE = 0
    AUTH_RESPONSE = 2


@dataclass(frozen=True)
class RconRequest:
    request_id: int
    request_type: RequestType
    payload: str

    def encode(self) -> bytes:
        return encode(self)


@dataclass(frozen=True)
class RconResponse:
    response_id: int
    response_type: ResponseType
    payload: str

    @classmethod
    def decode(cls, data: bytes) -> "RconResponse":
        return decode(data)

    def as_dict(self) -> dict:
        return {"id": self.response_id, "payload": self.payload}


def new_request_id() -> int:
    # non-negative, so it can never collide with AUTH_FAILED_ID
    return random.randint(0, 2**31 - 1)


def new_request(request_type: RequestType, payload: str) -> RconRequest:
    return RconRequest(new_request_id(), RequestType(request_type), payload)


def encode(request: RconRequest) -> bytes:
    """Serialize a request. Size limits are enforced by the connection."""
    body = request.payload.encode(ENCODING)
    size = 4 + 4 + len(body) + len(TERMINATORS)
    return HEADER.pack(size, request.request_id, int(request.request_type)) + body + TERMINATORS


def decode(data: bytes) -> RconResponse:
    """
    Parse a single response packet from the start of `data`.

    The size field comes from the remote server and is checked against the
    buffer before anything is sliced with it.
    """
    if len(data) < HEADER_SIZE:
        raise DecodeError(f"Need at least {HEADER_SIZE} bytes; got {len(data)}")

    size, response_id, code = HEADER.unpack_from(data, 0)

    try:
        response_type = ResponseType(code)
    except ValueError:
        raise DecodeError(f"Unknown RCON response type: {code}") from None

    payload_end = SIZE_FIELD + size - len(TERMINATORS)
    if payload_end < HEADER_SIZE or payload_end > len(data):
        raise DecodeError(
            f"Declared size {size} does not fit a {len(data)} byte buffer"
        )

    try:
        payload = bytes(data[HEADER_SIZE:payload_end]).decode(ENCODING)
    except UnicodeDecodeError:
        raise DecodeError("Failed to decode response payload") from None

    return RconResponse(response_id, response_type, payload)
