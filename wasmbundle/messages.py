"""Wire messages for the sandbox manager service (proto3, string fields only)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import ClassVar, TypeVar

PACKAGE = "runwasi.services.sandbox.v1"

_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_LENGTH = 2
_WIRE_START_GROUP = 3
_WIRE_END_GROUP = 4
_WIRE_FIXED32 = 5

_MAX_FIELD_NUMBER = (1 << 29) - 1

M = TypeVar("M", bound="Message")


class DecodeError(ValueError):
    """Raised when bytes cannot be decoded into a message."""


def proto_field(number: int):
    """Declare a proto3 string field with the given field number."""
    return field(default="", metadata={"number": number})


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _read_varint(data: bytes, pos: int) -> tuple[int, int]:
    result = 0
    for shift in range(0, 70, 7):
        if pos >= len(data):
            raise DecodeError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if result >= 1 << 64:
                raise DecodeError("varint overflows 64 bits")
            return result, pos
    raise DecodeError("varint is longer than 10 bytes")


def _read_tag(data: bytes, pos: int) -> tuple[int, int, int]:
    tag, pos = _read_varint(data, pos)
    number, wire_type = tag >> 3, tag & 0x7
    if not 1 <= number <= _MAX_FIELD_NUMBER:
        raise DecodeError(f"invalid field number {number}")
    if wire_type > _WIRE_FIXED32:
        raise DecodeError(f"invalid wire type {wire_type}")
    return number, wire_type, pos


def _take(data: bytes, pos: int, size: int) -> int:
    end = pos + size
    if end > len(data):
        raise DecodeError("unexpected end of input")
    return end


def _skip_field(data: bytes, pos: int, number: int, wire_type: int) -> int:
    """Return the position just past the value of a field whose tag was read."""
    if wire_type == _WIRE_VARINT:
        return _read_varint(data, pos)[1]
    if wire_type == _WIRE_FIXED64:
        return _take(data, pos, 8)
    if wire_type == _WIRE_FIXED32:
        return _take(data, pos, 4)
    if wire_type == _WIRE_LENGTH:
        size, pos = _read_varint(data, pos)
        return _take(data, pos, size)
    if wire_type == _WIRE_START_GROUP:
        while True:
            if pos >= len(data):
                raise DecodeError("unterminated group")
            inner, inner_type, pos = _read_tag(data, pos)
            if inner_type == _WIRE_END_GROUP:
                if inner != number:
                    raise DecodeError("mismatched end of group")
                return pos
            pos = _skip_field(data, pos, inner, inner_type)
    raise DecodeError("unexpected end of group")


@dataclass
class Message:
    """Base for messages whose declared fields are all proto3 strings."""

    NAME: ClassVar[str] = ""

    unknown_fields: bytes = field(default=b"", kw_only=True, repr=False)

    @classmethod
    def full_name(cls) -> str:
        """The message's fully qualified protobuf name."""
        return f"{PACKAGE}.{cls.NAME}"

    @classmethod
    def _numbered_fields(cls) -> dict[int, str]:
        return {
            f.metadata["number"]: f.name
            for f in fields(cls)
            if "number" in f.metadata
        }

    def to_bytes(self) -> bytes:
        """Serialise to the protobuf wire format."""
        out = bytearray()
        for number, name in sorted(self._numbered_fields().items()):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise TypeError(f"field {name!r} must be str, not {type(value).__name__}")
            if not value:
                continue
            encoded = value.encode("utf-8")
            out += _encode_varint((number << 3) | _WIRE_LENGTH)
            out += _encode_varint(len(encoded))
            out += encoded
        out += self.unknown_fields
        return bytes(out)

    @classmethod
    def from_bytes(cls: type[M], data: bytes) -> M:
        """Parse a message from the protobuf wire format."""
        data = bytes(data)
        known = cls._numbered_fields()
        values: dict[str, str] = {}
        unknown = bytearray()
        pos = 0
        while pos < len(data):
            start = pos
            number, wire_type, pos = _read_tag(data, pos)
            name = known.get(number)
            if name is None:
                pos = _skip_field(data, pos, number, wire_type)
                unknown += data[start:pos]
                continue
            if wire_type != _WIRE_LENGTH:
                raise DecodeError(
                    f"field {name!r} expects wire type {_WIRE_LENGTH}, got {wire_type}"
                )
            size, pos = _read_varint(data, pos)
            end = _take(data, pos, size)
            try:
                values[name] = data[pos:end].decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DecodeError(f"field {name!r} is not valid UTF-8") from exc
            pos = end
        return cls(**values, unknown_fields=bytes(unknown))


@dataclass
class CreateRequest(Message):
    """Request to create a sandbox."""

    NAME: ClassVar[str] = "CreateRequest"

    namespace: str = proto_field(1)
    id: str = proto_field(2)
    ttrpc_address: str = proto_field(3)
    working_directory: str = proto_field(4)


@dataclass
class ConnectRequest(Message):
    """Request to connect to an existing sandbox."""

    NAME: ClassVar[str] = "ConnectRequest"

    id: str = proto_field(1)
    ttrpc_address: str = proto_field(2)


@dataclass
class DeleteRequest(Message):
    """Request to delete a sandbox."""

    NAME: ClassVar[str] = "DeleteRequest"

    namespace: str = proto_field(1)
    id: str = proto_field(2)
    ttrpc_address: str = proto_field(3)