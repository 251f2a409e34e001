from __future__ import annotations

import base64
import json
from typing import Any, Protocol

from pydantic import BaseModel, ValidationError

from .errors import CodecError
from .interfaces import BinaryMarshaler

__all__ = ["Codec", "BinaryCodec", "JSONCodec", "get_codec"]


class Codec(Protocol):
    name: str

    def encode(self, value: Any) -> bytes: ...

    def decode(self, data: bytes, target: Any = bytes) -> Any: ...


class BinaryCodec:
    """Stores bytes verbatim and delegates everything else to
    ``marshal_binary``/``unmarshal_binary``."""

    name = "binary"

    def encode(self, value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if isinstance(value, str):
            return value.encode("utf-8")
        if isinstance(value, BinaryMarshaler):
            try:
                return bytes(value.marshal_binary())
            except Exception as exc:
                raise CodecError(f"cannot marshal {type(value).__name__}: {exc}") from exc
        raise CodecError(f"{type(value).__name__} does not support binary marshalling")

    def decode(self, data: bytes, target: Any = bytes) -> Any:
        if target is None or target is bytes:
            return bytes(data)
        if target is bytearray:
            return bytearray(data)
        if target is str:
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise CodecError(f"payload is not valid UTF-8: {exc}") from exc
        unmarshal = getattr(target, "unmarshal_binary", None)
        if callable(unmarshal):
            try:
                return unmarshal(data)
            except CodecError:
                raise
            except Exception as exc:
                raise CodecError(f"cannot unmarshal {_type_name(target)}: {exc}") from exc
        raise CodecError(f"{_type_name(target)} does not support binary unmarshalling")


class JSONCodec:
    """JSON payloads; pydantic models round-trip through their own schema.

    Bytes are stored as base64 strings, the same way Go's ``encoding/json``
    stores ``[]byte``.
    """

    name = "json"

    def encode(self, value: Any) -> bytes:
        if isinstance(value, BaseModel):
            return value.model_dump_json().encode("utf-8")
        if isinstance(value, (bytes, bytearray, memoryview)):
            value = base64.b64encode(bytes(value)).decode("ascii")
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode(
                "utf-8"
            )
        except (TypeError, ValueError) as exc:
            raise CodecError(f"cannot encode {type(value).__name__}: {exc}") from exc

    def decode(self, data: bytes, target: Any = bytes) -> Any:
        if target is bytes:
            try:
                return base64.b64decode(json.loads(data), validate=True)
            except (ValueError, TypeError) as exc:
                raise CodecError(f"payload is not base64-encoded bytes: {exc}") from exc
        if isinstance(target, type) and issubclass(target, BaseModel):
            try:
                return target.model_validate_json(data)
            except ValidationError as exc:
                raise CodecError(f"invalid {target.__name__} payload: {exc}") from exc
        try:
            value = json.loads(data) if data else None
        except json.JSONDecodeError as exc:
            raise CodecError(f"invalid JSON payload: {exc}") from exc
        if target is None or target is object or value is None:
            return value
        try:
            return target(value)
        except (TypeError, ValueError) as exc:
            raise CodecError(f"cannot convert payload to {_type_name(target)}: {exc}") from exc


_CODECS = {"binary": BinaryCodec, "json": JSONCodec}


def get_codec(name: str) -> Codec:
    try:
        factory = _CODECS[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"unknown codec {name!r}; expected one of {sorted(_CODECS)}") from exc
    return factory()


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", repr(target))
