import json
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .config import SerializationConfig
from ..utils.exceptions import SerializationError


@runtime_checkable
class SerializationBackend(Protocol):
    """Protocol defining the interface for serialization backends"""

    def serialize(self, obj: Any) -> bytes:
        """Serialize an object to bytes"""
        ...

    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes back to object"""
        ...


class RawBytesBackend:
    """Pass-through backend for callers that exchange opaque byte payloads"""

    def serialize(self, obj: Any) -> bytes:
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return bytes(obj)
        raise SerializationError(
            operation="serialize",
            message=f"Raw payloads must be bytes-like, got {type(obj).__name__}",
            data_type=type(obj).__name__,
            serialization_format="raw",
        )

    def deserialize(self, data: bytes) -> Optional[bytes]:
        if not data:
            return None
        return bytes(data)


class JSONBackend:
    """JSON-based serialization backend with optional extended type support"""

    def __init__(self, config: Optional[SerializationConfig] = None):
        self.config = config or SerializationConfig()

    def _custom_encoder(self, obj: Any) -> Any:
        """Fallback encoder for values json cannot handle natively"""
        if self.config.extended_types:
            if isinstance(obj, set):
                return {"__type__": "set", "data": list(obj)}
            if isinstance(obj, complex):
                return {"__type__": "complex", "real": obj.real, "imag": obj.imag}
            if isinstance(obj, bytes):
                return {"__type__": "bytes", "data": obj.decode("latin-1")}
        if hasattr(obj, "to_dict") and callable(obj.to_dict):
            return obj.to_dict()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    def _encode_recursive(self, obj: Any) -> Any:
        """
        Recursively encode values so extended types are preserved.

        `json.dumps(..., default=...)` does not call `default` for tuples because
        tuples are natively converted to JSON arrays. We pre-encode recursively to
        preserve tuple identity.
        """
        if isinstance(obj, dict):
            return {k: self._encode_recursive(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [self._encode_recursive(item) for item in obj]
        if isinstance(obj, tuple):
            return {"__type__": "tuple", "data": [self._encode_recursive(i) for i in obj]}
        if isinstance(obj, set):
            return {"__type__": "set", "data": [self._encode_recursive(i) for i in obj]}
        if isinstance(obj, complex):
            return {"__type__": "complex", "real": obj.real, "imag": obj.imag}
        if isinstance(obj, bytes):
            return {"__type__": "bytes", "data": obj.decode("latin-1")}
        return obj

    def _custom_decoder(self, obj: Dict[str, Any]) -> Any:
        """Decoder for `__type__` markers"""
        type_name = obj.get("__type__")
        if type_name == "tuple":
            return tuple(self._decode_recursive(item) for item in obj["data"])
        if type_name == "set":
            return {self._decode_recursive(item) for item in obj["data"]}
        if type_name == "complex":
            return complex(obj["real"], obj["imag"])
        if type_name == "bytes":
            return obj["data"].encode("latin-1")
        return obj

    def serialize(self, obj: Any) -> bytes:
        """Serialize object to UTF-8 JSON"""
        try:
            if self.config.extended_types:
                obj = self._encode_recursive(obj)
            json_str = json.dumps(
                obj,
                ensure_ascii=self.config.ensure_ascii,
                sort_keys=self.config.sort_keys,
                separators=self.config.separators,
                default=self._custom_encoder,
            )
            return json_str.encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(
                operation="serialize",
                message=f"JSON serialization failed: {e}",
                data_type=type(obj).__name__,
                serialization_format="json",
                cause=e,
            ) from e

    def deserialize(self, data: bytes) -> Any:
        """Deserialize UTF-8 JSON bytes"""
        if not data:
            return None
        try:
            obj = json.loads(bytes(data).decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SerializationError(
                operation="deserialize",
                message=f"JSON deserialization failed: {e}",
                serialization_format="json",
                cause=e,
            ) from e
        if self.config.extended_types:
            return self._decode_recursive(obj)
        return obj

    def _decode_recursive(self, obj: Any) -> Any:
        """Recursively decode custom types"""
        if isinstance(obj, dict):
            decoded = self._custom_decoder(obj)
            if decoded is not obj:
                return decoded
            return {k: self._decode_recursive(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._decode_recursive(item) for item in obj]
        return obj
