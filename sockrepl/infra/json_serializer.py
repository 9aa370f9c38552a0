import json
from typing import Any

from sockrepl.core.ports.serializer import Serializer


class ReplJSONEncoder(json.JSONEncoder):
    """
    JSON encoder for arbitrary evaluation results:
    - exceptions are rendered as their string form
    - bytes are decoded as UTF-8, invalid sequences replaced
    - sets become lists
    - anything else falls back to repr()
    """

    def default(self, obj):
        if isinstance(obj, BaseException):
            return str(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return bytes(obj).decode("utf-8", errors="replace")
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        return repr(obj)


class JsonSerializer(Serializer):
    """
    UTF-8 JSON implementation of the Serializer interface.

    Output is compact and strictly standard JSON: NaN and infinities are
    rejected with ValueError rather than emitted as non-standard tokens.
    """
    def serialize(self, message: Any) -> bytes:
        return json.dumps(
            message,
            cls=ReplJSONEncoder,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        return json.loads(bytes(data).decode("utf-8"))
