from dataclasses import dataclass, field
from typing import Any


@dataclass
class Request:
    """
    A decoded command sent by the peer.

    Only `code` is interpreted. Every other field of the incoming JSON object
    is preserved in `fields` so that submitted code can introspect the full
    request through the evaluation context.
    """
    code: str
    """
    Python source text to execute.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    """
    The full decoded JSON object, `code` included.
    """

    @classmethod
    def from_dict(cls, obj: Any) -> "Request":
        if not isinstance(obj, dict):
            raise TypeError(
                f"Request must be a JSON object, got {type(obj).__name__}"
            )

        if "code" not in obj:
            raise ValueError("Request is missing the 'code' field")

        code = obj["code"]
        if not isinstance(code, str):
            raise TypeError(
                f"Request field 'code' must be a string, got {type(code).__name__}"
            )

        return cls(code=code, fields=obj)


@dataclass
class Response:
    """
    Outcome of one request, always exactly one of two shapes on the wire:
    `{"value": ...}` on success or `{"error": "..."}` on failure.
    """
    value: Any = None
    error: str | None = None

    @classmethod
    def success(cls, value: Any) -> "Response":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "Response":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {"value": self.value}
