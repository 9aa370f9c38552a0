from typing import Protocol, Any


class Serializer(Protocol):
    """
    Defines the interface for encoding/decoding the payload carried by a
    single blob on the wire.

    Implementations must be:
    - deterministic
    - pure (no side effects)
    - explicit about malformed input (raise, never return garbage)
    """

    def serialize(self, message: Any) -> bytes:
        """Encode a Python object into bytes suitable for a blob payload."""

    def deserialize(self, data: bytes) -> Any:
        """Decode a blob payload received from the peer into a Python object."""
