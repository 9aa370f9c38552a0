import os
import socket
import struct
from pathlib import Path
from typing import Any

from sockrepl.core.ports.serializer import Serializer

HEADER = struct.Struct("<I")


class ReplClient:
    """
    Synchronous AF_UNIX client for sockrepl.
    Uses JSON serialization and a length-prefixed frame:

        [4-byte little-endian length][payload]

    This client is minimal and blocking. It is intended for CLI usage,
    debugging, and simple scripts.
    """
    def __init__(self, path: str | os.PathLike[str], serializer: Serializer):
        self._path = Path(path).expanduser()
        self._serializer = serializer
        self._sock: socket.socket | None = None

    @property
    def path(self) -> Path:
        return self._path

    def connect(self) -> None:
        if self._sock is not None:
            return

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(str(self._path))
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def close(self) -> None:
        if self._sock:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def send(self, payload: dict[str, Any]) -> None:
        if not self._sock:
            self.connect()

        data = self._serializer.serialize(payload)
        self._sock.sendall(HEADER.pack(len(data)) + data)

    def recv(self) -> dict[str, Any]:
        if not self._sock:
            self.connect()

        header = self._recv_exact(HEADER.size)
        (length,) = HEADER.unpack(header)

        raw = self._serializer.deserialize(self._recv_exact(length))
        if not isinstance(raw, dict) or not ({"value", "error"} & raw.keys()):
            raise ValueError(f"Invalid response format: {raw!r}")
        return raw

    def request(self, code: str, **fields: Any) -> dict[str, Any]:
        """Run `code` on the server and return the decoded response."""
        self.send({**fields, "code": code})
        return self.recv()

    def _recv_exact(self, n: int) -> bytes:
        """Blocking read of exactly n bytes."""
        buf = bytearray()
        while len(buf) < n:
            chunk = self._sock.recv(n - len(buf))
            if not chunk:
                raise ConnectionError("Connection closed by peer")
            buf.extend(chunk)
        return bytes(buf)

    def __enter__(self) -> "ReplClient":
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
