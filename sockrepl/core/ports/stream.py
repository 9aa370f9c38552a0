from typing import Protocol


class InputStream(Protocol):
    """
    Readable half of a non-blocking duplex stream.

    `read()` performs a single attempt. It returns between 1 and `size` bytes,
    raises BlockingIOError when no data is available yet, and raises
    StreamClosed once the peer has closed its end.
    """
    def read(self, size: int) -> bytes:
        ...

    async def wait_ready(self) -> None:
        """Suspend until the stream is worth reading again."""


class OutputStream(Protocol):
    """
    Writable half of a non-blocking duplex stream.

    `write()` performs a single attempt and returns how many bytes of `data`
    were accepted, which may be fewer than offered. `flush()` pushes buffered
    bytes to the peer. Both raise BlockingIOError when they cannot make
    progress right now.
    """
    def write(self, data: bytes) -> int:
        ...

    def flush(self) -> None:
        ...

    async def wait_ready(self) -> None:
        """Suspend until the stream can accept more bytes."""


class Connection(Protocol):
    """An accepted duplex stream owned by exactly one session."""
    def open_input(self) -> InputStream:
        ...

    def open_output(self) -> OutputStream:
        ...

    def close(self) -> None:
        ...
