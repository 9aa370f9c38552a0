import asyncio
import logging
import socket

from sockrepl.core.transport.errors import StreamClosed
from sockrepl.core.transport.readiness import Readiness

DEFAULT_READ_CHUNK = 256 * 1024  # 256KB
DEFAULT_WRITE_BUFFER = 64 * 1024  # 64KB


class SocketInput:
    """
    Readable half of an accepted non-blocking socket.

    Every `read()` is exactly one `recv()` call, capped to `chunk_size` so a
    large requested size never forces a large allocation up front. An empty
    result means the peer closed its end and is reported as StreamClosed.
    """
    def __init__(
        self,
        sock: socket.socket,
        readiness: Readiness,
        chunk_size: int = DEFAULT_READ_CHUNK,
    ) -> None:
        self._sock = sock
        self._readiness = readiness
        self._chunk_size = chunk_size

    def read(self, size: int) -> bytes:
        data = self._sock.recv(max(1, min(size, self._chunk_size)))
        if not data:
            raise StreamClosed("Connection closed by peer")
        return data

    async def wait_ready(self) -> None:
        await self._readiness.wait()


class SocketOutput:
    """
    Writable half of an accepted non-blocking socket.

    Writes are accepted into a bounded userspace buffer and pushed to the
    kernel opportunistically. When the buffer is full, `write()` tries to
    push it out first and only reports would-block if not a single byte
    could be sent. `flush()` keeps sending until the buffer is empty and
    reports would-block whenever the kernel refuses more data, so it can be
    resumed from where it stopped.

    A broken pipe means the peer went away and is reported as StreamClosed.
    """
    def __init__(
        self,
        sock: socket.socket,
        readiness: Readiness,
        buffer_size: int = DEFAULT_WRITE_BUFFER,
    ) -> None:
        self._sock = sock
        self._readiness = readiness
        self._limit = max(1, buffer_size)
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def write(self, data: bytes) -> int:
        if not data:
            return 0

        if len(self._buffer) >= self._limit:
            self._push()

        free = self._limit - len(self._buffer)
        accepted = data[:free]
        self._buffer.extend(accepted)
        return len(accepted)

    def flush(self) -> None:
        while self._buffer:
            self._push()

    async def wait_ready(self) -> None:
        await self._readiness.wait()

    def _push(self) -> None:
        try:
            sent = self._sock.send(self._buffer)
        except BrokenPipeError as exc:
            raise StreamClosed("Connection closed by peer") from exc
        del self._buffer[:sent]


class SocketConnection:
    """
    Duplex stream over one accepted AF_UNIX socket.

    The connection owns the socket: it is switched to non-blocking mode on
    construction and closed by `close()`. `shutdown()` half-closes both
    directions without releasing the descriptor, which wakes up any reader
    or writer currently waiting on it so its session can wind down.
    """
    def __init__(
        self,
        sock: socket.socket,
        loop: asyncio.AbstractEventLoop | None = None,
        write_buffer_size: int = DEFAULT_WRITE_BUFFER,
    ) -> None:
        sock.setblocking(False)
        self._sock = sock
        self._loop = loop or asyncio.get_event_loop()
        self._fd = sock.fileno()
        self._write_buffer_size = write_buffer_size
        self._input: SocketInput | None = None
        self._output: SocketOutput | None = None
        self._closed = False
        self._logger = logging.getLogger("core.transport.socket_stream")

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def closed(self) -> bool:
        return self._closed

    def open_input(self) -> SocketInput:
        if self._input is None:
            readiness = Readiness(self._fd, writable=False, loop=self._loop)
            self._input = SocketInput(self._sock, readiness)
        return self._input

    def open_output(self) -> SocketOutput:
        if self._output is None:
            readiness = Readiness(self._fd, writable=True, loop=self._loop)
            self._output = SocketOutput(
                self._sock, readiness, buffer_size=self._write_buffer_size
            )
        return self._output

    def shutdown(self) -> None:
        if self._closed:
            return
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError as exc:
            # Already disconnected on the other side.
            self._logger.debug(f"fd={self._fd} - shutdown skipped: {exc}")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sock.close()


class SocketListener:
    """
    Non-blocking wrapper around a listening AF_UNIX socket.

    `accept()` is a single attempt that raises BlockingIOError when no
    connection is pending, which lets the accept loop share the same
    readiness-driven retry as session reads and writes.
    """
    def __init__(
        self,
        sock: socket.socket,
        loop: asyncio.AbstractEventLoop | None = None,
        write_buffer_size: int = DEFAULT_WRITE_BUFFER,
    ) -> None:
        sock.setblocking(False)
        self._sock = sock
        self._loop = loop or asyncio.get_event_loop()
        self._readiness = Readiness(sock.fileno(), writable=False, loop=self._loop)
        self._write_buffer_size = write_buffer_size

    @property
    def sock(self) -> socket.socket:
        return self._sock

    def accept(self) -> SocketConnection:
        conn, _ = self._sock.accept()
        return SocketConnection(
            conn, loop=self._loop, write_buffer_size=self._write_buffer_size
        )

    async def wait_ready(self) -> None:
        await self._readiness.wait()

    def close(self) -> None:
        self._sock.close()
