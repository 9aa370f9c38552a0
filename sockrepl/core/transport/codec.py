"""
Blob framing over non-blocking streams.

Wire format, identical in both directions:

    4 bytes: payload length (little-endian uint32)
    N bytes: payload

Every function here is a plain sequence of single-shot stream operations,
each wrapped in `attempt()`, so a partially received or partially sent
frame simply keeps the caller suspended until the rest can move.
"""
import struct

from sockrepl.core.ports.stream import InputStream, OutputStream
from sockrepl.core.transport.errors import BlobTooLarge
from sockrepl.core.transport.nonblocking import attempt

HEADER = struct.Struct("<I")  # uint32 little-endian
MAX_BLOB_LENGTH = 0xFFFFFFFF


async def read_exactly(stream: InputStream, size: int) -> bytes:
    """Read exactly `size` bytes, accumulating as many partial reads as needed."""
    if size <= 0:
        return b""

    buffer = bytearray()
    while len(buffer) < size:
        chunk = await attempt(stream, stream.read, size - len(buffer))
        buffer.extend(chunk)

    return bytes(buffer)


async def read_blob(stream: InputStream, max_size: int | None = None) -> bytes:
    """
    Read one length-prefixed blob.

    Raises:
        StreamClosed: if the peer closes before the whole frame arrived
        BlobTooLarge: if the announced length exceeds `max_size`
    """
    header = await read_exactly(stream, HEADER.size)
    (size,) = HEADER.unpack(header)

    if max_size is not None and size > max_size:
        raise BlobTooLarge(size, max_size)

    return await read_exactly(stream, size)


async def write_all(stream: OutputStream, data: bytes) -> None:
    """Hand every byte of `data` to the stream, repeating partial writes."""
    view = memoryview(data)
    while len(view) > 0:
        accepted = await attempt(stream, stream.write, view)
        view = view[accepted:]


async def write_blob(stream: OutputStream, data: bytes) -> None:
    """Write one length-prefixed blob. Bytes may stay buffered until `flush()`."""
    if len(data) > MAX_BLOB_LENGTH:
        raise ValueError(f"Blob of {len(data)} bytes cannot be framed")

    await write_all(stream, HEADER.pack(len(data)))
    await write_all(stream, data)


async def flush(stream: OutputStream) -> None:
    """Block until every buffered byte has been handed to the transport."""
    await attempt(stream, stream.flush)
