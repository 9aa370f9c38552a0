class TransportError(Exception):
    """
    Base class for failures of the byte stream underneath a session.

    Anything deriving from this class terminates the session that raised it.
    Content-level failures (bad JSON, exceptions raised by submitted code)
    never use these types; they are reported back to the peer as data.
    """


class StreamClosed(TransportError):
    """The remote peer closed its end of the connection."""


class BlobTooLarge(TransportError):
    """
    A frame header announced a payload larger than the configured limit.

    The payload is never read, so the stream can no longer be resynchronized
    and the connection has to be dropped.
    """
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Blob size {size} exceeds limit {limit}")
        self.size = size
        self.limit = limit
