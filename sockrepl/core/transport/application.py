from typing import Protocol

from sockrepl.core.ports.stream import Connection


class ConnectionHandler(Protocol):
    """
    This interface defines the per-connection entry point run by the server.

    A ConnectionHandler is an asynchronous callable that receives one accepted
    Connection and owns it for its entire lifetime. It returns only when the
    connection has ended and must close the connection on every exit path.

    Exceptions escaping the handler are treated as unexpected transport
    failures and logged by the server. A peer closing the connection is a
    normal ending and must not surface as an exception.
    """
    async def __call__(self, connection: Connection) -> None:
        ...
