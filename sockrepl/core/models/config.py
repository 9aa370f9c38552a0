from dataclasses import dataclass
from pathlib import Path

from sockrepl.core.transport.application import ConnectionHandler

DEFAULT_SOCKET_PATH = Path("~/.sockrepl/sockrepl.socket")


@dataclass
class ServerConfig:
    """
    Static configuration for a sockrepl ReplServer.

    This structure defines all parameters required to start a server:
    the socket endpoint and its permissions, resource limits, and graceful
    shutdown behavior.
    """
    handler: ConnectionHandler
    """
    The per-connection coroutine with the signature:
        async def handler(connection)
    It owns the connection until it returns.
    """

    socket_path: Path = DEFAULT_SOCKET_PATH
    """
    Filesystem path of the AF_UNIX listening socket. Any file already present
    at this path is removed on startup.
    """

    mode: int = 0o700
    """
    Permission bits applied to the socket file. This is the only access
    control: anyone able to connect can run code in the server process.
    """

    backlog: int = 16
    """
    Maximum number of pending connections waiting for accept().
    """

    max_blob_size: int = 64 * 1024 * 1024  # 64MB
    """
    Largest request payload accepted. A frame announcing more closes the
    connection before anything is allocated for it.
    """

    write_buffer_size: int = 64 * 1024  # 64KB
    """
    Size of the per-connection userspace write buffer.
    """

    timeout_graceful_shutdown: float = 5.0
    """
    Maximum time (in seconds) allowed for graceful shutdown:
    - active connections must close
    - session tasks registered in ServerState.tasks must complete
    After this timeout, remaining tasks are cancelled.
    """
