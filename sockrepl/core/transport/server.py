import asyncio
import logging
import os
import socket
import stat
from pathlib import Path

from sockrepl.core.helpers.spawn import TaskSpawner
from sockrepl.core.models.config import ServerConfig
from sockrepl.core.models.state import ServerState
from sockrepl.core.transport.errors import StreamClosed
from sockrepl.core.transport.nonblocking import attempt
from sockrepl.core.transport.socket_stream import SocketConnection, SocketListener


class ReplServer:
    """
    Owns the lifecycle of an AF_UNIX server that accepts local client
    connections and hands each of them to the configured ConnectionHandler.

    On start, the server removes any stale socket left at the configured path,
    binds a fresh listening socket, and restricts its permissions to the
    configured mode. The accept loop runs as a background task and uses the
    same readiness-driven retry as session reads and writes, so the whole
    server lives on a single event loop thread.

    Each accepted connection runs in its own task, tracked in ServerState.
    A session that ends because its peer closed the connection is routine;
    any other exception escaping a session is logged as unexpected.

    On shutdown, the server stops accepting, removes the socket file,
    half-closes every active connection so that blocked sessions wake up and
    finish, and waits for them. If the graceful shutdown timeout is exceeded,
    remaining tasks are cancelled and an error is logged.
    """
    ACCEPT_RETRY_DELAY = 0.1

    def __init__(
        self,
        config: ServerConfig,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config
        self._loop = loop or asyncio.get_event_loop()
        self.state = ServerState()
        self._spawner = TaskSpawner(
            loop=self._loop,
            tasks=self.state.tasks,
            quiet=(StreamClosed,),
        )
        self._logger = logging.getLogger("core.transport.server")

        self._listener: SocketListener | None = None
        self._accept_task: asyncio.Task[None] | None = None
        self._path = Path(config.socket_path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    async def start(self) -> None:
        config = self._config
        path = self._path

        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        self._remove_stale_socket(path)

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.bind(str(path))
            os.chmod(path, config.mode)
            sock.listen(config.backlog)
        except OSError:
            sock.close()
            raise

        self._listener = SocketListener(
            sock, loop=self._loop, write_buffer_size=config.write_buffer_size
        )
        self._accept_task = self._spawner.spawn(
            self._serve(self._listener), name="accept"
        )
        self._logger.info(f"Listening on {path} (mode {config.mode:o})")

    async def shutdown(self) -> None:
        if self._accept_task is not None:
            self._accept_task.cancel()
            await asyncio.wait([self._accept_task])
            self._accept_task = None

        if self._listener is not None:
            self._listener.close()
            self._listener = None
            self._remove_stale_socket(self._path)

        for connection in self.state.connections.copy():
            connection.shutdown()

        try:
            await asyncio.wait_for(
                self._wait_task_complete(),
                timeout=self._config.timeout_graceful_shutdown
            )
        except asyncio.TimeoutError:
            self._logger.error(
                f"Cancel {len(self.state.tasks)} running task(s), "
                f"timeout graceful shutdown: {self.state.tasks}"
            )
            for task in self.state.tasks:
                task.cancel("Task cancelled, timeout graceful shutdown exceeded")

    async def _serve(self, listener: SocketListener) -> None:
        while True:
            try:
                connection = await attempt(listener, listener.accept)
            except (ConnectionAbortedError, InterruptedError):
                continue
            except OSError as exc:
                # Out of descriptors or memory: back off and keep listening.
                self._logger.error(f"Failed to accept connection: {exc}")
                await asyncio.sleep(self.ACCEPT_RETRY_DELAY)
                continue

            self._logger.debug(f"fd={connection.fd} - Connection made")
            self.state.connections.add(connection)
            self._spawner.spawn(
                self._run_session(connection),
                name=f"session-{connection.fd}",
            )

    async def _run_session(self, connection: SocketConnection) -> None:
        fd = connection.fd
        try:
            await self._config.handler(connection)
        finally:
            connection.close()
            self.state.connections.discard(connection)
            self._logger.debug(f"fd={fd} - Connection lost.")

    async def _wait_task_complete(self) -> None:
        if self.state.connections:
            self._logger.info("Waiting for client connections to close.")

        while self.state.connections:
            await asyncio.sleep(0.1)

        if self.state.tasks:
            self._logger.info("Waiting for background tasks to complete.")

        while self.state.tasks:
            await asyncio.sleep(0.1)

    def _remove_stale_socket(self, path: Path) -> None:
        try:
            mode = path.lstat().st_mode
        except FileNotFoundError:
            return

        if not stat.S_ISSOCK(mode):
            raise FileExistsError(
                f"Refusing to replace non-socket file at {path}"
            )

        self._logger.debug(f"Removing stale socket {path}")
        path.unlink(missing_ok=True)
