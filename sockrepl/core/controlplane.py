import asyncio
import logging

from sockrepl.core.eval.context import EvaluationContext
from sockrepl.core.eval.interpreter import CommandInterpreter
from sockrepl.core.models.config import ServerConfig
from sockrepl.core.ports.serializer import Serializer
from sockrepl.core.transport.server import ReplServer
from sockrepl.core.transport.session import SessionHandler
from sockrepl.bootstrap.config.settings import SockReplConfig


class ControlPlane:
    """
    Wires the process together: one shared EvaluationContext, the
    CommandInterpreter bound to it, the SessionHandler, and the ReplServer
    that feeds accepted connections into it.
    """
    def __init__(
        self,
        config: SockReplConfig,
        serializer: Serializer,
        context: EvaluationContext | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config
        self._loop = loop or self._create_event_loop()
        self._context = context or EvaluationContext()
        self._serializer = serializer
        self._logger = logging.getLogger("sockrepl.controlplane")

        self._interpreter = CommandInterpreter(
            context=self._context,
            serializer=self._serializer,
            with_traceback=self._config.eval.traceback,
        )
        self._server_config = self._build_server_config()
        self._server = ReplServer(config=self._server_config, loop=self._loop)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def context(self) -> EvaluationContext:
        return self._context

    @property
    def server(self) -> ReplServer:
        return self._server

    async def start(self, stop_event: asyncio.Event) -> None:
        await self._server.start()
        self._logger.info("sockrepl started")
        try:
            await stop_event.wait()
        finally:
            self._logger.info("sockrepl stopping")
            await self._server.shutdown()

    def _build_server_config(self) -> ServerConfig:
        server_config = self._config.server
        handler = SessionHandler(
            interpreter=self._interpreter,
            max_blob_size=server_config.max_blob_size,
        )

        return ServerConfig(
            handler=handler,
            socket_path=server_config.socket_path,
            mode=server_config.mode,
            backlog=server_config.backlog,
            max_blob_size=server_config.max_blob_size,
            write_buffer_size=server_config.write_buffer_size,
            timeout_graceful_shutdown=server_config.timeout_graceful_shutdown,
        )

    @staticmethod
    def _create_event_loop() -> asyncio.AbstractEventLoop:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        return loop
