import logging

from sockrepl.core.eval.interpreter import CommandInterpreter
from sockrepl.core.ports.stream import Connection
from sockrepl.core.transport.codec import flush, read_blob, write_blob
from sockrepl.core.transport.errors import BlobTooLarge, StreamClosed


class Session:
    """
    Runs the read-eval-respond loop for a single accepted connection.

    The session opens both halves of the connection, then repeatedly reads one
    request blob, hands it to the CommandInterpreter, writes the response blob
    and flushes it. A response is always fully flushed before the next request
    is read, so requests on one connection are answered strictly in order.

    The loop only ends on transport conditions:
    - the peer closing the connection, which is a normal, silent ending
    - a frame announcing a payload above `max_blob_size`, logged as a warning
    - any other transport error, which propagates to the caller

    Content failures never end the loop: they come back from the interpreter
    as error responses. The connection is closed on every exit path.
    """
    def __init__(
        self,
        connection: Connection,
        interpreter: CommandInterpreter,
        max_blob_size: int | None = None,
    ) -> None:
        self._connection = connection
        self._interpreter = interpreter
        self._max_blob_size = max_blob_size
        self._handled = 0
        self._logger = logging.getLogger("core.transport.session")

    @property
    def handled(self) -> int:
        return self._handled

    async def run(self) -> None:
        try:
            reader = self._connection.open_input()
            writer = self._connection.open_output()

            while True:
                blob = await read_blob(reader, self._max_blob_size)
                payload = self._interpreter.respond(blob)
                await write_blob(writer, payload)
                await flush(writer)
                self._handled += 1
        except StreamClosed:
            self._logger.debug(
                f"Connection closed by peer after {self._handled} request(s)"
            )
        except BlobTooLarge as exc:
            self._logger.warning(f"{exc}, closing connection")
        finally:
            self._connection.close()


class SessionHandler:
    """
    ConnectionHandler that runs one Session per accepted connection, all of
    them sharing the same CommandInterpreter and therefore the same
    EvaluationContext.
    """
    def __init__(
        self,
        interpreter: CommandInterpreter,
        max_blob_size: int | None = None,
    ) -> None:
        self._interpreter = interpreter
        self._max_blob_size = max_blob_size

    async def __call__(self, connection: Connection) -> None:
        session = Session(connection, self._interpreter, self._max_blob_size)
        await session.run()
