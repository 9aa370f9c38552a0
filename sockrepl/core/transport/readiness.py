import asyncio


class Readiness:
    """
    One-shot readiness registration for a non-blocking file descriptor.

    This class is the bridge between the event loop's selector and code that
    wants to wait for a socket to become readable or writable. Each call to
    `wait()` registers a single reader (or writer) callback for the file
    descriptor and suspends the caller until the selector reports the
    descriptor as ready. The registration is removed as soon as the wait
    completes, whether it completed normally or was cancelled.

    Notifications are level-triggered: being woken up only means the next
    attempt is worth making, not that it will succeed. Callers are expected to
    retry their operation and wait again if it still would block.
    """

    def __init__(
        self,
        fd: int,
        writable: bool = False,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._fd = fd
        self._writable = writable
        self._loop = loop or asyncio.get_event_loop()

    @property
    def writable(self) -> bool:
        return self._writable

    async def wait(self) -> None:
        """Block until the descriptor is reported ready."""
        future = self._loop.create_future()

        if self._writable:
            self._loop.add_writer(self._fd, self._wake, future)
        else:
            self._loop.add_reader(self._fd, self._wake, future)

        try:
            await future
        finally:
            if self._writable:
                self._loop.remove_writer(self._fd)
            else:
                self._loop.remove_reader(self._fd)

    @staticmethod
    def _wake(future: asyncio.Future[None]) -> None:
        if not future.done():
            future.set_result(None)
