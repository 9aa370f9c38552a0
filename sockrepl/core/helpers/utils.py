import asyncio
import contextlib
import logging
import sys
import signal
import threading
from typing import Generator

SHUTDOWN_SIGNALS = (
    signal.SIGINT,
    signal.SIGTERM,
)

if sys.platform == "win32":
    SHUTDOWN_SIGNALS += (signal.SIGBREAK,)

logger = logging.getLogger("core.helpers.utils")


@contextlib.contextmanager
def shutdown_signals(
    loop: asyncio.AbstractEventLoop,
) -> Generator[asyncio.Event, None, None]:
    """
    Route shutdown signals to an asyncio.Event for as long as the block runs.

    Handlers are registered on `loop`, so the event is set from the loop
    thread and a coroutine awaiting it wakes up on the next iteration. Loops
    without signal support fall back to plain signal handlers that hand the
    event over with `call_soon_threadsafe`. Previous handlers are restored on
    exit and signals received meanwhile are not replayed.
    """
    stop_event = asyncio.Event()

    if threading.current_thread() is not threading.main_thread():
        yield stop_event
        return

    def request_stop(sig: signal.Signals) -> None:
        if stop_event.is_set():
            logger.warning(f"Received {sig.name} again, already shutting down")
            return
        logger.info(f"Received {sig.name}, shutting down")
        stop_event.set()

    restore = {}
    try:
        for sig in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, request_stop, sig)
            except NotImplementedError:
                restore[sig] = signal.signal(
                    sig,
                    lambda signum, frame: loop.call_soon_threadsafe(
                        request_stop, signal.Signals(signum)
                    ),
                )
            else:
                restore[sig] = None
        yield stop_event
    finally:
        for sig, previous in restore.items():
            if previous is None:
                loop.remove_signal_handler(sig)
            else:
                signal.signal(sig, previous)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )
