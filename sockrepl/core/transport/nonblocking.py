from typing import Any, Callable, Protocol, TypeVar

T = TypeVar("T")


class Waitable(Protocol):
    async def wait_ready(self) -> None:
        ...


async def attempt(stream: Waitable, operation: Callable[..., T], *args: Any) -> T:
    """
    Run a single-shot stream operation until it stops reporting would-block.

    The operation is attempted immediately. If it raises BlockingIOError the
    coroutine suspends on `stream.wait_ready()` and tries again once the
    stream is reported ready, as many times as needed. Any other exception
    escapes to the caller unchanged, and a successful attempt returns the
    operation's result.

    This is the only place where a session ever suspends: every read, write,
    flush and accept goes through here exactly once per attempt.
    """
    while True:
        try:
            return operation(*args)
        except BlockingIOError:
            await stream.wait_ready()
