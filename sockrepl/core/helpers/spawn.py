import asyncio
import logging
from typing import Any, Coroutine


class TaskSpawner:
    """
    A lightweight helper for spawning and tracking background asyncio tasks.

    This utility centralizes task creation, error reporting, and lifecycle
    management. It ensures that:
    - all spawned tasks are tracked until completion
    - unhandled exceptions inside tasks are logged, unless their type is
      listed in `quiet`
    - completed tasks are automatically removed from the registry

    The registry can be shared with another owner (the server state) so that
    shutdown logic sees every task that is still running.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        tasks: set[asyncio.Task[Any]] | None = None,
        quiet: tuple[type[BaseException], ...] = (),
    ):
        self._loop = loop
        self._tasks: set[asyncio.Task[Any]] = tasks if tasks is not None else set()
        self._quiet = quiet
        self._logger = logging.getLogger("core.helpers.spawn")

    @property
    def remaining_tasks(self) -> int:
        """
        Return the number of tasks currently being tracked.
        """
        return len(self._tasks)

    def on_done(self, task: asyncio.Task[Any]) -> None:
        """
        Callback executed when a spawned task completes.

        If the task raised an unexpected exception, it is logged. The task is
        then removed from the tracking set.
        """
        self._tasks.discard(task)

        if task.cancelled():
            return

        ex = task.exception()
        if ex is None:
            return

        if isinstance(ex, self._quiet):
            self._logger.debug(f"Task {task.get_name()} ended: {ex!r}")
            return

        self._logger.error(
            f"Error occurred in task {task.get_name()}: {str(ex)}",
            exc_info=ex
        )

    def spawn(
        self,
        coro: Coroutine[Any, Any, None],
        name: str | None = None,
    ) -> asyncio.Task[Any]:
        """
        Spawn a coroutine as a background task and track its lifecycle.
        """
        task = self._loop.create_task(coro, name=name)
        task.add_done_callback(self.on_done)
        self._tasks.add(task)
        return task
