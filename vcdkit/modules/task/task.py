"""
Task completion tracking.

A task is a server-side asynchronous operation returned by mutating calls.
The client never moves a task between states; it only re-fetches the task's
representation until the server reports a terminal status:

    queued -> running -> success | error | aborted

Cancelling a wait stops the polling loop only. The remote operation keeps
running.
"""

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Union

from vcdkit.modules.api.models import Task
from vcdkit.modules.errors import TaskFailedError, TaskTimeoutError, TaskWaitCancelledError
from vcdkit.modules.transport import Transport

logger = logging.getLogger("vcdkit.task")

DEFAULT_POLL_INTERVAL = 3.0  # seconds

Inspector = Callable[[Task, int], None]

# Marks "use the module timeout"; an explicit None means no deadline.
_MODULE_TIMEOUT = object()


class TaskModule:
    def __init__(
        self,
        transport: Transport,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: Optional[float] = None,
    ):
        """
        Initialize task module.

        Args:
            transport: Transport used to re-fetch task representations
            poll_interval: Fixed seconds between polls
            timeout: Default overall deadline per wait (None waits forever)
        """
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        self.transport = transport
        self.poll_interval = poll_interval
        self.timeout = timeout

    async def refresh(self, task: Task) -> Task:
        """
        Fetch the current snapshot of a task.

        Args:
            task: Any earlier snapshot of the task

        Returns:
            A new Task snapshot; the argument is left untouched
        """
        if not task.href:
            raise ValueError("task has no reference to poll")
        document = await self.transport.fetch(task.href)
        return Task.from_document(document)

    async def wait_until_complete(
        self,
        task: Task,
        cancel_event: Optional[asyncio.Event] = None,
        poll_interval: Optional[float] = None,
        timeout: Union[float, None, object] = _MODULE_TIMEOUT,
        inspector: Optional[Inspector] = None,
    ) -> Task:
        """
        Poll a task until it reaches a terminal status.

        Args:
            task: Task returned by the originating call
            cancel_event: Set it to stop waiting; checked before every poll
                and during every sleep, never during an in-flight fetch
            poll_interval: Override of the module's fixed interval
            timeout: Deadline in seconds for this wait; None waits without a
                deadline, omitted uses the module default
            inspector: Called with (snapshot, poll_count) after every poll

        Returns:
            The successful terminal snapshot

        Raises:
            TaskFailedError: terminal status error or aborted
            TaskWaitCancelledError: cancel_event fired first
            TaskTimeoutError: timeout elapsed first
            TransportError: a poll failed
        """
        interval = self.poll_interval if poll_interval is None else poll_interval
        if timeout is _MODULE_TIMEOUT:
            timeout = self.timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None

        current = task
        polls = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.debug(f"Wait for {current.href} cancelled after {polls} poll(s)")
                raise TaskWaitCancelledError(current)

            current = await self.refresh(current)
            polls += 1

            if inspector is not None:
                inspector(current, polls)

            if current.is_success:
                logger.info(f"Task {current.href} succeeded after {polls} poll(s)")
                return current

            if current.is_failed:
                logger.info(f"Task {current.href} ended with status {current.status}")
                raise TaskFailedError(current.failure_message, current)

            delay = interval
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise TaskTimeoutError(current, timeout)
                delay = min(delay, remaining)

            logger.debug(f"Task {current.href} is {current.status}, polling again in {delay}s")
            if await self._sleep(delay, cancel_event):
                logger.debug(f"Wait for {current.href} cancelled after {polls} poll(s)")
                raise TaskWaitCancelledError(current)

    async def wait_all(
        self,
        tasks: Iterable[Task],
        cancel_event: Optional[asyncio.Event] = None,
        poll_interval: Optional[float] = None,
    ) -> List[Task]:
        """
        Wait for independent tasks concurrently.

        Each task gets its own polling loop. Results come back in input order;
        the first failure cancels the remaining waits and propagates.
        """
        waits = [
            asyncio.ensure_future(
                self.wait_until_complete(t, cancel_event=cancel_event, poll_interval=poll_interval)
            )
            for t in tasks
        ]
        try:
            return list(await asyncio.gather(*waits))
        except Exception:
            # Stop the sibling loops before surfacing the first failure.
            for wait in waits:
                if not wait.done():
                    wait.cancel()
            await asyncio.gather(*waits, return_exceptions=True)
            raise

    @staticmethod
    async def _sleep(delay: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """Sleep for delay seconds. Returns True if cancel_event fired first."""
        if cancel_event is None:
            await asyncio.sleep(delay)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True
