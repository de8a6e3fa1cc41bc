"""Generation tokens that keep only the most recent hover's request effective."""

import asyncio
import logging

logger = logging.getLogger(__name__)


class CancellationToken:
    """Handle for one resolution attempt.

    A token may be bound to the asyncio task doing the work, in which case
    cancelling the token also cancels the task at its next await.
    """

    __slots__ = ("generation", "cancelled", "_task")

    def __init__(self, generation: int):
        self.generation = generation
        self.cancelled = False
        self._task: asyncio.Task | None = None

    def bind(self, task: asyncio.Task) -> None:
        """Attach the task performing this attempt."""
        self._task = task
        if self.cancelled:
            task.cancel()

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "live"
        return f"CancellationToken(generation={self.generation}, {state})"


class RequestCoordinator:
    """Issues generation tokens; at most one token is live at any time."""

    def __init__(self) -> None:
        self._generation = 0
        self._current: CancellationToken | None = None

    @property
    def current(self) -> CancellationToken | None:
        return self._current

    def begin(self) -> CancellationToken:
        """Invalidate the previous token and return a new live one."""
        if self._current is not None:
            self._current.cancel()
        self._generation += 1
        self._current = CancellationToken(self._generation)
        logger.debug("Began resolution generation %d", self._generation)
        return self._current

    def is_live(self, token: CancellationToken) -> bool:
        """Whether results produced under ``token`` may still be rendered."""
        return token is self._current and not token.cancelled

    def cancel(self) -> None:
        """Invalidate the current token without issuing a new one."""
        if self._current is not None:
            self._current.cancel()
