"""Cooperative cancellation token for one submitted task."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Optional, TypeVar

from cognitiveAgent.utils.error_handler import OperationCancelled

LOGGER = logging.getLogger("cognitiveAgent.cancellation")

T = TypeVar("T")


class CancellationToken:
    """Flag plus abort handle for the backend call currently in flight.

    A token is created per submission and never cleared. Every suspension point
    awaits through :meth:`guard`, and every shared-state write is preceded by
    :meth:`raise_if_cancelled`.
    """

    def __init__(self) -> None:
        self._raised = False
        self._inflight: Optional[asyncio.Future] = None
        self._label: Optional[str] = None

    @property
    def raised(self) -> bool:
        return self._raised

    def cancel(self) -> bool:
        """Raise the token and abort the in-flight call. Returns False if already raised."""
        if self._raised:
            return False
        self._raised = True
        if self._inflight is not None and not self._inflight.done():
            LOGGER.info(f"Aborting in-flight call: {self._label}")
            self._inflight.cancel()
        return True

    def raise_if_cancelled(self, where: str = "") -> None:
        if self._raised:
            raise OperationCancelled(where or "cancelled")

    async def guard(self, awaitable: Awaitable[T], *, label: str = "backend call") -> T:
        """Await ``awaitable`` as an abortable task.

        Raises OperationCancelled if the token is raised before or while the
        call is outstanding.
        """
        if self._raised:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelled(label)

        task = asyncio.ensure_future(awaitable)
        self._inflight, self._label = task, label
        try:
            return await task
        except asyncio.CancelledError:
            if self._raised:
                raise OperationCancelled(label) from None
            raise
        finally:
            if self._inflight is task:
                self._inflight, self._label = None, None
