# src/analysis/server_status.py - v1
"""Backend liveness monitor.

Polls ``is_reachable`` on an interval and publishes UNKNOWN -> UP/DOWN
transitions. Repeated identical results are not re-published.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from smelltrack.analysis.base_client import BaseAnalysisClient
from smelltrack.analysis.models import ServerState
from smelltrack.core.events import Subscribers, Unsubscribe

logger = logging.getLogger(__name__)


class ServerStatusMonitor:
    """Holds the last known backend state."""

    def __init__(self, client: BaseAnalysisClient, interval_s: float = 10.0) -> None:
        self._client = client
        self._interval = interval_s
        self._state = ServerState.UNKNOWN
        self._changes: Subscribers[ServerState] = Subscribers("server-status")
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_down(self) -> bool:
        return self._state == ServerState.DOWN

    def subscribe(self, callback: Callable[[ServerState], None]) -> Unsubscribe:
        return self._changes.subscribe(callback)

    def set_state(self, state: ServerState) -> None:
        if state == self._state:
            return
        previous = self._state
        self._state = state
        if state == ServerState.DOWN:
            logger.warning("Analysis backend unavailable (was %s)", previous.value)
        elif previous == ServerState.DOWN:
            logger.info("Analysis backend reconnected")
        else:
            logger.info("Analysis backend is %s", state.value)
        self._changes.emit(state)

    async def check(self) -> ServerState:
        """Probe once and update the state."""
        reachable = await self._client.is_reachable()
        self.set_state(ServerState.UP if reachable else ServerState.DOWN)
        return self._state

    async def _poll(self) -> None:
        while True:
            await self.check()
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._poll())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
