from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from archgraph_core.view import GraphView

logger = logging.getLogger(__name__)


class AsyncGraphSession:
    """
    Cooperative host for a `GraphView` on an asyncio loop.

    - start(): background frame loop; one layout tick per frame, then a
      `frame_interval` sleep; parks on an event while the layout is at rest
    - handle(): applies one input event between frames
    - frame(): advances a single frame on demand
    - subscribe(): returns an asyncio.Queue receiving per-frame state

    Frames and event handlers share one lock, so a tick never overlaps a
    handler and a pin set by a handler is seen by the next tick.
    """

    def __init__(self, view: GraphView, frame_interval: float | None = None, queue_size: int = 64) -> None:
        self.view = view
        self.frame_interval = (
            view.config.frame_interval if frame_interval is None else float(frame_interval)
        )
        self._queue_size = queue_size
        self._lock = asyncio.Lock()
        self._wake = asyncio.Event()
        self._runner_task: Optional[asyncio.Task] = None
        self._subscribers: Set[asyncio.Queue] = set()
        self._closed = False
        if view.engine is not None:
            view.engine.on_restart(lambda _engine: self._wake.set())

    # --- views -------------------------------------------------------------
    def graph(self) -> Dict[str, Any]:
        return self.view.graph_dict()

    def state(self) -> Dict[str, Any]:
        return self.view.state()

    @property
    def is_running(self) -> bool:
        return self._runner_task is not None and not self._runner_task.done()

    # --- pubsub ------------------------------------------------------------
    def subscribe(self) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        self._subscribers.discard(q)

    async def _broadcast(self) -> None:
        state = self.view.state()
        for q in list(self._subscribers):
            try:
                q.put_nowait(state)
            except asyncio.QueueFull:
                # slow consumer; it will catch up on a later frame
                pass

    # --- lifecycle ---------------------------------------------------------
    async def start(self) -> None:
        if self.is_running or self._closed:
            return
        if self.view.running:
            self._wake.set()

        async def _loop() -> None:
            while not self._closed:
                if not self.view.running:
                    self._wake.clear()
                    await self._wake.wait()
                    continue
                await self.frame()
                await asyncio.sleep(self.frame_interval)

        self._runner_task = asyncio.create_task(_loop())

    async def stop(self) -> None:
        """Stop the frame loop without touching the view."""
        task, self._runner_task = self._runner_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def close(self) -> None:
        """Stop the loop and tear the view down (pins released, layout stopped)."""
        self._closed = True
        self._wake.set()
        await self.stop()
        async with self._lock:
            self.view.teardown()
        await self._broadcast()

    async def frame(self) -> bool:
        async with self._lock:
            ticked = self.view.frame()
        if ticked:
            await self._broadcast()
        return ticked

    async def handle(self, event):
        async with self._lock:
            result = self.view.handle(event)
        if self.view.running:
            self._wake.set()
        await self._broadcast()
        return result

    async def reheat(self) -> None:
        if self.view.engine is None:
            return
        async with self._lock:
            self.view.engine.reheat(alpha=self.view.config.layout.reheat_alpha)
        self._wake.set()
