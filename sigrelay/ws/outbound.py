"""Outbound message channels for per-connection single-writer sending.

Every frame for a connection goes through one bounded queue drained by
exactly one writer coroutine. This prevents concurrent websocket.send()
calls and keeps a slow peer's backlog away from everyone else: producers
never await a peer, they either queue the frame or drop it.
"""

from __future__ import annotations

import asyncio
from typing import Any

from .utils import is_websocket_closed
from sigrelay.logger import logger


class OutboundChannel:
    """Per-connection outbound channel with a single writer task."""

    def __init__(
        self,
        websocket: Any,
        *,
        maxsize: int = 256,
        name: str | None = None,
    ) -> None:
        self.websocket = websocket
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._writer_task: asyncio.Task | None = None
        self._closed = False
        self.name = name or "outbound"
        self.sent = 0
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        if self._writer_task is None or self._writer_task.done():
            self._writer_task = asyncio.create_task(self._writer(), name=f"{self.name}-writer")

    def offer(self, frame: str) -> bool:
        """Queue a frame without waiting.

        Returns False when the channel is closed or its queue is full; the
        frame is dropped in that case.
        """
        if self._closed:
            return False
        try:
            self.queue.put_nowait(frame)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"{self.name}: outbound queue full, dropping frame")
            return False

    async def drain(self) -> None:
        """Wait until every queued frame has been handed to the socket."""
        await self.queue.join()

    async def close(self) -> None:
        self._closed = True
        if self._writer_task is not None:
            self._writer_task.cancel()
            try:
                await self._writer_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Error awaiting writer task close: {e}")
        # Discard whatever is left
        while not self.queue.empty():
            self.queue.get_nowait()
            self.queue.task_done()

    async def _writer(self) -> None:
        """Single writer that sends all frames on this connection."""
        try:
            while not self._closed:
                frame = await self.queue.get()
                try:
                    if is_websocket_closed(self.websocket):
                        logger.debug(f"{self.name}: socket closed; dropping outbound frame")
                        self.dropped += 1
                    else:
                        await self.websocket.send(frame)
                        self.sent += 1
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    # The peer vanished mid-send; its close handler cleans up
                    self.dropped += 1
                    logger.error(f"{self.name}: outbound send failed: {e}")
                finally:
                    self.queue.task_done()
        except asyncio.CancelledError:
            pass
