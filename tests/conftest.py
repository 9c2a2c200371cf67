"""Pytest configuration and shared fixtures."""

import asyncio
import itertools
import json
from typing import Any, AsyncGenerator, Callable, List, Optional
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from websockets.exceptions import ConnectionClosedError
from websockets.frames import Close

from sigrelay.ws.lifecycle import LifecycleManager
from sigrelay.ws.notifier import NotificationDispatcher
from sigrelay.ws.registry import ConnectionRegistry
from sigrelay.ws.router import MessageRouter


_ports = itertools.count(50000)
_CLOSE = object()


class FakeWebSocket:
    """Scripted stand-in for a websockets server connection.

    Frames fed with ``feed`` are yielded by ``async for`` in order;
    ``disconnect`` ends the iteration cleanly and ``fail`` ends it with a
    transport error.
    """

    def __init__(self, port: int):
        self.remote_address = ("127.0.0.1", port)
        self.close_code: Optional[int] = None
        self.sent: List[Any] = []
        self.send = AsyncMock(side_effect=self._record)
        self.close = AsyncMock(side_effect=self._close)
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def _record(self, frame: Any) -> None:
        self.sent.append(frame)

    async def _close(self, code: int = 1000, reason: str = "") -> None:
        self.close_code = code
        self._inbox.put_nowait(_CLOSE)

    def feed(self, frame: Any) -> None:
        self._inbox.put_nowait(frame)

    def send_json(self, **payload: Any) -> str:
        frame = json.dumps(payload)
        self.feed(frame)
        return frame

    def disconnect(self) -> None:
        self._inbox.put_nowait(_CLOSE)

    def fail(self) -> None:
        self._inbox.put_nowait(ConnectionClosedError(Close(1006, ""), None))

    @property
    def pending(self) -> int:
        """Frames fed but not yet consumed by the server."""
        return self._inbox.qsize()

    def received(self) -> List[dict]:
        """Decoded frames sent to this connection so far."""
        return [json.loads(frame) for frame in self.sent]

    def received_of(self, event_type: str) -> List[dict]:
        return [msg for msg in self.received() if msg.get("type") == event_type]

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._inbox.get()
        if item is _CLOSE:
            self.close_code = self.close_code or 1000
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self.close_code = 1006
            raise item
        return item


@pytest.fixture
def make_ws() -> Callable[[], FakeWebSocket]:
    """Factory for fake connections with distinct remote ports."""

    def _make() -> FakeWebSocket:
        return FakeWebSocket(next(_ports))

    return _make


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def notifier(registry: ConnectionRegistry) -> NotificationDispatcher:
    return NotificationDispatcher(registry)


@pytest.fixture
def router(registry: ConnectionRegistry, notifier: NotificationDispatcher) -> MessageRouter:
    return MessageRouter(registry, notifier)


@pytest_asyncio.fixture
async def lifecycle(
    registry: ConnectionRegistry, notifier: NotificationDispatcher
) -> AsyncGenerator[LifecycleManager, None]:
    manager = LifecycleManager(registry, notifier, welcome_message="welcome")
    yield manager
    # Stop writer tasks left behind by connections the test never closed
    for conn in list(notifier.channels):
        await notifier.detach(conn).close()


@pytest.fixture
def flush(notifier: NotificationDispatcher):
    """Wait until every outbound channel has written its queued frames."""

    async def _flush() -> None:
        await asyncio.gather(*(channel.drain() for channel in notifier.channels.values()))

    return _flush


async def wait_for_condition(
    condition_func,
    timeout: float = 2.0,
    interval: float = 0.01,
    error_message: str = "Condition not met within timeout",
):
    """Wait for a condition to become true."""
    loop = asyncio.get_running_loop()
    start_time = loop.time()
    while loop.time() - start_time < timeout:
        if condition_func():
            return True
        await asyncio.sleep(interval)
    raise TimeoutError(error_message)


@pytest.fixture
def wait_for():
    return wait_for_condition
