"""WebSocket server for the signaling relay."""

import asyncio
import contextlib
from datetime import datetime
from typing import Any, Optional

import websockets
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK, WebSocketException

from sigrelay.config import Settings, settings as default_settings
from sigrelay.logger import logger
from ..models import Role
from .events import ErrorMessages
from .lifecycle import LifecycleManager
from .notifier import NotificationDispatcher
from .registry import ConnectionRegistry
from .router import MessageRouter
from .utils import close_websocket_safely, format_remote_address, get_websocket_info


class RelayWebSocketServer:
    """Signaling relay WebSocket server.

    Wires one registry, dispatcher, router and lifecycle manager to the
    ``websockets`` transport. Every connection is served by its own
    ``handle_connection`` task; frames from a connection are routed
    strictly in arrival order.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        *,
        config: Optional[Settings] = None,
        snapshot_interval: Optional[float] = None,
    ):
        self.config = config or default_settings
        self.host = host if host is not None else self.config.host
        self.port = port if port is not None else self.config.port
        self.snapshot_interval = (
            snapshot_interval if snapshot_interval is not None else self.config.snapshot_interval
        )

        self.registry = ConnectionRegistry()
        self.notifier = NotificationDispatcher(self.registry)
        self.router = MessageRouter(self.registry, self.notifier)
        self.lifecycle = LifecycleManager(
            self.registry,
            self.notifier,
            welcome_message=self.config.welcome_message,
            outbound_queue_size=self.config.outbound_queue_size,
        )

        self.running = False
        self.started_at: Optional[datetime] = None
        self.shutdown_event = asyncio.Event()

    async def handle_connection(self, websocket: Any, path: Optional[str] = None) -> None:
        """Serve one connection from open to close."""
        connection_id = self.lifecycle.on_open(
            websocket, remote_address=format_remote_address(websocket)
        )
        error: Optional[BaseException] = None

        try:
            async for message in websocket:
                logger.debug(f"Received from connection {connection_id}: {message!r}")
                try:
                    self.router.route(websocket, message)
                except Exception as e:
                    logger.exception(f"Error handling message from connection {connection_id}: {e}")
                    self.notifier.error_message(websocket, ErrorMessages.INTERNAL)

        except ConnectionClosedOK:
            pass
        except ConnectionClosedError as e:
            error = e
        except WebSocketException as e:
            logger.debug(f"Connection {connection_id} state: {get_websocket_info(websocket)}")
            error = e
        finally:
            if error is not None:
                await self.lifecycle.on_error(websocket, error)
            else:
                await self.lifecycle.on_close(websocket)

    async def start_server(self) -> None:
        """Start WebSocket server and block until shutdown."""
        if self.running:
            logger.warning("Server is already running")
            return

        self.running = True
        self.started_at = datetime.now()
        self.shutdown_event.clear()
        logger.info(f"Signaling relay listening on ws://{self.host}:{self.port}")

        try:
            async with websockets.serve(
                self.handle_connection,
                self.host,
                self.port,
                ping_interval=self.config.ping_interval,
                ping_timeout=self.config.ping_timeout,
                max_size=self.config.max_message_size,
            ):
                snapshot_task = None
                if self.snapshot_interval and self.snapshot_interval > 0:
                    snapshot_task = asyncio.create_task(self._snapshot_loop())

                try:
                    await self.shutdown_event.wait()
                finally:
                    if snapshot_task is not None:
                        snapshot_task.cancel()
                        with contextlib.suppress(asyncio.CancelledError):
                            await snapshot_task

        except Exception as e:
            logger.exception(f"Server error: {e}")
            raise
        finally:
            self.running = False
            logger.info("Server stopped")

    async def _snapshot_loop(self) -> None:
        """Periodically log the registry; diagnostics only."""
        while self.running:
            try:
                await asyncio.sleep(self.snapshot_interval)
                snap = self.registry.snapshot()
                logger.info(
                    f"Registry snapshot | connections: {snap['total_connections']} "
                    f"| hosts: {snap['by_role'][Role.HOST.value]} "
                    f"| clients: {snap['by_role'][Role.CLIENT.value]} "
                    f"| unregistered: {snap['by_role'][Role.UNSET.value]}"
                )
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Snapshot loop error: {e}")

    def get_status(self) -> dict[str, Any]:
        """Get server status"""
        snap = self.registry.snapshot()
        return {
            "running": self.running,
            "host": self.host,
            "port": self.port,
            "total_connections": snap["total_connections"],
            "by_role": snap["by_role"],
            "client_count": self.registry.count_by_role(Role.CLIENT),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "server_time": datetime.now().isoformat(),
            "outbound_queues": {
                channel.name: {
                    "queued": channel.queue.qsize(),
                    "sent": channel.sent,
                    "dropped": channel.dropped,
                }
                for channel in self.notifier.channels.values()
            },
        }

    async def shutdown(self) -> None:
        """Gracefully shutdown server"""
        logger.info("Shutting down server...")
        self.running = False

        for websocket in list(self.notifier.channels):
            await close_websocket_safely(websocket, code=1001, reason="relay shutting down")

        for websocket in list(self.notifier.channels):
            await self.lifecycle.on_close(websocket)

        self.shutdown_event.set()
        logger.info("Server shutdown complete")
