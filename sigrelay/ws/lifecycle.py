"""Connection lifecycle: open, close and transport-error handling."""

import contextlib
from typing import Hashable, Optional

from sigrelay.logger import logger
from ..models import ConnectionRecord, Role
from .notifier import NotificationDispatcher
from .outbound import OutboundChannel
from .registry import ConnectionRegistry


class LifecycleManager:
    """Reacts to transport events for each connection.

    Per connection: Connecting -> Open(unset) -> Open(host|client) -> Closed.
    Registration itself happens in the router because it arrives as a
    message, not as a transport event.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        notifier: NotificationDispatcher,
        *,
        welcome_message: str = "Connected to signaling relay",
        outbound_queue_size: int = 256,
    ):
        self.registry = registry
        self.notifier = notifier
        self.welcome_message = welcome_message
        self.outbound_queue_size = outbound_queue_size

    def on_open(self, conn: Hashable, remote_address: Optional[str] = None) -> int:
        """Register a new connection and greet it."""
        connection_id = self.registry.register(conn, remote_address=remote_address)

        channel = OutboundChannel(
            conn, maxsize=self.outbound_queue_size, name=f"conn-{connection_id}"
        )
        channel.start()
        self.notifier.attach(conn, channel)

        self.notifier.system_message(conn, self.welcome_message)
        logger.info(
            f"Connection {connection_id} opened from {remote_address or 'unknown'} "
            f"| Open connections: {len(self.registry)}"
        )
        return connection_id

    async def on_close(self, conn: Hashable) -> Optional[ConnectionRecord]:
        """Forget a connection; hosts learn the new count if it was a client.

        Safe to call more than once.
        """
        record = self.registry.unregister(conn)
        if record is not None:
            if record.role is Role.CLIENT:
                self.notifier.broadcast_client_count()
            logger.info(
                f"Connection {record.id} ({record.role.value}) closed "
                f"| Open connections: {len(self.registry)}"
            )

        channel = self.notifier.detach(conn)
        if channel is not None:
            with contextlib.suppress(Exception):
                await channel.close()

        return record

    async def on_error(self, conn: Hashable, error: BaseException) -> Optional[ConnectionRecord]:
        """Treat a transport error exactly like a close."""
        record = self.registry.record_of(conn)
        label = f"connection {record.id}" if record is not None else "unknown connection"
        logger.error(f"Transport error on {label}: {error}")
        return await self.on_close(conn)
