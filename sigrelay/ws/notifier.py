"""Notification dispatcher: relay-generated messages and role fan-out."""

from typing import Dict, Hashable, Optional

from sigrelay.logger import logger
from ..models import Role
from .events import client_update_event, error_event, request_offer_event, system_event
from .outbound import OutboundChannel
from .registry import ConnectionRegistry
from .utils import is_websocket_closed


class NotificationDispatcher:
    """Sends frames to single connections or whole role groups.

    Holds no relay state of its own beyond the outbound channel of each
    open connection; every count is read from the registry at send time.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry
        self._channels: Dict[Hashable, OutboundChannel] = {}

    def attach(self, conn: Hashable, channel: OutboundChannel) -> None:
        self._channels[conn] = channel

    def detach(self, conn: Hashable) -> Optional[OutboundChannel]:
        return self._channels.pop(conn, None)

    def channel_of(self, conn: Hashable) -> Optional[OutboundChannel]:
        return self._channels.get(conn)

    @property
    def channels(self) -> Dict[Hashable, OutboundChannel]:
        return dict(self._channels)

    def send_raw(self, conn: Hashable, frame: str) -> bool:
        """Queue ``frame`` for one connection; never raises."""
        channel = self._channels.get(conn)
        if channel is None:
            logger.debug("Dropping frame for a connection without an outbound channel")
            return False
        try:
            return channel.offer(frame)
        except Exception as e:
            logger.error(f"Failed to queue frame on {channel.name}: {e}")
            return False

    def send_to_role(self, role: Role, frame: str, exclude: Optional[Hashable] = None) -> int:
        """Fan ``frame`` out to every connection holding ``role``.

        Iterates a snapshot of the registry; one failing recipient does not
        stop delivery to the rest. Returns how many recipients accepted it.
        """
        delivered = 0
        for conn, record in self.registry.connections(role):
            if conn is exclude:
                continue
            if is_websocket_closed(conn):
                logger.debug(f"Skipping connection {record.id}: transport not writable")
                continue
            if self.send_raw(conn, frame):
                delivered += 1
        return delivered

    def broadcast_client_count(self) -> int:
        """Tell every host how many clients are registered right now."""
        count = self.registry.count_by_role(Role.CLIENT)
        hosts = self.send_to_role(Role.HOST, client_update_event(count))
        logger.info(f"Client count {count} sent to {hosts} host(s)")
        return count

    def request_offer(self, client_id: int) -> int:
        """Ask every host to send a fresh offer addressed at ``client_id``."""
        hosts = self.send_to_role(Role.HOST, request_offer_event(client_id))
        logger.info(f"Requested offer for client {client_id} from {hosts} host(s)")
        return hosts

    def system_message(self, conn: Hashable, text: str) -> bool:
        return self.send_raw(conn, system_event(text))

    def error_message(self, conn: Hashable, text: str) -> bool:
        return self.send_raw(conn, error_event(text))
