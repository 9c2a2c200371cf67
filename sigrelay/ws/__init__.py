"""WebSocket signaling relay core."""

from .events import Envelope
from .events import PeerEvents
from .events import RelayEvents
from .events import parse_envelope
from .lifecycle import LifecycleManager
from .notifier import NotificationDispatcher
from .outbound import OutboundChannel
from .registry import ConnectionRegistry
from .router import MessageRouter
from .server import RelayWebSocketServer

__all__ = [
    "ConnectionRegistry",
    "Envelope",
    "LifecycleManager",
    "MessageRouter",
    "NotificationDispatcher",
    "OutboundChannel",
    "PeerEvents",
    "RelayEvents",
    "RelayWebSocketServer",
    "parse_envelope",
]
