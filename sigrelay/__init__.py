"""
sigrelay - WebSocket signaling relay for peer-to-peer media sessions

Ferries session descriptions and ICE candidates between a "host" and its
"clients" without interpreting them:
- Role registration over the same socket that carries signaling
- Opposite-role fan-out of raw payloads
- Client-count and offer-request notifications for hosts
"""

from .config import settings
from .exceptions import ConnectionAlreadyRegistered
from .exceptions import InvalidRole
from .exceptions import MalformedMessage
from .exceptions import RelayError
from .exceptions import RoleAlreadyAssigned
from .exceptions import UnregisteredConnection
from .logger import logger
from .models import ConnectionRecord
from .models import Role
from .ws import ConnectionRegistry
from .ws import LifecycleManager
from .ws import MessageRouter
from .ws import NotificationDispatcher
from .ws import RelayWebSocketServer

__version__ = "0.1.0"

__all__ = [
    # Core components
    "ConnectionRegistry",
    "LifecycleManager",
    "MessageRouter",
    "NotificationDispatcher",
    "RelayWebSocketServer",
    # Data model
    "ConnectionRecord",
    "Role",
    # Errors
    "RelayError",
    "ConnectionAlreadyRegistered",
    "UnregisteredConnection",
    "InvalidRole",
    "RoleAlreadyAssigned",
    "MalformedMessage",
    # Ambient
    "logger",
    "settings",
]
