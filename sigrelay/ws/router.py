"""Message router: registration handling and opposite-role forwarding."""

from typing import Hashable, Union

from sigrelay.logger import logger
from ..exceptions import InvalidRole, MalformedMessage, RoleAlreadyAssigned, UnregisteredConnection
from ..models import Role
from .events import Envelope, ErrorMessages, PeerEvents, parse_envelope
from .notifier import NotificationDispatcher
from .registry import ConnectionRegistry


class MessageRouter:
    """Decides who receives each inbound frame.

    ``route`` is synchronous: it reads the registry and queues frames on
    outbound channels without awaiting, so the role lookup and the fan-out
    that depends on it see the same registry state.
    """

    def __init__(self, registry: ConnectionRegistry, notifier: NotificationDispatcher):
        self.registry = registry
        self.notifier = notifier

    def route(self, sender: Hashable, raw: Union[str, bytes]) -> int:
        """Handle one inbound frame from ``sender``.

        Returns the number of peers the frame was forwarded to (always 0
        for registrations and rejected frames).
        """
        try:
            envelope = parse_envelope(raw)
        except MalformedMessage as e:
            logger.warning(f"Malformed message from {self._label(sender)}: {e}")
            self.notifier.error_message(sender, ErrorMessages.INVALID_JSON)
            return 0

        if envelope.type == PeerEvents.MODE:
            self._register(sender, envelope)
            return 0

        return self._forward(sender, envelope, raw)

    def _register(self, sender: Hashable, envelope: Envelope) -> None:
        value = (envelope.model_extra or {}).get("value")
        try:
            role = Role.parse(value)
            changed = self.registry.set_role(sender, role)
        except (InvalidRole, RoleAlreadyAssigned) as e:
            logger.warning(f"Rejected registration from {self._label(sender)}: {e}")
            self.notifier.error_message(sender, str(e))
            return
        except UnregisteredConnection:
            logger.error("Registration from a connection that was never opened")
            self.notifier.error_message(sender, ErrorMessages.INTERNAL)
            return

        record = self.registry.record_of(sender)
        logger.info(f"Connection {record.id} registered as {role.value}")
        self.notifier.system_message(sender, f"Registered as {role.value}")

        if changed and role is Role.CLIENT:
            self.notifier.broadcast_client_count()
            self.notifier.request_offer(record.id)

    def _forward(self, sender: Hashable, envelope: Envelope, raw: Union[str, bytes]) -> int:
        role = self.registry.role_of(sender)
        if role is None or role is Role.UNSET:
            logger.warning(
                f"Dropping '{envelope.type}' from unregistered {self._label(sender)}"
            )
            self.notifier.error_message(sender, ErrorMessages.NOT_REGISTERED)
            return 0

        target = role.opposite()
        delivered = self.notifier.send_to_role(target, raw, exclude=sender)
        logger.debug(
            f"Forwarded '{envelope.type}' from {self._label(sender)} to {delivered} {target.value}(s)"
        )
        return delivered

    def _label(self, conn: Hashable) -> str:
        record = self.registry.record_of(conn)
        return f"connection {record.id}" if record is not None else "unknown connection"
