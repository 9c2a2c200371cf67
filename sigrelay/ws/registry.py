"""Connection registry: live connections and the role each one claimed."""

import itertools
from collections import Counter
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from sigrelay.logger import logger
from ..exceptions import ConnectionAlreadyRegistered, RoleAlreadyAssigned, UnregisteredConnection
from ..models import ConnectionRecord, Role


class ConnectionRegistry:
    """Single source of truth for which connections exist and their roles.

    All methods are synchronous. The registry is owned by one event loop,
    so a lookup followed by a fan-out never interleaves with another
    connection's mutation.
    """

    def __init__(self):
        self._records: Dict[Hashable, ConnectionRecord] = {}
        self._ids = itertools.count(1)

    def register(self, conn: Hashable, remote_address: Optional[str] = None) -> int:
        """Create a record with a fresh id and role ``unset``."""
        if conn in self._records:
            raise ConnectionAlreadyRegistered(
                f"Connection {self._records[conn].id} is already registered"
            )

        record = ConnectionRecord(id=next(self._ids), remote_address=remote_address)
        self._records[conn] = record
        logger.debug(f"Registered connection {record.id} ({remote_address or 'unknown'})")
        return record.id

    def set_role(self, conn: Hashable, role: Role) -> bool:
        """Assign a role to a connection.

        Returns True when the role changed, False when the same role was
        requested again.
        """
        record = self._records.get(conn)
        if record is None:
            raise UnregisteredConnection("Connection is not registered")

        role = Role.parse(role)
        if record.role is role:
            return False
        if record.is_registered:
            raise RoleAlreadyAssigned(record.role, role)

        record.role = role
        record.registered_at = datetime.now()
        return True

    def unregister(self, conn: Hashable) -> Optional[ConnectionRecord]:
        """Remove and return the record, or None if it was already gone."""
        return self._records.pop(conn, None)

    def record_of(self, conn: Hashable) -> Optional[ConnectionRecord]:
        return self._records.get(conn)

    def role_of(self, conn: Hashable) -> Optional[Role]:
        record = self._records.get(conn)
        return record.role if record is not None else None

    def count_by_role(self, role: Role) -> int:
        return sum(1 for record in self._records.values() if record.role is role)

    def connections(self, role: Role) -> List[Tuple[Hashable, ConnectionRecord]]:
        """Snapshot of (connection, record) pairs holding ``role``."""
        return [(conn, record) for conn, record in self._records.items() if record.role is role]

    def for_each(self, role: Role, fn: Callable[[Hashable, ConnectionRecord], Any]) -> int:
        """Apply ``fn`` to every connection with ``role``; returns how many."""
        matches = self.connections(role)
        for conn, record in matches:
            fn(conn, record)
        return len(matches)

    def snapshot(self) -> Dict[str, Any]:
        """Diagnostic summary; not authoritative."""
        by_role = Counter(record.role.value for record in self._records.values())
        return {
            "total_connections": len(self._records),
            "by_role": {role.value: by_role.get(role.value, 0) for role in Role},
            "connection_ids": sorted(record.id for record in self._records.values()),
        }

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, conn: Hashable) -> bool:
        return conn in self._records
