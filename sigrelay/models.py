"""Data models for the signaling relay."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from .exceptions import InvalidRole


class Role(str, Enum):
    """Role a connection plays in a signaling session."""

    UNSET = "unset"     # Connected, not registered yet
    HOST = "host"       # Produces offers
    CLIENT = "client"   # Answers offers

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Parse a registration value, accepting only host or client."""
        if isinstance(value, cls):
            role = value
        else:
            try:
                role = cls(value)
            except ValueError:
                raise InvalidRole(value) from None
        if role is cls.UNSET:
            raise InvalidRole(value)
        return role

    def opposite(self) -> "Role":
        """Role that receives payloads sent by this role."""
        if self is Role.HOST:
            return Role.CLIENT
        if self is Role.CLIENT:
            return Role.HOST
        raise InvalidRole(self.value)


class ConnectionRecord(BaseModel):
    """Per-connection state kept by the registry."""

    id: int                                         # Process-unique, never reused
    role: Role = Role.UNSET
    remote_address: Optional[str] = None            # For logs only
    connected_at: datetime = Field(default_factory=datetime.now)
    registered_at: Optional[datetime] = None

    @property
    def is_registered(self) -> bool:
        return self.role is not Role.UNSET
