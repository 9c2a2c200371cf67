"""Exceptions raised by the relay core."""


class RelayError(Exception):
    """Base class for relay errors."""


class ConnectionAlreadyRegistered(RelayError):
    """A connection was registered twice."""


class UnregisteredConnection(RelayError):
    """An operation referenced a connection the registry does not know."""


class InvalidRole(RelayError):
    """A registration asked for something other than host or client."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid role: {value!r} (expected 'host' or 'client')")


class RoleAlreadyAssigned(RelayError):
    """A connection tried to switch to a different role after registering."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Already registered as {current.value}; cannot re-register as {requested.value}"
        )


class MalformedMessage(RelayError):
    """An inbound frame is not a JSON object with a string 'type'."""
