"""Signaling wire protocol definitions."""

import json
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import MalformedMessage


class Envelope(BaseModel):
    """Inbound signaling envelope.

    Only ``type`` is interpreted; every other field is kept as-is and never
    re-serialized for forwarding.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1, description="Message type")


class PeerEvents:
    """Types sent by browsers."""

    MODE = "mode"
    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "iceCandidate"


class RelayEvents:
    """Types generated by the relay."""

    SYSTEM = "system"
    ERROR = "error"
    CLIENT_UPDATE = "client-update"
    REQUEST_OFFER = "request-offer"


class ErrorMessages:
    """Fixed diagnostics returned in ``error`` envelopes."""

    INVALID_JSON = "Invalid message: expected a JSON object with a string 'type' field"
    NOT_REGISTERED = "You must register first by sending a 'mode' message"
    INTERNAL = "Internal relay error while handling message"


def parse_envelope(raw: Union[str, bytes]) -> Envelope:
    """Parse a raw frame into an envelope or raise MalformedMessage."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"Frame is not valid UTF-8: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedMessage(f"Invalid JSON: {e}") from e
    except (ValueError, RecursionError) as e:
        # Nesting too deep for the decoder
        raise MalformedMessage(f"Unparseable JSON: {e.__class__.__name__}") from e

    if not isinstance(data, dict):
        raise MalformedMessage(f"Expected a JSON object, got {type(data).__name__}")
    if not isinstance(data.get("type"), str) or not data["type"]:
        raise MalformedMessage("Missing or non-string 'type' field")

    return Envelope.model_validate(data)


def create_event(event_type: str, **fields: Any) -> str:
    """Serialize a relay-generated envelope to a text frame."""
    event = {"type": event_type}
    event.update(fields)
    return json.dumps(event)


def system_event(message: str) -> str:
    return create_event(RelayEvents.SYSTEM, message=message)


def error_event(message: str) -> str:
    return create_event(RelayEvents.ERROR, message=message)


def client_update_event(count: int) -> str:
    return create_event(RelayEvents.CLIENT_UPDATE, count=count)


def request_offer_event(client_id: int) -> str:
    return create_event(RelayEvents.REQUEST_OFFER, clientId=client_id)
