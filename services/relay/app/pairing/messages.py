from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

# inbound events
CREATE_SESSION = "create-session"
JOIN_SESSION = "join-session"
OFFER = "offer"
ANSWER = "answer"
ICE_CANDIDATE = "ice-candidate"
HANGUP = "hangup"
OPEN_DOOR = "open-door"
DISCONNECT = "disconnect"

# outbound events
CONNECTED = "connected"
SESSION_CREATED = "session-created"
SESSION_JOINED = "session-joined"
PEER_JOINED = "peer-joined"
PEER_DISCONNECTED = "peer-disconnected"
ERROR = "error"

INVALID_TOKEN = "Invalid Token"
GUEST_EVICTED = "Another device connected. You have been disconnected."
HOST_DISCONNECTED = "Host disconnected"
TOKENS_EXHAUSTED = "No session tokens available"


class Envelope(BaseModel):
    """A single frame received from a peer: ``{"event": ..., "payload": ...}``."""

    model_config = ConfigDict(extra="ignore")

    event: str
    payload: Any = None


class RelayRequest(BaseModel):
    """Negotiation payload addressed to another connection.

    ``sdp`` and ``candidate`` are opaque and forwarded untouched.
    """

    model_config = ConfigDict(extra="ignore")

    target: Optional[str] = None
    sdp: Any = None
    candidate: Any = None


@dataclass(frozen=True)
class Outbound:
    connection_id: str
    event: str
    payload: Any = None


def error(connection_id: str, message: str) -> Outbound:
    return Outbound(connection_id, ERROR, message)
