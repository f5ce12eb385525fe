"""Pairing protocol handlers.

Each handler takes ``(registry, connection_id, payload)`` and returns the
outbound messages to deliver. Handlers never touch the network and never
suspend, so running one to completion is atomic with respect to the registry.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from . import messages as m
from .messages import Outbound, RelayRequest
from .registry import SessionRegistry, TokenSpaceExhausted

logger = logging.getLogger(__name__)

Handler = Callable[[SessionRegistry, str, Any], List[Outbound]]

# relay kind -> (payload field carried over, field naming the sender)
RELAY_FIELDS: Dict[str, Tuple[Optional[str], str]] = {
    m.OFFER: ("sdp", "caller"),
    m.ANSWER: ("sdp", "responder"),
    m.ICE_CANDIDATE: ("candidate", "sender"),
    m.HANGUP: (None, "sender"),
    m.OPEN_DOOR: (None, "sender"),
}


def create_session(registry: SessionRegistry, connection_id: str, payload: Any = None) -> List[Outbound]:
    try:
        token = registry.create(connection_id)
    except TokenSpaceExhausted:
        logger.warning("No pairing tokens left for %s (%d live sessions)", connection_id, len(registry))
        return [m.error(connection_id, m.TOKENS_EXHAUSTED)]
    logger.info("Session created: %s by %s", token, connection_id)
    return [Outbound(connection_id, m.SESSION_CREATED, token)]


def _normalize_token(payload: Any) -> Optional[str]:
    if isinstance(payload, bool):
        return None
    if isinstance(payload, int):
        return str(payload)
    if isinstance(payload, str):
        return payload.strip()
    return None


def join_session(registry: SessionRegistry, connection_id: str, payload: Any) -> List[Outbound]:
    token = _normalize_token(payload)
    session = registry.get(token) if token else None
    if session is None:
        logger.info("Join rejected for %s: invalid token %r", connection_id, payload)
        return [m.error(connection_id, m.INVALID_TOKEN)]

    out: List[Outbound] = []
    if session.guest is not None:
        out.append(m.error(session.guest, m.GUEST_EVICTED))
        logger.info("Session %s guest overridden: %s -> %s", token, session.guest, connection_id)

    session = registry.set_guest(token, connection_id)
    out.append(Outbound(connection_id, m.SESSION_JOINED, {"role": "guest", "peerId": session.host}))
    out.append(Outbound(session.host, m.PEER_JOINED, {"role": "host", "peerId": connection_id}))
    logger.info("User %s joined session %s", connection_id, token)
    return out


def _relay(kind: str) -> Handler:
    field, sender_field = RELAY_FIELDS[kind]

    def handler(registry: SessionRegistry, connection_id: str, payload: Any) -> List[Outbound]:
        try:
            request = RelayRequest.model_validate(payload if isinstance(payload, dict) else {})
        except ValidationError as exc:
            logger.warning("Malformed %s from %s: %s", kind, connection_id, exc)
            return []
        if not request.target:
            logger.debug("Dropping %s from %s: no target", kind, connection_id)
            return []

        body: Dict[str, Any] = {}
        if field is not None:
            body[field] = getattr(request, field)
        body[sender_field] = connection_id
        return [Outbound(request.target, kind, body)]

    handler.__name__ = "relay_" + kind.replace("-", "_")
    return handler


def disconnect(registry: SessionRegistry, connection_id: str, payload: Any = None) -> List[Outbound]:
    out: List[Outbound] = []
    for token, session in registry.find_by_connection(connection_id):
        if session.host == connection_id:
            if session.guest is not None:
                out.append(m.error(session.guest, m.HOST_DISCONNECTED))
                out.append(Outbound(session.guest, m.PEER_DISCONNECTED))
                out.append(Outbound(session.guest, m.HANGUP, {"sender": connection_id}))
            registry.remove(token)
            logger.info("Session %s destroyed (host left)", token)
        else:
            registry.clear_guest(token)
            out.append(Outbound(session.host, m.PEER_DISCONNECTED))
            logger.info("Session %s guest left", token)
    return out


HANDLERS: Dict[str, Handler] = {
    m.CREATE_SESSION: create_session,
    m.JOIN_SESSION: join_session,
    m.DISCONNECT: disconnect,
}
HANDLERS.update({kind: _relay(kind) for kind in RELAY_FIELDS})
