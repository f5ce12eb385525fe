from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from . import messages as m
from .handlers import HANDLERS, Handler
from .messages import Outbound
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class RelayCoordinator:
    """Owns a session registry and routes connection events to handlers."""

    def __init__(
        self,
        registry: Optional[SessionRegistry] = None,
        *,
        handlers: Optional[Dict[str, Handler]] = None,
    ) -> None:
        self.registry = registry if registry is not None else SessionRegistry()
        self._handlers = dict(handlers if handlers is not None else HANDLERS)
        self._lock = threading.Lock()

    def handle(self, connection_id: str, event: str, payload: Any = None) -> List[Outbound]:
        handler = self._handlers.get(event)
        if handler is None:
            logger.warning("Ignoring unknown event %r from %s", event, connection_id)
            return []
        with self._lock:
            return handler(self.registry, connection_id, payload)

    def disconnect(self, connection_id: str) -> List[Outbound]:
        return self.handle(connection_id, m.DISCONNECT)

    def session_count(self) -> int:
        with self._lock:
            return len(self.registry)
