"""Pairing and signaling relay package."""

from .coordinator import RelayCoordinator
from .hub import ConnectionHub
from .registry import Session, SessionRegistry

__all__ = ["ConnectionHub", "RelayCoordinator", "Session", "SessionRegistry"]
