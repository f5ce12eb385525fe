from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

TOKEN_MIN = 1000
TOKEN_MAX = 9999
TOKEN_SPACE = TOKEN_MAX - TOKEN_MIN + 1


class UnknownToken(KeyError):
    """Raised when a mutation names a token with no live session."""


class TokenSpaceExhausted(RuntimeError):
    """Raised when every pairing token is already in use."""


@dataclass(frozen=True)
class Session:
    token: str
    host: str
    guest: Optional[str] = None

    def involves(self, connection_id: str) -> bool:
        return connection_id == self.host or (
            self.guest is not None and connection_id == self.guest
        )


class SessionRegistry:
    """In-memory map of pairing tokens to sessions.

    Records are immutable; every mutation swaps in a new ``Session`` so the
    host slot can never be rewritten and callers only ever see snapshots.
    The registry does no locking of its own, the coordinator serialises
    access to it.
    """

    def __init__(self, *, rng: Optional[random.Random] = None) -> None:
        self._sessions: Dict[str, Session] = {}
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        return token in self._sessions

    def _generate_token(self) -> str:
        return str(self._rng.randint(TOKEN_MIN, TOKEN_MAX))

    def create(self, host: str) -> str:
        if len(self._sessions) >= TOKEN_SPACE:
            raise TokenSpaceExhausted("all pairing tokens are in use")
        token = self._generate_token()
        while token in self._sessions:
            token = self._generate_token()
        self._sessions[token] = Session(token=token, host=host)
        return token

    def get(self, token: str) -> Optional[Session]:
        return self._sessions.get(token)

    def set_guest(self, token: str, connection_id: str) -> Session:
        session = self._require(token)
        updated = replace(session, guest=connection_id)
        self._sessions[token] = updated
        return updated

    def clear_guest(self, token: str) -> Session:
        session = self._require(token)
        updated = replace(session, guest=None)
        self._sessions[token] = updated
        return updated

    def remove(self, token: str) -> Optional[Session]:
        return self._sessions.pop(token, None)

    def find_by_connection(self, connection_id: str) -> List[Tuple[str, Session]]:
        # snapshot so callers may mutate the registry while iterating
        return [
            (token, session)
            for token, session in list(self._sessions.items())
            if session.involves(connection_id)
        ]

    def _require(self, token: str) -> Session:
        session = self._sessions.get(token)
        if session is None:
            raise UnknownToken(token)
        return session
