from __future__ import annotations

from admissions.application.exceptions import SessionNotFound
from admissions.application.ports.funnel_session_store import FunnelSessionStorePort
from admissions.application.use_cases.funnel_resolver import FunnelResolver


class MemoryFunnelSessionStore(FunnelSessionStorePort):
    def __init__(self, session_limit: int = 1000) -> None:
        self._sessions: dict[str, FunnelResolver] = {}
        self._session_limit = session_limit

    def create(self, resolver: FunnelResolver) -> str:
        self._sessions[resolver.session_id] = resolver
        if len(self._sessions) > self._session_limit:
            # evict oldest idle sessions
            for session_id in list(self._sessions):
                if len(self._sessions) <= self._session_limit:
                    break
                if not self._sessions[session_id].is_busy and session_id != resolver.session_id:
                    del self._sessions[session_id]
        return resolver.session_id

    def get(self, session_id: str) -> FunnelResolver:
        resolver = self._sessions.get(session_id)
        if resolver is None:
            raise SessionNotFound(f"Funnel session {session_id} not found")
        return resolver

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
