from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from admissions.application.use_cases.funnel_resolver import FunnelResolver


class FunnelSessionStorePort(ABC):
    @abstractmethod
    def create(self, resolver: "FunnelResolver") -> str:
        """Register a resolver under a new session id. Returns session_id."""
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> "FunnelResolver":
        """Raises SessionNotFound for unknown ids."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        raise NotImplementedError
