from __future__ import annotations

from abc import ABC, abstractmethod

from admissions.domain.entities.subject import Subject


class SubjectLookupPort(ABC):
    @abstractmethod
    async def get_subject(self, subject_id: str) -> Subject:
        """Load subject detail. Raises SubjectNotFound when it cannot be loaded."""
        raise NotImplementedError
