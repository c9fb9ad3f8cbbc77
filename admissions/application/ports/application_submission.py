from __future__ import annotations

from abc import ABC, abstractmethod

from admissions.domain.entities.application_submission import ApplicationSubmission


class ApplicationSubmissionPort(ABC):
    @abstractmethod
    async def submit(self, submission: ApplicationSubmission) -> str:
        """Create the application. Returns application_id."""
        raise NotImplementedError
