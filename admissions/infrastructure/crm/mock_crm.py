from __future__ import annotations

import logging
from typing import Any

from admissions.application.exceptions import SubjectNotFound
from admissions.application.ports.application_submission import ApplicationSubmissionPort
from admissions.application.ports.subject_lookup import SubjectLookupPort
from admissions.domain.entities.application_submission import ApplicationSubmission
from admissions.domain.entities.subject import Subject

DEMO_STUDENTS: dict[str, dict[str, Any]] = {
    "stu-1": {"id": "stu-1", "firstName": "Amara", "lastName": "Okafor", "email": "amara@example.com"},
    "stu-2": {"id": "stu-2", "firstName": "Luis", "lastName": "Ferreira", "email": "luis@example.com"},
}


class MockSubjectDirectory(SubjectLookupPort):
    def __init__(self, students: dict[str, dict[str, Any]] | None = None) -> None:
        self._students = students if students is not None else DEMO_STUDENTS

    async def get_subject(self, subject_id: str) -> Subject:
        data = self._students.get(subject_id)
        if data is None:
            raise SubjectNotFound(subject_id)
        return Subject.from_payload(subject_id, data)


class MockApplicationSubmission(ApplicationSubmissionPort):
    def __init__(self) -> None:
        self.submitted: dict[str, ApplicationSubmission] = {}
        self._logger = logging.getLogger(__name__)

    async def submit(self, submission: ApplicationSubmission) -> str:
        application_id = f"mock_application_{len(self.submitted) + 1}"
        self.submitted[application_id] = submission
        self._logger.info(
            "Mock application created",
            extra={
                "application_id": application_id,
                "subject_id": submission.subject_id,
                "program_id": submission.program.id,
            },
        )
        return application_id
