from __future__ import annotations

import logging

import httpx

from admissions.application.exceptions import SubjectNotFound, SubmissionUpstreamError
from admissions.application.ports.application_submission import ApplicationSubmissionPort
from admissions.application.ports.subject_lookup import SubjectLookupPort
from admissions.domain.entities.application_submission import ApplicationSubmission
from admissions.domain.entities.subject import Subject
from admissions.infrastructure.crm.crm_client import CrmClient


class CrmSubjectDirectory(SubjectLookupPort):
    def __init__(self, client: CrmClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    async def get_subject(self, subject_id: str) -> Subject:
        try:
            resp = await self._client.get_student(subject_id)
        except httpx.HTTPError as e:
            self._logger.error("Student lookup failed", extra={"subject_id": subject_id, "error": str(e)})
            raise SubjectNotFound(subject_id, f"{type(e).__name__}: {e}") from e

        if resp.status_code == 404:
            raise SubjectNotFound(subject_id)
        if resp.status_code >= 400:
            raise SubjectNotFound(subject_id, f"CRM responded with HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as e:
            raise SubjectNotFound(subject_id, "CRM response is not valid JSON") from e

        data = body.get("data", body) if isinstance(body, dict) else None
        if isinstance(data, dict) and isinstance(data.get("student"), dict):
            data = data["student"]
        if not isinstance(data, dict) or not data:
            raise SubjectNotFound(subject_id, "CRM response has no student record")
        return Subject.from_payload(subject_id, data)


class CrmApplicationSubmission(ApplicationSubmissionPort):
    def __init__(self, client: CrmClient) -> None:
        self._client = client

    async def submit(self, submission: ApplicationSubmission) -> str:
        program = submission.program
        payload = {
            "studentId": submission.subject_id,
            "programId": program.get("id") or program.get("course_id") or program.id,
            "programSnapshot": submission.program_snapshot(),
            "notes": submission.notes,
        }
        try:
            body = await self._client.create_application(payload)
        except httpx.HTTPError as e:
            raise SubmissionUpstreamError(f"{type(e).__name__}: {e}") from e

        data = body.get("data", body) if isinstance(body, dict) else {}
        if isinstance(data, dict) and isinstance(data.get("application"), dict):
            data = data["application"]
        application_id = data.get("id") if isinstance(data, dict) else None
        if not application_id:
            raise SubmissionUpstreamError("No application ID returned from CRM API")
        return str(application_id)
