from __future__ import annotations

import logging

from admissions.application.ports.application_submission import ApplicationSubmissionPort
from admissions.application.use_cases.funnel_resolver import FunnelResolver
from admissions.domain.entities.application_submission import ApplicationSubmission


class SubmitApplicationUseCase:
    def __init__(self, submissions: ApplicationSubmissionPort) -> None:
        self._submissions = submissions
        self._logger = logging.getLogger(__name__)

    async def execute(self, resolver: FunnelResolver, notes: str | None = None) -> tuple[str, ApplicationSubmission]:
        """Submit the resolved program. Raises NotResolved if the funnel has not finished."""
        selection = resolver.review_resolved_leaf()
        subject = selection.subject
        submission = ApplicationSubmission(
            subject_id=subject.id,
            program=selection.leaf,
            selection_path=selection.selection_path,
            notes=notes or f"Applied via program selector for {subject.display_name}",
        )
        application_id = await self._submissions.submit(submission)
        self._logger.info(
            "Application submitted",
            extra={
                "session_id": resolver.session_id,
                "subject_id": subject.id,
                "application_id": application_id,
            },
        )
        return application_id, submission
