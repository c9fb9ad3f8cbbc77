from __future__ import annotations

from admissions.domain.entities.funnel_step import FunnelStep


class CatalogUpstreamError(RuntimeError):
    """Raised when the catalog provider fails (timeouts, network errors, 5xx)."""
    pass


class CatalogContractError(RuntimeError):
    """Raised when the catalog provider returns a body of the wrong shape."""
    pass


class SubmissionUpstreamError(RuntimeError):
    """Raised when the application-creation endpoint rejects or fails a submission."""
    pass


class FunnelError(Exception):
    """Base class for errors surfaced by the funnel resolver."""
    pass


class SubjectNotFound(FunnelError):
    def __init__(self, subject_id: str, reason: str | None = None) -> None:
        self.subject_id = subject_id
        self.reason = reason
        message = f"Subject {subject_id} could not be loaded"
        super().__init__(f"{message}: {reason}" if reason else message)


class LookupFailed(FunnelError):
    def __init__(self, step: FunnelStep, reason: str) -> None:
        self.step = step
        self.reason = reason
        super().__init__(f"Lookup for step '{step.value}' failed: {reason}")


class InvalidChoice(FunnelError):
    pass


class NotResolved(FunnelError):
    pass


class ResolutionInProgress(FunnelError):
    pass


class ResolutionSuperseded(FunnelError):
    """The in-flight resolution was abandoned because the funnel was re-initialized."""
    pass


class SessionNotFound(FunnelError):
    pass
