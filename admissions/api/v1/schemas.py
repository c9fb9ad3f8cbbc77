from pydantic import BaseModel, Field
from typing import Any

from admissions.domain.entities.funnel_state import FunnelStatus
from admissions.domain.entities.funnel_step import FunnelStep


class AgentScopeSchema(BaseModel):
    countries: list[str] = Field(default_factory=list)
    universities: list[str] = Field(default_factory=list)


class StartFunnelRequestSchema(BaseModel):
    subject_id: str = Field(min_length=1)
    agent_scope: AgentScopeSchema | None = None


class ReinitializeRequestSchema(BaseModel):
    subject_id: str | None = None


class ChooseRequestSchema(BaseModel):
    step: FunnelStep
    option_id: str


class SubmitRequestSchema(BaseModel):
    notes: str | None = None


class OptionSchema(BaseModel):
    id: str
    display_name: str
    payload: dict[str, Any] = Field(default_factory=dict)


class SelectionEntrySchema(BaseModel):
    step: FunnelStep
    option: OptionSchema | None = None  # None when the step was skipped as inapplicable


class FunnelStateSchema(BaseModel):
    session_id: str
    status: FunnelStatus
    subject_id: str | None = None
    current_step: FunnelStep | None = None
    selection_path: list[SelectionEntrySchema] = Field(default_factory=list)
    options: list[OptionSchema] = Field(default_factory=list)
    resolved_leaf: OptionSchema | None = None
    failed_step: FunnelStep | None = None
    error: str | None = None


class ReviewResponseSchema(BaseModel):
    session_id: str
    subject_id: str
    subject_name: str
    program: OptionSchema
    selection_path: list[SelectionEntrySchema]


class SubmitResponseSchema(BaseModel):
    application_id: str
    program_snapshot: dict[str, Any]
