from __future__ import annotations

import logging
from typing import Callable, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response

from admissions.api.v1.schemas import (
    ChooseRequestSchema,
    FunnelStateSchema,
    OptionSchema,
    ReinitializeRequestSchema,
    ReviewResponseSchema,
    SelectionEntrySchema,
    StartFunnelRequestSchema,
    SubmitRequestSchema,
    SubmitResponseSchema,
)
from admissions.application.exceptions import (
    FunnelError,
    InvalidChoice,
    LookupFailed,
    NotResolved,
    ResolutionInProgress,
    ResolutionSuperseded,
    SessionNotFound,
    SubjectNotFound,
    SubmissionUpstreamError,
)
from admissions.application.ports.funnel_session_store import FunnelSessionStorePort
from admissions.application.use_cases.funnel_resolver import FunnelResolver
from admissions.application.use_cases.submit_application import SubmitApplicationUseCase
from admissions.domain.entities.funnel_state import FunnelState
from admissions.domain.entities.option import Option
from admissions.domain.entities.selection_path import SelectionPath
from admissions.infrastructure.catalog.scoped_catalog import AgentScope
from admissions.wiring.dependencies import (
    get_resolver_factory,
    get_session_store,
    get_submit_application_use_case,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[FunnelError], int] = {
    SessionNotFound: 404,
    SubjectNotFound: 404,
    InvalidChoice: 400,
    NotResolved: 409,
    ResolutionInProgress: 409,
    ResolutionSuperseded: 409,
    LookupFailed: 502,
}


def _raise_http(e: FunnelError) -> NoReturn:
    status_code = next((code for cls, code in _STATUS_CODES.items() if isinstance(e, cls)), 400)
    raise HTTPException(status_code=status_code, detail=str(e))


def _option_schema(option: Option | None) -> OptionSchema | None:
    if option is None:
        return None
    return OptionSchema(id=option.id, display_name=option.display_name, payload=dict(option.payload))


def _path_schema(path: SelectionPath) -> list[SelectionEntrySchema]:
    return [SelectionEntrySchema(step=step, option=_option_schema(option)) for step, option in path]


def _state_response(session_id: str, state: FunnelState) -> FunnelStateSchema:
    current = state.current_options
    return FunnelStateSchema(
        session_id=session_id,
        status=state.status,
        subject_id=state.subject.id if state.subject else None,
        current_step=state.current_step,
        selection_path=_path_schema(state.selection_path),
        options=[_option_schema(o) for o in current.options] if current is not None else [],
        resolved_leaf=_option_schema(state.resolved_leaf),
        failed_step=state.failed_step,
        error=state.error,
    )


def _get_resolver(store: FunnelSessionStorePort, session_id: str) -> FunnelResolver:
    try:
        return store.get(session_id)
    except SessionNotFound as e:
        _raise_http(e)


@router.post("/funnels", response_model=FunnelStateSchema, status_code=201)
async def start_funnel(
    req: StartFunnelRequestSchema,
    store: FunnelSessionStorePort = Depends(get_session_store),
    factory: Callable[[AgentScope | None], FunnelResolver] = Depends(get_resolver_factory),
):
    scope = None
    if req.agent_scope is not None:
        scope = AgentScope(
            countries=tuple(req.agent_scope.countries),
            institutions=tuple(req.agent_scope.universities),
        )
    resolver = factory(scope)
    try:
        await resolver.initialize(req.subject_id)
    except SubjectNotFound as e:
        _raise_http(e)
    except LookupFailed as e:
        # funnel exists and can be retried through /initialize
        store.create(resolver)
        logger.warning("Funnel created in failed state", extra={"session_id": resolver.session_id, "error": str(e)})
        return _state_response(resolver.session_id, resolver.state)
    except FunnelError as e:
        _raise_http(e)

    session_id = store.create(resolver)
    return _state_response(session_id, resolver.state)


@router.get("/funnels/{session_id}", response_model=FunnelStateSchema)
def get_funnel(session_id: str, store: FunnelSessionStorePort = Depends(get_session_store)):
    resolver = _get_resolver(store, session_id)
    return _state_response(session_id, resolver.state)


@router.post("/funnels/{session_id}/initialize", response_model=FunnelStateSchema)
async def reinitialize_funnel(
    session_id: str,
    req: ReinitializeRequestSchema,
    store: FunnelSessionStorePort = Depends(get_session_store),
):
    resolver = _get_resolver(store, session_id)
    subject_id = req.subject_id or (resolver.state.subject.id if resolver.state.subject else None)
    if not subject_id:
        raise HTTPException(status_code=400, detail="subject_id is required to initialize this funnel")
    try:
        state = await resolver.initialize(subject_id)
    except FunnelError as e:
        _raise_http(e)
    return _state_response(session_id, state)


@router.post("/funnels/{session_id}/choices", response_model=FunnelStateSchema)
async def choose_option(
    session_id: str,
    req: ChooseRequestSchema,
    store: FunnelSessionStorePort = Depends(get_session_store),
):
    resolver = _get_resolver(store, session_id)
    try:
        state = await resolver.choose(req.step, req.option_id)
    except FunnelError as e:
        _raise_http(e)
    return _state_response(session_id, state)


@router.post("/funnels/{session_id}/retreat", response_model=FunnelStateSchema)
def retreat(session_id: str, store: FunnelSessionStorePort = Depends(get_session_store)):
    resolver = _get_resolver(store, session_id)
    try:
        state = resolver.retreat()
    except FunnelError as e:
        _raise_http(e)
    return _state_response(session_id, state)


@router.post("/funnels/{session_id}/reopen", response_model=FunnelStateSchema)
def reopen_program_step(session_id: str, store: FunnelSessionStorePort = Depends(get_session_store)):
    resolver = _get_resolver(store, session_id)
    try:
        state = resolver.clear_leaf_and_reopen_last_step()
    except FunnelError as e:
        _raise_http(e)
    return _state_response(session_id, state)


@router.get("/funnels/{session_id}/review", response_model=ReviewResponseSchema)
def review(session_id: str, store: FunnelSessionStorePort = Depends(get_session_store)):
    resolver = _get_resolver(store, session_id)
    try:
        selection = resolver.review_resolved_leaf()
    except FunnelError as e:
        _raise_http(e)
    return ReviewResponseSchema(
        session_id=session_id,
        subject_id=selection.subject.id,
        subject_name=selection.subject.display_name,
        program=_option_schema(selection.leaf),
        selection_path=_path_schema(selection.selection_path),
    )


@router.post("/funnels/{session_id}/submit", response_model=SubmitResponseSchema, status_code=201)
async def submit(
    session_id: str,
    req: SubmitRequestSchema,
    store: FunnelSessionStorePort = Depends(get_session_store),
    uc: SubmitApplicationUseCase = Depends(get_submit_application_use_case),
):
    resolver = _get_resolver(store, session_id)
    try:
        application_id, submission = await uc.execute(resolver, notes=req.notes)
    except FunnelError as e:
        _raise_http(e)
    except SubmissionUpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return SubmitResponseSchema(application_id=application_id, program_snapshot=submission.program_snapshot())


@router.delete("/funnels/{session_id}", status_code=204)
def delete_funnel(session_id: str, store: FunnelSessionStorePort = Depends(get_session_store)) -> Response:
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Funnel session {session_id} not found")
    return Response(status_code=204)
