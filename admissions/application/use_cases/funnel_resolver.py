from __future__ import annotations

import logging
from dataclasses import replace
from uuid import uuid4

from admissions.application.exceptions import (
    CatalogContractError,
    CatalogUpstreamError,
    LookupFailed,
    ResolutionInProgress,
    ResolutionSuperseded,
    SubjectNotFound,
)
from admissions.application.ports.catalog_lookup import CatalogLookupPort
from admissions.application.ports.subject_lookup import SubjectLookupPort
from admissions.application.utils.funnel_transitions import (
    apply_choice,
    apply_retreat,
    mark_failed,
    reopen_last_step,
    reset_state,
    resolved_selection,
    settle_step,
)
from admissions.domain.entities.funnel_state import FunnelState, FunnelStatus, ResolvedSelection
from admissions.domain.entities.funnel_step import FIRST_STEP, FunnelStep
from admissions.domain.entities.option import Option
from admissions.domain.entities.selection_path import SelectionPath


class FunnelResolver:
    """
    Drives one subject's program-selection funnel to a resolved program.

    One instance per funnel session. Lookups run strictly one at a time.
    Concurrency contract:
    - choose/retreat/reopen while a resolution is in flight raise
      ResolutionInProgress and leave state untouched
    - initialize always wins: it supersedes any in-flight chain, whose caller
      receives ResolutionSuperseded and whose results are never written back
    """

    def __init__(
        self,
        catalog: CatalogLookupPort,
        subjects: SubjectLookupPort,
        session_id: str | None = None,
    ) -> None:
        self._catalog = catalog
        self._subjects = subjects
        self.session_id = session_id or uuid4().hex
        self._state = FunnelState()
        self._epoch = 0
        self._busy = False
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> FunnelState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._busy

    async def initialize(self, subject_id: str) -> FunnelState:
        self._epoch += 1
        epoch = self._epoch
        self._busy = True
        self._state = FunnelState(status=FunnelStatus.LOADING)

        try:
            subject = await self._subjects.get_subject(subject_id)
        except SubjectNotFound as e:
            if epoch == self._epoch:
                self._state = FunnelState()
                self._busy = False
            self._logger.warning(
                "Funnel initialization failed: subject not loadable",
                extra={"session_id": self.session_id, "subject_id": subject_id, "error": str(e)},
            )
            raise
        except BaseException:
            if epoch == self._epoch:
                self._state = FunnelState()
                self._busy = False
            raise
        self._ensure_current(epoch)

        self._logger.info(
            "Funnel initialized",
            extra={"session_id": self.session_id, "subject_id": subject.id},
        )
        start = reset_state(subject)
        return await self._resolve_forward(epoch, start, start, FIRST_STEP, keep_progress=True)

    async def choose(self, step: FunnelStep, option_id: str) -> FunnelState:
        self._reject_if_busy()
        committed = self._state
        working, next_step = apply_choice(committed, step, option_id)

        self._logger.info(
            "Choice recorded",
            extra={"session_id": self.session_id, "step": step.value, "option_id": option_id},
        )
        if next_step is None:
            self._state = working
            self._log_settled(working)
            return working

        self._busy = True
        self._state = replace(committed, status=FunnelStatus.LOADING)
        return await self._resolve_forward(self._epoch, committed, working, next_step)

    def retreat(self) -> FunnelState:
        self._reject_if_busy()
        self._state = apply_retreat(self._state)
        self._logger.info(
            "Funnel retreated",
            extra={
                "session_id": self.session_id,
                "step": self._state.current_step.value if self._state.current_step else None,
            },
        )
        return self._state

    def review_resolved_leaf(self) -> ResolvedSelection:
        return resolved_selection(self._state)

    def clear_leaf_and_reopen_last_step(self) -> FunnelState:
        self._reject_if_busy()
        self._state = reopen_last_step(self._state)
        return self._state

    async def _resolve_forward(
        self,
        epoch: int,
        committed: FunnelState,
        working: FunnelState,
        step: FunnelStep | None,
        keep_progress: bool = False,
    ) -> FunnelState:
        """
        Look up and settle steps from `step` onward until a human decision or the leaf.

        `committed` is the state restored (as FAILED) if any lookup fails, so a
        failed choice leaves path and option sets exactly as they were before it.
        With `keep_progress` the steps settled earlier in the same chain are kept
        instead, so a failed initialize stops at the last resolved step.
        """
        try:
            while step is not None:
                try:
                    options = await self._lookup(step, working.selection_path)
                except (CatalogUpstreamError, CatalogContractError) as e:
                    self._ensure_current(epoch)
                    fallback = working if keep_progress else committed
                    self._commit(mark_failed(fallback, step, str(e)))
                    self._logger.error(
                        "Catalog lookup failed",
                        extra={"session_id": self.session_id, "step": step.value, "error": str(e)},
                    )
                    raise LookupFailed(step, str(e)) from e
                self._ensure_current(epoch)

                self._logger.debug(
                    "Options fetched",
                    extra={"session_id": self.session_id, "step": step.value, "option_count": len(options)},
                )
                working, step = settle_step(working, step, options)

            self._commit(working)
            self._log_settled(working)
            return working
        finally:
            if epoch == self._epoch and self._busy:
                # chain ended without committing (unexpected error or cancellation)
                if committed.status is FunnelStatus.LOADING:
                    committed = replace(committed, status=FunnelStatus.IDLE)
                self._state = committed
                self._busy = False

    async def _lookup(self, step: FunnelStep, path: SelectionPath) -> list[Option]:
        institution = path.get(FunnelStep.INSTITUTION)
        level = path.get(FunnelStep.LEVEL)
        category = path.get(FunnelStep.CATEGORY)

        if step is FunnelStep.DESTINATION:
            return await self._catalog.list_destinations()
        if step is FunnelStep.INSTITUTION:
            return await self._catalog.list_institutions(path.get(FunnelStep.DESTINATION))
        if step is FunnelStep.LEVEL:
            return await self._catalog.list_levels(institution)
        if step is FunnelStep.CATEGORY:
            return await self._catalog.list_categories(institution, level)
        if step is FunnelStep.SPECIALIZATION:
            return await self._catalog.list_specializations(institution, level, category)
        return await self._catalog.list_programs(
            institution,
            level,
            category=category,
            specialization=path.get(FunnelStep.SPECIALIZATION),
        )

    def _commit(self, state: FunnelState) -> None:
        self._state = state
        self._busy = False

    def _ensure_current(self, epoch: int) -> None:
        if epoch != self._epoch:
            self._logger.info("Superseded resolution discarded", extra={"session_id": self.session_id})
            raise ResolutionSuperseded("Funnel was re-initialized while this resolution was in flight")

    def _reject_if_busy(self) -> None:
        if self._busy:
            raise ResolutionInProgress("A resolution is already in flight for this funnel")

    def _log_settled(self, state: FunnelState) -> None:
        options = state.current_options
        self._logger.info(
            "Funnel settled",
            extra={
                "session_id": self.session_id,
                "status": state.status.value,
                "step": state.current_step.value if state.current_step else None,
                "option_count": len(options) if options is not None else None,
            },
        )
