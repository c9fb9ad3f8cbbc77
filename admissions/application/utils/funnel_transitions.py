"""
Pure state transitions for the program-selection funnel.

Every function takes a FunnelState and returns a new one; none performs I/O.
The resolver sequences them around catalog lookups.
"""

from __future__ import annotations

from dataclasses import replace

from admissions.application.exceptions import InvalidChoice, NotResolved
from admissions.domain.entities.funnel_state import FunnelState, FunnelStatus, ResolvedSelection
from admissions.domain.entities.funnel_step import FIRST_STEP, TERMINAL_STEP, CardinalityPolicy, FunnelStep
from admissions.domain.entities.option import Option
from admissions.domain.entities.option_set import OptionSet
from admissions.domain.entities.subject import Subject

CHOOSABLE_STATUSES = (FunnelStatus.AWAITING_CHOICE, FunnelStatus.RESOLVED, FunnelStatus.FAILED)


def reset_state(subject: Subject) -> FunnelState:
    """Fresh state for a subject: nothing fetched, positioned at the first step."""
    return FunnelState(status=FunnelStatus.LOADING, subject=subject, current_step=FIRST_STEP)


def _sets_up_to(state: FunnelState, step: FunnelStep, inclusive: bool) -> dict[FunnelStep, OptionSet]:
    limit = step.index + 1 if inclusive else step.index
    return {s: os for s, os in state.option_sets.items() if s.index < limit}


def settle_step(
    state: FunnelState,
    step: FunnelStep,
    options: list[Option],
) -> tuple[FunnelState, FunnelStep | None]:
    """
    Record freshly fetched options for `step` and apply its cardinality policy.

    Returns the new state and the next step to look up, or None when the
    funnel has stopped (awaiting a human choice or resolved).
    """
    prefix = state.selection_path.prefix_before(step)
    option_sets = _sets_up_to(state, step, inclusive=False)
    option_sets[step] = OptionSet(step=step, options=tuple(options), prefix=prefix)
    base = replace(
        state,
        current_step=step,
        selection_path=prefix,
        option_sets=option_sets,
        resolved_leaf=None,
        failed_step=None,
        error=None,
    )

    if step.is_terminal:
        if len(options) == 1:
            leaf = options[0]
            return (
                replace(
                    base,
                    selection_path=prefix.with_choice(step, leaf),
                    resolved_leaf=leaf,
                    status=FunnelStatus.RESOLVED,
                ),
                None,
            )
        return replace(base, status=FunnelStatus.AWAITING_CHOICE), None

    if len(options) == 1 and step.policy is CardinalityPolicy.SKIP_IF_SINGLETON:
        return replace(base, selection_path=prefix.with_choice(step, options[0])), step.next()

    if not options and step.policy is CardinalityPolicy.SKIP_IF_EMPTY:
        return replace(base, selection_path=prefix.with_skipped(step)), step.next()

    return replace(base, status=FunnelStatus.AWAITING_CHOICE), None


def apply_choice(
    state: FunnelState,
    step: FunnelStep,
    option_id: str,
) -> tuple[FunnelState, FunnelStep | None]:
    """
    Validate and record a human choice at the current step.

    Raises InvalidChoice without producing a new state when the choice does not
    match the current step or its (non-stale) option set. Returns the new state
    and the next step to resolve (None when the choice resolved the leaf).
    """
    if state.status not in CHOOSABLE_STATUSES:
        raise InvalidChoice(f"Funnel is {state.status.value}; no choice can be made")
    if step is not state.current_step:
        current = state.current_step.value if state.current_step else None
        raise InvalidChoice(f"Choice for '{step.value}' but current step is '{current}'")

    option_set = state.option_sets.get(step)
    if option_set is None or not option_set.is_valid_for(state.selection_path):
        raise InvalidChoice(f"Options for '{step.value}' are not loaded for the current selection")

    option = option_set.find(option_id)
    if option is None:
        raise InvalidChoice(f"'{option_id}' is not an available {step.value}")

    chosen = replace(
        state,
        selection_path=state.selection_path.with_choice(step, option),
        option_sets=_sets_up_to(state, step, inclusive=True),
        resolved_leaf=None,
        failed_step=None,
        error=None,
    )
    if step.is_terminal:
        return replace(chosen, resolved_leaf=option, status=FunnelStatus.RESOLVED), None
    return chosen, step.next()


def apply_retreat(state: FunnelState) -> FunnelState:
    """Step back one position, reusing the cached option set of the new step."""
    if state.current_step is None or state.status is FunnelStatus.IDLE:
        return state
    previous = state.current_step.previous()
    if previous is None:
        return state
    return replace(
        state,
        current_step=previous,
        selection_path=state.selection_path.truncate_from(previous),
        option_sets=_sets_up_to(state, previous, inclusive=True),
        resolved_leaf=None,
        status=FunnelStatus.AWAITING_CHOICE,
        failed_step=None,
        error=None,
    )


def reopen_last_step(state: FunnelState) -> FunnelState:
    if state.status is not FunnelStatus.RESOLVED:
        raise NotResolved(f"Funnel is {state.status.value}; there is no resolved program to clear")
    return replace(
        state,
        current_step=TERMINAL_STEP,
        selection_path=state.selection_path.truncate_from(TERMINAL_STEP),
        resolved_leaf=None,
        status=FunnelStatus.AWAITING_CHOICE,
    )


def mark_failed(state: FunnelState, step: FunnelStep, error: str) -> FunnelState:
    return replace(state, status=FunnelStatus.FAILED, failed_step=step, error=error)


def resolved_selection(state: FunnelState) -> ResolvedSelection:
    if state.status is not FunnelStatus.RESOLVED or state.resolved_leaf is None or state.subject is None:
        raise NotResolved(f"Funnel is {state.status.value}; no program has been resolved")
    return ResolvedSelection(
        subject=state.subject,
        leaf=state.resolved_leaf,
        selection_path=state.selection_path,
    )
