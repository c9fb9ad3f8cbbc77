"""
Tests for the funnel resolver: auto-skip cascade, retreat, failure recovery
and the concurrency contract.
"""

from __future__ import annotations

import asyncio

import pytest

from admissions.application.exceptions import (
    InvalidChoice,
    LookupFailed,
    NotResolved,
    ResolutionInProgress,
    ResolutionSuperseded,
    SubjectNotFound,
)
from admissions.domain.entities.funnel_state import FunnelStatus
from admissions.domain.entities.funnel_step import FunnelStep


def path_ids(state) -> list[str | None]:
    return [option.id if option else None for _, option in state.selection_path]


async def _walk_to_netherlands_levels(resolver):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "nl")
    return await resolver.choose(FunnelStep.INSTITUTION, "uva")


@pytest.mark.asyncio
async def test_initialize_stops_at_first_real_choice(resolver, catalog):
    """Two destinations means the very first step needs a human."""
    state = await resolver.initialize("stu-1")

    assert state.status is FunnelStatus.AWAITING_CHOICE
    assert state.current_step is FunnelStep.DESTINATION
    assert [o.id for o in state.current_options.options] == ["de", "nl"]
    assert path_ids(state) == []
    assert state.subject.display_name == "Amara Okafor"
    assert catalog.calls == [("list_destinations", ())]


@pytest.mark.asyncio
async def test_singleton_institution_and_level_are_skipped(resolver):
    await resolver.initialize("stu-1")
    state = await resolver.choose(FunnelStep.DESTINATION, "de")

    assert path_ids(state) == ["de", "tum", "Master"]
    assert state.current_step is FunnelStep.CATEGORY
    assert state.status is FunnelStatus.AWAITING_CHOICE
    # skipped steps still keep the options that justified skipping them
    assert len(state.option_sets[FunnelStep.INSTITUTION]) == 1
    assert len(state.option_sets[FunnelStep.LEVEL]) == 1


@pytest.mark.asyncio
async def test_singleton_destination_is_skipped_on_initialize(make_resolver, catalog_tree):
    tree = {"countries": [catalog_tree["countries"][0]]}
    resolver, cat = make_resolver(tree)

    state = await resolver.initialize("stu-1")

    assert path_ids(state) == ["de", "tum", "Master"]
    assert state.current_step is FunnelStep.CATEGORY
    assert [name for name, _ in cat.calls] == [
        "list_destinations",
        "list_institutions",
        "list_levels",
        "list_categories",
    ]


@pytest.mark.asyncio
async def test_empty_specialization_is_skipped_and_programs_queried_without_it(resolver, catalog):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")
    state = await resolver.choose(FunnelStep.CATEGORY, "me")

    assert state.current_step is FunnelStep.PROGRAM
    assert state.status is FunnelStatus.AWAITING_CHOICE
    assert state.selection_path.has(FunnelStep.SPECIALIZATION)
    assert state.selection_path.get(FunnelStep.SPECIALIZATION) is None
    assert catalog.calls[-1] == ("list_programs", ("tum", "Master", "me", None))
    assert [o.id for o in state.current_options.options] == ["msc-me", "msc-aero"]


@pytest.mark.asyncio
async def test_single_program_auto_resolves(resolver):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")
    state = await resolver.choose(FunnelStep.CATEGORY, "ph")

    assert state.status is FunnelStatus.RESOLVED
    assert state.resolved_leaf.id == "msc-ph"

    selection = resolver.review_resolved_leaf()
    assert selection.leaf.id == "msc-ph"
    assert selection.leaf.get("tuition_fee") == "EUR 0"
    assert selection.subject.id == "stu-1"
    assert selection.selection_path.get(FunnelStep.PROGRAM).id == "msc-ph"


@pytest.mark.asyncio
async def test_singleton_specialization_is_not_skipped(resolver, catalog):
    """Specialization only skips when empty."""
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")
    state = await resolver.choose(FunnelStep.CATEGORY, "ee")

    assert state.current_step is FunnelStep.SPECIALIZATION
    assert state.status is FunnelStatus.AWAITING_CHOICE
    assert [o.id for o in state.current_options.options] == ["power"]
    assert catalog.count("list_programs") == 0


@pytest.mark.asyncio
async def test_chosen_specialization_narrows_programs(resolver, catalog):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")
    await resolver.choose(FunnelStep.CATEGORY, "cs")

    state = await resolver.choose(FunnelStep.SPECIALIZATION, "se")

    assert catalog.calls[-1] == ("list_programs", ("tum", "Master", "cs", "se"))
    assert state.status is FunnelStatus.RESOLVED
    assert state.resolved_leaf.id == "msc-se"


@pytest.mark.asyncio
async def test_choosing_program_resolves_without_lookups(resolver, catalog):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")
    await resolver.choose(FunnelStep.CATEGORY, "me")
    calls_before = len(catalog.calls)

    state = await resolver.choose(FunnelStep.PROGRAM, "msc-aero")

    assert state.status is FunnelStatus.RESOLVED
    assert state.resolved_leaf.id == "msc-aero"
    assert len(catalog.calls) == calls_before


@pytest.mark.asyncio
async def test_retreat_from_resolved_reuses_cached_specializations(resolver, catalog):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")
    await resolver.choose(FunnelStep.CATEGORY, "cs")
    await resolver.choose(FunnelStep.SPECIALIZATION, "ai")
    resolved = await resolver.choose(FunnelStep.PROGRAM, "msc-robotics")
    assert path_ids(resolved) == ["de", "tum", "Master", "cs", "ai", "msc-robotics"]
    specialization_lookups = catalog.count("list_specializations")

    state = resolver.retreat()

    assert state.current_step is FunnelStep.SPECIALIZATION
    assert state.status is FunnelStatus.AWAITING_CHOICE
    assert path_ids(state) == ["de", "tum", "Master", "cs"]
    assert state.resolved_leaf is None
    assert FunnelStep.PROGRAM not in state.option_sets
    assert [o.id for o in state.current_options.options] == ["ai", "se"]
    assert catalog.count("list_specializations") == specialization_lookups


@pytest.mark.asyncio
async def test_retreat_is_a_noop_at_first_step(resolver):
    state = await resolver.initialize("stu-1")
    assert resolver.retreat() == state


@pytest.mark.asyncio
async def test_retreat_then_choose_again_refetches_downstream(resolver, catalog):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")
    resolver.retreat()  # back to Level, which was auto-selected
    state = resolver.retreat()  # back to Institution
    assert state.current_step is FunnelStep.INSTITUTION
    assert path_ids(state) == ["de"]

    levels_before = catalog.count("list_levels")
    state = await resolver.choose(FunnelStep.INSTITUTION, "tum")
    assert state.current_step is FunnelStep.CATEGORY
    assert catalog.count("list_levels") == levels_before + 1


@pytest.mark.asyncio
async def test_category_failure_leaves_state_at_level(resolver, catalog, make_resolver):
    before = await _walk_to_netherlands_levels(resolver)
    assert before.current_step is FunnelStep.LEVEL

    catalog.fail_next("list_categories")
    with pytest.raises(LookupFailed) as exc_info:
        await resolver.choose(FunnelStep.LEVEL, "Bachelor")

    assert exc_info.value.step is FunnelStep.CATEGORY
    failed = resolver.state
    assert failed.status is FunnelStatus.FAILED
    assert failed.failed_step is FunnelStep.CATEGORY
    assert failed.current_step is FunnelStep.LEVEL
    assert failed.selection_path == before.selection_path
    assert failed.option_sets == before.option_sets
    assert not resolver.is_busy

    retried = await resolver.choose(FunnelStep.LEVEL, "Bachelor")

    clean, _ = make_resolver()
    await _walk_to_netherlands_levels(clean)
    expected = await clean.choose(FunnelStep.LEVEL, "Bachelor")
    assert retried == expected
    assert retried.current_step is FunnelStep.PROGRAM
    assert path_ids(retried) == ["nl", "uva", "Bachelor", "econ", None]


@pytest.mark.asyncio
async def test_initialize_retry_after_transient_failure_is_idempotent(resolver, catalog, make_resolver):
    catalog.fail_next("list_destinations")
    with pytest.raises(LookupFailed):
        await resolver.initialize("stu-1")
    assert resolver.state.status is FunnelStatus.FAILED
    assert resolver.state.failed_step is FunnelStep.DESTINATION
    assert resolver.state.option_sets == {}

    retried = await resolver.initialize("stu-1")
    clean, _ = make_resolver()
    assert retried == await clean.initialize("stu-1")


@pytest.mark.asyncio
async def test_initialize_failure_keeps_steps_resolved_before_it(make_resolver, catalog_tree):
    tree = {"countries": [catalog_tree["countries"][0]]}
    resolver, cat = make_resolver(tree)
    cat.fail_next("list_levels")

    with pytest.raises(LookupFailed) as exc_info:
        await resolver.initialize("stu-1")

    assert exc_info.value.step is FunnelStep.LEVEL
    failed = resolver.state
    assert failed.status is FunnelStatus.FAILED
    assert failed.failed_step is FunnelStep.LEVEL
    assert failed.current_step is FunnelStep.INSTITUTION
    assert path_ids(failed) == ["de", "tum"]
    assert set(failed.option_sets) == {FunnelStep.DESTINATION, FunnelStep.INSTITUTION}
    assert failed.subject.id == "stu-1"

    retried = await resolver.initialize("stu-1")
    assert path_ids(retried) == ["de", "tum", "Master"]
    assert retried.current_step is FunnelStep.CATEGORY
    assert retried.failed_step is None


@pytest.mark.asyncio
async def test_stale_or_out_of_range_choices_are_rejected(resolver):
    state = await _walk_to_netherlands_levels(resolver)

    with pytest.raises(InvalidChoice):
        await resolver.choose(FunnelStep.CATEGORY, "econ")
    assert resolver.state is state

    with pytest.raises(InvalidChoice):
        await resolver.choose(FunnelStep.LEVEL, "PhD")
    assert resolver.state is state


@pytest.mark.asyncio
async def test_choose_before_initialize_is_invalid(resolver):
    with pytest.raises(InvalidChoice):
        await resolver.choose(FunnelStep.DESTINATION, "de")


@pytest.mark.asyncio
async def test_zero_categories_await_a_choice(resolver):
    await _walk_to_netherlands_levels(resolver)
    state = await resolver.choose(FunnelStep.LEVEL, "Master")

    assert state.current_step is FunnelStep.CATEGORY
    assert state.status is FunnelStatus.AWAITING_CHOICE
    assert len(state.current_options) == 0


@pytest.mark.asyncio
async def test_review_requires_resolved_state(resolver):
    await resolver.initialize("stu-1")
    with pytest.raises(NotResolved):
        resolver.review_resolved_leaf()
    with pytest.raises(NotResolved):
        resolver.clear_leaf_and_reopen_last_step()


@pytest.mark.asyncio
async def test_clear_leaf_reopens_program_step(resolver, catalog):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")
    await resolver.choose(FunnelStep.CATEGORY, "ph")
    calls_before = len(catalog.calls)

    state = resolver.clear_leaf_and_reopen_last_step()

    assert state.status is FunnelStatus.AWAITING_CHOICE
    assert state.current_step is FunnelStep.PROGRAM
    assert state.resolved_leaf is None
    assert not state.selection_path.has(FunnelStep.PROGRAM)
    assert [o.id for o in state.current_options.options] == ["msc-ph"]
    assert len(catalog.calls) == calls_before

    state = await resolver.choose(FunnelStep.PROGRAM, "msc-ph")
    assert state.status is FunnelStatus.RESOLVED


@pytest.mark.asyncio
async def test_unknown_subject_creates_no_funnel(resolver, catalog):
    with pytest.raises(SubjectNotFound):
        await resolver.initialize("nobody")

    assert resolver.state.status is FunnelStatus.IDLE
    assert resolver.state.subject is None
    assert catalog.calls == []
    assert not resolver.is_busy


@pytest.mark.asyncio
async def test_initialize_discards_previous_option_sets(resolver):
    await resolver.initialize("stu-1")
    await resolver.choose(FunnelStep.DESTINATION, "de")

    state = await resolver.initialize("stu-2")

    assert state.subject.id == "stu-2"
    assert path_ids(state) == []
    assert set(state.option_sets) == {FunnelStep.DESTINATION}


@pytest.mark.asyncio
async def test_calls_during_resolution_are_rejected(resolver, catalog):
    await _walk_to_netherlands_levels(resolver)
    gate = catalog.hold("list_categories")

    task = asyncio.create_task(resolver.choose(FunnelStep.LEVEL, "Bachelor"))
    while not resolver.is_busy:
        await asyncio.sleep(0)
    assert resolver.state.status is FunnelStatus.LOADING

    with pytest.raises(ResolutionInProgress):
        await resolver.choose(FunnelStep.LEVEL, "Master")
    with pytest.raises(ResolutionInProgress):
        resolver.retreat()
    with pytest.raises(ResolutionInProgress):
        resolver.clear_leaf_and_reopen_last_step()

    gate.set()
    state = await task
    assert state.current_step is FunnelStep.PROGRAM
    assert not resolver.is_busy


@pytest.mark.asyncio
async def test_reinitialize_supersedes_in_flight_resolution(resolver, catalog):
    await _walk_to_netherlands_levels(resolver)
    gate = catalog.hold("list_categories")

    stale = asyncio.create_task(resolver.choose(FunnelStep.LEVEL, "Bachelor"))
    while not resolver.is_busy:
        await asyncio.sleep(0)

    fresh = await resolver.initialize("stu-2")
    gate.set()

    with pytest.raises(ResolutionSuperseded):
        await stale

    assert resolver.state == fresh
    assert resolver.state.subject.id == "stu-2"
    assert resolver.state.current_step is FunnelStep.DESTINATION
    assert not resolver.is_busy


@pytest.mark.asyncio
async def test_sessions_are_independent(make_resolver):
    first, first_catalog = make_resolver()
    second, _ = make_resolver()

    await first.initialize("stu-1")
    await second.initialize("stu-2")
    await first.choose(FunnelStep.DESTINATION, "de")

    assert second.state.current_step is FunnelStep.DESTINATION
    assert second.state.subject.id == "stu-2"
    assert first_catalog.count("list_destinations") == 1
