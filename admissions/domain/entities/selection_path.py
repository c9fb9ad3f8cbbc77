from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from admissions.domain.entities.funnel_step import STEP_ORDER, CardinalityPolicy, FunnelStep
from admissions.domain.entities.option import Option


@dataclass(frozen=True)
class SelectionPath:
    """
    Ordered, gap-free record of resolved steps.

    Entries always cover a contiguous run of STEP_ORDER starting at the first
    step. An entry holding None marks a step resolved as inapplicable, which
    only a skip-if-empty step may be.
    """

    entries: tuple[tuple[FunnelStep, Option | None], ...] = ()

    def __post_init__(self) -> None:
        for i, (step, option) in enumerate(self.entries):
            if step is not STEP_ORDER[i]:
                raise ValueError(f"Selection path out of order at {step.value}")
            if option is None and step.policy is not CardinalityPolicy.SKIP_IF_EMPTY:
                raise ValueError(f"Step {step.value} cannot be left unset")

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[tuple[FunnelStep, Option | None]]:
        return iter(self.entries)

    def has(self, step: FunnelStep) -> bool:
        return step.index < len(self.entries)

    def get(self, step: FunnelStep) -> Option | None:
        if not self.has(step):
            return None
        return self.entries[step.index][1]

    def next_unresolved_step(self) -> FunnelStep | None:
        if len(self.entries) >= len(STEP_ORDER):
            return None
        return STEP_ORDER[len(self.entries)]

    def truncate_from(self, step: FunnelStep) -> SelectionPath:
        return SelectionPath(entries=self.entries[: step.index])

    def prefix_before(self, step: FunnelStep) -> SelectionPath:
        return self.truncate_from(step)

    def with_choice(self, step: FunnelStep, option: Option) -> SelectionPath:
        """Replace the entry at `step` (dropping everything after it) or append it."""
        if step.index > len(self.entries):
            raise ValueError(f"Cannot select {step.value} before earlier steps are resolved")
        return SelectionPath(entries=self.entries[: step.index] + ((step, option),))

    def with_skipped(self, step: FunnelStep) -> SelectionPath:
        if step.index > len(self.entries):
            raise ValueError(f"Cannot skip {step.value} before earlier steps are resolved")
        return SelectionPath(entries=self.entries[: step.index] + ((step, None),))
