from __future__ import annotations

from enum import Enum


class CardinalityPolicy(str, Enum):
    SKIP_IF_SINGLETON = "skip_if_singleton"
    SKIP_IF_EMPTY = "skip_if_empty"
    AUTO_TERMINATE_IF_SINGLETON = "auto_terminate_if_singleton"


class FunnelStep(str, Enum):
    DESTINATION = "destination"
    INSTITUTION = "institution"
    LEVEL = "level"
    CATEGORY = "category"
    SPECIALIZATION = "specialization"
    PROGRAM = "program"

    @property
    def index(self) -> int:
        return STEP_ORDER.index(self)

    @property
    def policy(self) -> CardinalityPolicy:
        return STEP_POLICIES[self]

    @property
    def is_terminal(self) -> bool:
        return self is STEP_ORDER[-1]

    def next(self) -> FunnelStep | None:
        i = self.index
        return STEP_ORDER[i + 1] if i + 1 < len(STEP_ORDER) else None

    def previous(self) -> FunnelStep | None:
        i = self.index
        return STEP_ORDER[i - 1] if i > 0 else None


STEP_ORDER: tuple[FunnelStep, ...] = (
    FunnelStep.DESTINATION,
    FunnelStep.INSTITUTION,
    FunnelStep.LEVEL,
    FunnelStep.CATEGORY,
    FunnelStep.SPECIALIZATION,
    FunnelStep.PROGRAM,
)

STEP_POLICIES: dict[FunnelStep, CardinalityPolicy] = {
    FunnelStep.DESTINATION: CardinalityPolicy.SKIP_IF_SINGLETON,
    FunnelStep.INSTITUTION: CardinalityPolicy.SKIP_IF_SINGLETON,
    FunnelStep.LEVEL: CardinalityPolicy.SKIP_IF_SINGLETON,
    FunnelStep.CATEGORY: CardinalityPolicy.SKIP_IF_SINGLETON,
    FunnelStep.SPECIALIZATION: CardinalityPolicy.SKIP_IF_EMPTY,
    FunnelStep.PROGRAM: CardinalityPolicy.AUTO_TERMINATE_IF_SINGLETON,
}

FIRST_STEP = STEP_ORDER[0]
TERMINAL_STEP = STEP_ORDER[-1]
