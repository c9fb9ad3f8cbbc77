from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from admissions.domain.entities.funnel_step import FunnelStep
from admissions.domain.entities.option import Option
from admissions.domain.entities.option_set import OptionSet
from admissions.domain.entities.selection_path import SelectionPath
from admissions.domain.entities.subject import Subject


class FunnelStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    AWAITING_CHOICE = "awaiting_choice"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class FunnelState:
    status: FunnelStatus = FunnelStatus.IDLE
    subject: Subject | None = None
    current_step: FunnelStep | None = None
    selection_path: SelectionPath = SelectionPath()
    option_sets: dict[FunnelStep, OptionSet] = field(default_factory=dict)
    resolved_leaf: Option | None = None
    failed_step: FunnelStep | None = None  # set only while status == FAILED
    error: str | None = None

    @property
    def current_options(self) -> OptionSet | None:
        if self.current_step is None:
            return None
        return self.option_sets.get(self.current_step)


@dataclass(frozen=True)
class ResolvedSelection:
    """Terminal program plus the path that led to it, ready for submission."""

    subject: Subject
    leaf: Option
    selection_path: SelectionPath
