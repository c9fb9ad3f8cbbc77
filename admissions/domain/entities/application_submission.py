from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from admissions.domain.entities.funnel_step import FunnelStep
from admissions.domain.entities.option import Option
from admissions.domain.entities.selection_path import SelectionPath


@dataclass(frozen=True)
class ApplicationSubmission:
    subject_id: str
    program: Option
    selection_path: SelectionPath
    notes: str | None = None

    def program_snapshot(self) -> dict[str, Any]:
        """Denormalized copy of the selection stored alongside the application."""

        def name_of(step: FunnelStep) -> str | None:
            option = self.selection_path.get(step)
            return option.display_name if option else None

        return {
            "programName": self.program.display_name,
            "universityName": name_of(FunnelStep.INSTITUTION),
            "countryName": name_of(FunnelStep.DESTINATION),
            "level": name_of(FunnelStep.LEVEL),
            "duration": self.program.get("duration") or "N/A",
            "category": name_of(FunnelStep.CATEGORY),
            "specialization": name_of(FunnelStep.SPECIALIZATION),
        }
