from __future__ import annotations

from dataclasses import dataclass

from admissions.domain.entities.funnel_step import FunnelStep
from admissions.domain.entities.option import Option
from admissions.domain.entities.selection_path import SelectionPath


@dataclass(frozen=True)
class OptionSet:
    step: FunnelStep
    options: tuple[Option, ...]
    prefix: SelectionPath  # path that produced these options

    def __len__(self) -> int:
        return len(self.options)

    def find(self, option_id: str) -> Option | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def is_valid_for(self, path: SelectionPath) -> bool:
        """True when this set was fetched for exactly the prefix `path` has before the step."""
        return self.prefix == path.prefix_before(self.step)
