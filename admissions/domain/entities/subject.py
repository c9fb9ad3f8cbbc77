from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Subject:
    id: str
    display_name: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @staticmethod
    def from_payload(subject_id: str, data: dict[str, Any]) -> "Subject":
        first = str(data.get("firstName") or data.get("first_name") or "").strip()
        last = str(data.get("lastName") or data.get("last_name") or "").strip()
        name = " ".join(p for p in (first, last) if p) or str(data.get("name") or "").strip()
        return Subject(
            id=str(data.get("id") or subject_id),
            display_name=name or str(subject_id),
            payload=dict(data),
        )
