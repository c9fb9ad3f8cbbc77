from __future__ import annotations

from typing import Any

from admissions.application.exceptions import CatalogContractError
from admissions.domain.entities.funnel_step import FunnelStep
from admissions.domain.entities.option import Option

NAME_KEYS = ("name", "course_name", "program_name", "category_name", "specialization_name", "level")
ID_KEYS = ("id", "course_id", "university_id", "website", "name", "level")
# levels are addressed by their label in downstream queries
LEVEL_ID_KEYS = ("level", "name", "id")


def unwrap_list(body: Any, what: str) -> list[Any]:
    """Accept a bare list or a {"data": [...]} envelope."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        data = body.get("data")
        if data is None:
            return []
        if isinstance(data, list):
            return data
    raise CatalogContractError(f"{what}: expected a list or an object with a 'data' list.")


def normalize_option(raw: Any, step: FunnelStep) -> Option:
    if isinstance(raw, str):
        value = raw.strip()
        if not value:
            raise CatalogContractError(f"{step.value}: empty option value.")
        return Option(id=value, display_name=value)

    if not isinstance(raw, dict):
        raise CatalogContractError(f"{step.value}: options must be objects or strings.")

    display_name = _first_present(raw, NAME_KEYS)
    option_id = _first_present(raw, LEVEL_ID_KEYS if step is FunnelStep.LEVEL else ID_KEYS)
    if option_id is None or display_name is None:
        raise CatalogContractError(f"{step.value}: option is missing an id or a name.")

    return Option(id=option_id, display_name=display_name, payload=dict(raw))


def normalize_options(body: Any, step: FunnelStep) -> list[Option]:
    return [normalize_option(item, step) for item in unwrap_list(body, step.value)]


def _first_present(raw: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return str(value).strip()
    return None
