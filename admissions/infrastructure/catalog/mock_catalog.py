from __future__ import annotations

import logging
from typing import Any

from admissions.application.ports.catalog_lookup import CatalogLookupPort
from admissions.domain.entities.funnel_step import FunnelStep
from admissions.domain.entities.option import Option
from admissions.infrastructure.catalog.demo_catalog_data import DEMO_CATALOG
from admissions.infrastructure.catalog.normalize import normalize_option


class MockCatalog(CatalogLookupPort):
    """
    In-memory catalog over a nested tree:

        {"countries": [{..., "universities": [{..., "levels": {"Bachelor": {"categories": [
            {..., "specializations": [{..., "programs": [...]}], "programs": [...]}]}}}]}]}

    Programs listed directly on a category are the ones without a specialization.
    Every served lookup is appended to `calls`.
    """

    def __init__(self, tree: dict[str, Any] | None = None) -> None:
        self._tree = tree if tree is not None else DEMO_CATALOG
        self.calls: list[tuple[str, tuple[str | None, ...]]] = []
        self._logger = logging.getLogger(__name__)

    async def list_destinations(self) -> list[Option]:
        self._record("list_destinations")
        return self._options(FunnelStep.DESTINATION, self._tree.get("countries", []))

    async def list_institutions(self, destination: Option) -> list[Option]:
        self._record("list_institutions", destination.id)
        country = self._find(self._tree.get("countries", []), destination.id)
        return self._options(FunnelStep.INSTITUTION, (country or {}).get("universities", []))

    async def list_levels(self, institution: Option) -> list[Option]:
        self._record("list_levels", institution.id)
        university = self._university(institution.id)
        return self._options(FunnelStep.LEVEL, list((university or {}).get("levels", {}).keys()))

    async def list_categories(self, institution: Option, level: Option) -> list[Option]:
        self._record("list_categories", institution.id, level.id)
        return self._options(FunnelStep.CATEGORY, self._categories(institution.id, level.id))

    async def list_specializations(
        self,
        institution: Option,
        level: Option,
        category: Option,
    ) -> list[Option]:
        self._record("list_specializations", institution.id, level.id, category.id)
        found = self._find(self._categories(institution.id, level.id), category.id)
        return self._options(FunnelStep.SPECIALIZATION, (found or {}).get("specializations", []))

    async def list_programs(
        self,
        institution: Option,
        level: Option,
        category: Option | None = None,
        specialization: Option | None = None,
    ) -> list[Option]:
        self._record(
            "list_programs",
            institution.id,
            level.id,
            category.id if category else None,
            specialization.id if specialization else None,
        )
        categories = self._categories(institution.id, level.id)
        if category is not None:
            found = self._find(categories, category.id)
            categories = [found] if found else []

        programs: list[Any] = []
        for cat in categories:
            if specialization is not None:
                spec = self._find(cat.get("specializations", []), specialization.id)
                programs.extend((spec or {}).get("programs", []))
            else:
                programs.extend(cat.get("programs", []))
        return self._options(FunnelStep.PROGRAM, programs)

    def _record(self, name: str, *args: str | None) -> None:
        self.calls.append((name, args))
        self._logger.debug("Mock catalog lookup", extra={"step": name})

    def _university(self, university_id: str) -> dict[str, Any] | None:
        for country in self._tree.get("countries", []):
            found = self._find(country.get("universities", []), university_id)
            if found:
                return found
        return None

    def _categories(self, university_id: str, level: str) -> list[dict[str, Any]]:
        university = self._university(university_id) or {}
        return list((university.get("levels", {}).get(level) or {}).get("categories", []))

    @staticmethod
    def _find(items: list[dict[str, Any]], option_id: str) -> dict[str, Any] | None:
        for item in items:
            if str(item.get("id")) == option_id:
                return item
        return None

    @staticmethod
    def _options(step: FunnelStep, raw_items: list[Any]) -> list[Option]:
        out: list[Option] = []
        for raw in raw_items:
            if isinstance(raw, dict):
                raw = {k: v for k, v in raw.items() if k not in ("universities", "levels", "categories", "specializations", "programs")}
            out.append(normalize_option(raw, step))
        return out
