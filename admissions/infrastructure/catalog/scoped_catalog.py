from __future__ import annotations

from dataclasses import dataclass

from admissions.application.ports.catalog_lookup import CatalogLookupPort
from admissions.domain.entities.option import Option


@dataclass(frozen=True)
class AgentScope:
    countries: tuple[str, ...] = ()  # names or websites
    institutions: tuple[str, ...] = ()  # ids or names


class ScopedCatalog(CatalogLookupPort):
    """Restricts destinations and institutions to what an agent has been assigned."""

    def __init__(self, inner: CatalogLookupPort, scope: AgentScope) -> None:
        self._inner = inner
        self._scope = scope
        self._countries = {c.strip().lower() for c in scope.countries if c and c.strip()}
        self._institutions = {i.strip() for i in scope.institutions if i and i.strip()}

    async def list_destinations(self) -> list[Option]:
        destinations = await self._inner.list_destinations()
        return [d for d in destinations if self._country_allowed(d)]

    async def list_institutions(self, destination: Option) -> list[Option]:
        if self._countries and not self._country_allowed(destination):
            return []
        if not self._countries and not self._institutions:
            return []

        institutions = await self._inner.list_institutions(destination)
        if not self._institutions:
            return institutions
        return [i for i in institutions if self._institution_allowed(i)]

    async def list_levels(self, institution: Option) -> list[Option]:
        return await self._inner.list_levels(institution)

    async def list_categories(self, institution: Option, level: Option) -> list[Option]:
        return await self._inner.list_categories(institution, level)

    async def list_specializations(
        self,
        institution: Option,
        level: Option,
        category: Option,
    ) -> list[Option]:
        return await self._inner.list_specializations(institution, level, category)

    async def list_programs(
        self,
        institution: Option,
        level: Option,
        category: Option | None = None,
        specialization: Option | None = None,
    ) -> list[Option]:
        return await self._inner.list_programs(institution, level, category, specialization)

    def _country_allowed(self, destination: Option) -> bool:
        candidates = (destination.display_name, destination.get("website"), destination.id)
        return any(str(c).strip().lower() in self._countries for c in candidates if c)

    def _institution_allowed(self, institution: Option) -> bool:
        candidates = (institution.id, institution.get("university_id"), institution.display_name)
        return any(str(c).strip() in self._institutions for c in candidates if c is not None)
