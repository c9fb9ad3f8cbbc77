from __future__ import annotations

from abc import ABC, abstractmethod

from admissions.domain.entities.option import Option


class CatalogLookupPort(ABC):
    """
    One lookup per funnel step, each parameterized by options chosen earlier.

    Requirements:
    - Return an empty list when the catalog has nothing for the given prefix
    - Raise CatalogUpstreamError on transport/provider failures (including timeouts)
    - Raise CatalogContractError when the provider response cannot be normalized
    - Never return partial or default data in place of a failure
    """

    @abstractmethod
    async def list_destinations(self) -> list[Option]:
        raise NotImplementedError

    @abstractmethod
    async def list_institutions(self, destination: Option) -> list[Option]:
        raise NotImplementedError

    @abstractmethod
    async def list_levels(self, institution: Option) -> list[Option]:
        raise NotImplementedError

    @abstractmethod
    async def list_categories(self, institution: Option, level: Option) -> list[Option]:
        raise NotImplementedError

    @abstractmethod
    async def list_specializations(
        self,
        institution: Option,
        level: Option,
        category: Option,
    ) -> list[Option]:
        raise NotImplementedError

    @abstractmethod
    async def list_programs(
        self,
        institution: Option,
        level: Option,
        category: Option | None = None,
        specialization: Option | None = None,
    ) -> list[Option]:
        """Specialization is None when that step was skipped as empty."""
        raise NotImplementedError
