from __future__ import annotations

import logging
from typing import Any

import httpx

from admissions.application.exceptions import CatalogContractError, CatalogUpstreamError
from admissions.application.ports.catalog_lookup import CatalogLookupPort
from admissions.core.config import settings
from admissions.domain.entities.funnel_step import FunnelStep
from admissions.domain.entities.option import Option
from admissions.infrastructure.catalog.normalize import normalize_options


class ExternalCatalogClient(CatalogLookupPort):
    """
    httpx-backed adapter for the external "search and apply" catalog.

    Contract guarantees:
    - 404 responses mean "nothing for this prefix" and yield []
    - Raises:
        CatalogUpstreamError: timeouts, transport failures, other non-2xx statuses
        CatalogContractError: non-JSON bodies or unexpected shapes
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.EXTERNAL_API_BASE_URL or "").rstrip("/")
        if not self._base_url:
            raise ValueError("EXTERNAL_API_BASE_URL is required for the external catalog")
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.EXTERNAL_API_TIMEOUT_SECONDS
        )
        self._logger = logging.getLogger(__name__)

    async def list_destinations(self) -> list[Option]:
        return await self._fetch(FunnelStep.DESTINATION, "/countries", {})

    async def list_institutions(self, destination: Option) -> list[Option]:
        website = destination.get("website") or destination.display_name
        return await self._fetch(FunnelStep.INSTITUTION, "/universities", {"website": website})

    async def list_levels(self, institution: Option) -> list[Option]:
        return await self._fetch(FunnelStep.LEVEL, "/levels", {"university_id": institution.id})

    async def list_categories(self, institution: Option, level: Option) -> list[Option]:
        return await self._fetch(
            FunnelStep.CATEGORY,
            "/categories",
            {"university_id": institution.id, "level": level.id},
        )

    async def list_specializations(
        self,
        institution: Option,
        level: Option,
        category: Option,
    ) -> list[Option]:
        return await self._fetch(
            FunnelStep.SPECIALIZATION,
            "/specializations",
            {
                "university_id": institution.id,
                "level": level.id,
                "course_category_id": category.id,
            },
        )

    async def list_programs(
        self,
        institution: Option,
        level: Option,
        category: Option | None = None,
        specialization: Option | None = None,
    ) -> list[Option]:
        return await self._fetch(
            FunnelStep.PROGRAM,
            "/programs",
            {
                "university_id": institution.id,
                "level": level.id,
                "course_category_id": category.id if category else None,
                "specialization_id": specialization.id if specialization else None,
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _fetch(self, step: FunnelStep, path: str, params: dict[str, Any]) -> list[Option]:
        url = f"{self._base_url}{path}"
        query = {k: v for k, v in params.items() if v not in (None, "")}

        try:
            response = await self._client.get(url, params=query)
        except httpx.HTTPError as e:
            self._logger.error(
                "Catalog request failed",
                extra={"step": step.value, "url": url, "error": str(e)},
            )
            raise CatalogUpstreamError(f"{step.value}: {type(e).__name__}: {e}") from e

        if response.status_code == 404:
            self._logger.warning("Catalog returned 404, treating as no options", extra={"step": step.value})
            return []
        if response.status_code >= 400:
            self._logger.error(
                "Catalog returned error status",
                extra={"step": step.value, "status": response.status_code, "error": response.text[:200]},
            )
            raise CatalogUpstreamError(f"{step.value}: catalog responded with HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise CatalogContractError(f"{step.value}: response is not valid JSON") from e

        return normalize_options(body, step)
