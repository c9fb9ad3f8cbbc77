"""
Shared fixtures: a small catalog tree covering every skip policy, a catalog
that can be made to fail or stall on demand, and a resolver wired to both.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from admissions.application.exceptions import CatalogUpstreamError
from admissions.application.use_cases.funnel_resolver import FunnelResolver
from admissions.domain.entities.option import Option
from admissions.infrastructure.catalog.mock_catalog import MockCatalog
from admissions.infrastructure.crm.mock_crm import MockSubjectDirectory


def _program(pid: str, name: str, **extra: Any) -> dict[str, Any]:
    return {"id": pid, "course_name": name, "duration": "2 years", "study_mode": "Full-time", **extra}


CATALOG_TREE: dict[str, Any] = {
    "countries": [
        {
            "id": "de",
            "name": "Germany",
            "website": "de",
            # single university with a single level: both auto-skipped
            "universities": [
                {
                    "id": "tum",
                    "name": "Technical University of Munich",
                    "levels": {
                        "Master": {
                            "categories": [
                                {
                                    "id": "cs",
                                    "category_name": "Computer Science",
                                    "specializations": [
                                        {
                                            "id": "ai",
                                            "specialization_name": "Artificial Intelligence",
                                            "programs": [
                                                _program("msc-ai", "MSc Artificial Intelligence"),
                                                _program("msc-robotics", "MSc Robotics"),
                                            ],
                                        },
                                        {
                                            "id": "se",
                                            "specialization_name": "Software Engineering",
                                            "programs": [_program("msc-se", "MSc Software Engineering")],
                                        },
                                    ],
                                },
                                {
                                    "id": "me",
                                    "category_name": "Mechanical Engineering",
                                    "specializations": [],
                                    "programs": [
                                        _program("msc-me", "MSc Mechanical Engineering"),
                                        _program("msc-aero", "MSc Aerospace"),
                                    ],
                                },
                                {
                                    "id": "ee",
                                    "category_name": "Electrical Engineering",
                                    "specializations": [
                                        {
                                            "id": "power",
                                            "specialization_name": "Power Systems",
                                            "programs": [
                                                _program("msc-power", "MSc Power Engineering"),
                                                _program("msc-grid", "MSc Smart Grids"),
                                            ],
                                        },
                                    ],
                                },
                                {
                                    "id": "ph",
                                    "category_name": "Physics",
                                    "specializations": [],
                                    "programs": [_program("msc-ph", "MSc Physics", tuition_fee="EUR 0")],
                                },
                            ],
                        },
                    },
                },
            ],
        },
        {
            "id": "nl",
            "name": "Netherlands",
            "website": "nl",
            "universities": [
                {
                    "id": "uva",
                    "name": "University of Amsterdam",
                    "levels": {
                        "Bachelor": {
                            "categories": [
                                {
                                    "id": "econ",
                                    "category_name": "Economics",
                                    "specializations": [],
                                    "programs": [
                                        _program("bsc-econ", "BSc Economics"),
                                        _program("bsc-ebe", "BSc Econometrics"),
                                    ],
                                },
                            ],
                        },
                        "Master": {"categories": []},
                    },
                },
                {
                    "id": "tud",
                    "name": "Delft University of Technology",
                    "levels": {},
                },
            ],
        },
    ],
}


class ControllableCatalog(MockCatalog):
    """MockCatalog whose lookups can be failed or held open per method."""

    def __init__(self, tree: dict[str, Any]) -> None:
        super().__init__(tree)
        self._failures: dict[str, int] = {}
        self._gates: dict[str, asyncio.Event] = {}

    def fail_next(self, method: str, times: int = 1) -> None:
        self._failures[method] = times

    def hold(self, method: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[method] = gate
        return gate

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    async def _before(self, method: str) -> None:
        gate = self._gates.pop(method, None)
        if gate is not None:
            await gate.wait()
        if self._failures.get(method, 0) > 0:
            self._failures[method] -= 1
            raise CatalogUpstreamError(f"{method}: simulated outage")

    async def list_destinations(self) -> list[Option]:
        await self._before("list_destinations")
        return await super().list_destinations()

    async def list_institutions(self, destination: Option) -> list[Option]:
        await self._before("list_institutions")
        return await super().list_institutions(destination)

    async def list_levels(self, institution: Option) -> list[Option]:
        await self._before("list_levels")
        return await super().list_levels(institution)

    async def list_categories(self, institution: Option, level: Option) -> list[Option]:
        await self._before("list_categories")
        return await super().list_categories(institution, level)

    async def list_specializations(self, institution: Option, level: Option, category: Option) -> list[Option]:
        await self._before("list_specializations")
        return await super().list_specializations(institution, level, category)

    async def list_programs(
        self,
        institution: Option,
        level: Option,
        category: Option | None = None,
        specialization: Option | None = None,
    ) -> list[Option]:
        await self._before("list_programs")
        return await super().list_programs(institution, level, category, specialization)


STUDENTS = {
    "stu-1": {"id": "stu-1", "firstName": "Amara", "lastName": "Okafor"},
    "stu-2": {"id": "stu-2", "firstName": "Luis", "lastName": "Ferreira"},
}


@pytest.fixture
def catalog_tree() -> dict[str, Any]:
    return CATALOG_TREE


@pytest.fixture
def catalog() -> ControllableCatalog:
    return ControllableCatalog(CATALOG_TREE)


@pytest.fixture
def subjects() -> MockSubjectDirectory:
    return MockSubjectDirectory(STUDENTS)


@pytest.fixture
def resolver(catalog, subjects) -> FunnelResolver:
    return FunnelResolver(catalog=catalog, subjects=subjects, session_id="test-session")


@pytest.fixture
def make_resolver(subjects):
    """Build an independent resolver over its own catalog instance."""

    def _make(tree: dict[str, Any] | None = None) -> tuple[FunnelResolver, ControllableCatalog]:
        cat = ControllableCatalog(tree if tree is not None else CATALOG_TREE)
        return FunnelResolver(catalog=cat, subjects=subjects), cat

    return _make
