from functools import lru_cache
from typing import Callable
import logging

from admissions.core.config import settings
from admissions.application.ports.application_submission import ApplicationSubmissionPort
from admissions.application.ports.catalog_lookup import CatalogLookupPort
from admissions.application.ports.funnel_session_store import FunnelSessionStorePort
from admissions.application.ports.subject_lookup import SubjectLookupPort
from admissions.application.use_cases.funnel_resolver import FunnelResolver
from admissions.application.use_cases.submit_application import SubmitApplicationUseCase
from admissions.infrastructure.catalog.external_catalog_client import ExternalCatalogClient
from admissions.infrastructure.catalog.mock_catalog import MockCatalog
from admissions.infrastructure.catalog.scoped_catalog import AgentScope, ScopedCatalog
from admissions.infrastructure.crm.crm_client import CrmClient
from admissions.infrastructure.crm.crm_platform import CrmApplicationSubmission, CrmSubjectDirectory
from admissions.infrastructure.crm.mock_crm import MockApplicationSubmission, MockSubjectDirectory
from admissions.infrastructure.store.memory_store import MemoryFunnelSessionStore


logger = logging.getLogger(__name__)

_session_store: MemoryFunnelSessionStore | None = None


def _is_local() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_catalog() -> CatalogLookupPort:
    if not settings.EXTERNAL_API_BASE_URL or _is_local():
        logger.info("Using MockCatalog (ENV=%s, base url set=%s)", settings.ENV, bool(settings.EXTERNAL_API_BASE_URL))
        return MockCatalog()
    return ExternalCatalogClient()


@lru_cache
def get_crm_client() -> CrmClient | None:
    if not settings.CRM_API_BASE_URL or _is_local():
        return None
    return CrmClient(
        base_url=settings.CRM_API_BASE_URL,
        access_token=settings.CRM_API_TOKEN,
        timeout=settings.CRM_API_TIMEOUT_SECONDS,
    )


@lru_cache
def get_subject_lookup() -> SubjectLookupPort:
    client = get_crm_client()
    if client is None:
        logger.info("Using MockSubjectDirectory (CRM not configured)")
        return MockSubjectDirectory()
    return CrmSubjectDirectory(client=client)


@lru_cache
def get_application_submission() -> ApplicationSubmissionPort:
    client = get_crm_client()
    if client is None:
        logger.info("Using MockApplicationSubmission (CRM not configured)")
        return MockApplicationSubmission()
    return CrmApplicationSubmission(client=client)


def get_session_store() -> FunnelSessionStorePort:
    global _session_store
    if _session_store is None:
        _session_store = MemoryFunnelSessionStore()
    return _session_store


def build_funnel_resolver(scope: AgentScope | None = None) -> FunnelResolver:
    catalog = get_catalog()
    if scope is not None:
        catalog = ScopedCatalog(inner=catalog, scope=scope)
    return FunnelResolver(catalog=catalog, subjects=get_subject_lookup())


def get_submit_application_use_case() -> SubmitApplicationUseCase:
    return SubmitApplicationUseCase(submissions=get_application_submission())


def get_resolver_factory() -> Callable[[AgentScope | None], FunnelResolver]:
    return build_funnel_resolver
