"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from domainsync.application.services import DomainService
from domainsync.config import Settings, get_settings
from domainsync.infrastructure.database.repositories import SQLAlchemyDomainRepository
from domainsync.infrastructure.database.session import get_db_session
from domainsync.infrastructure.registrar import SynergyWholesaleClient


def build_registrar_client(settings: Settings) -> SynergyWholesaleClient | None:
    """Registrar adapter from settings, or None when credentials are not configured."""
    if not settings.registrar_configured:
        return None
    return SynergyWholesaleClient(
        reseller_id=settings.sw_reseller_id,
        api_key=settings.sw_api_key,
        api_url=settings.sw_api_url,
        timeout=settings.sw_timeout_seconds,
    )


async def get_registrar_client() -> AsyncGenerator[SynergyWholesaleClient | None, None]:
    """Provides a registrar client holding one connection pool per request."""
    client = build_registrar_client(get_settings())
    if client is None:
        yield None
        return
    async with client:
        yield client


async def get_domain_service(
    session: AsyncSession = Depends(get_db_session),
    registrar: SynergyWholesaleClient | None = Depends(get_registrar_client),
) -> AsyncGenerator[DomainService, None]:
    """Provides a DomainService with its repository and registrar wired up."""
    repository = SQLAlchemyDomainRepository(session)
    yield DomainService(repository, registrar)
