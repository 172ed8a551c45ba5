"""Domain cache and sync endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from domainsync.application.schemas import (
    DeletionSummary,
    DomainResponse,
    GlueRecordUpdate,
    MetadataValue,
    SyncOutcomeResponse,
    SyncReportResponse,
)
from domainsync.application.services import DomainService
from domainsync.domain.entities import DomainFilter, LifecycleStatus
from domainsync.domain.exceptions import (
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    RegistrarConfigurationError,
    RegistrarError,
)
from domainsync.infrastructure.dependencies import get_domain_service

router = APIRouter(prefix="/domains", tags=["Domains"])

_HANDLED = (
    EntityNotFoundError,
    DuplicateEntityError,
    DomainValidationError,
    RegistrarError,
    RegistrarConfigurationError,
)


def _http_error(exc: Exception) -> HTTPException:
    """Map a domain exception onto an HTTP error response."""
    if isinstance(exc, EntityNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, DuplicateEntityError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, DomainValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, RegistrarConfigurationError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail=str(exc))


def _lifecycle_filter(value: str) -> LifecycleStatus | None:
    if value == "all":
        return None
    try:
        return LifecycleStatus(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown lifecycle status '{value}'",
        ) from None


@router.get("", response_model=list[DomainResponse])
async def list_domains(
    search: str | None = Query(None, description="Name or pattern (* wildcard)"),
    lifecycle_status: str = Query("active", description="Lifecycle status, or 'all'"),
    expiring: int | None = Query(None, ge=0, description="Expiring within N days"),
    glue: bool = Query(False, description="Only domains with glue records"),
    tld: str | None = Query(None, description="Filter by TLD"),
    nameserver: str | None = Query(None, description="Nameserver substring"),
    skip: int = Query(0, ge=0),
    limit: int = Query(25, ge=1, le=1000),
    service: DomainService = Depends(get_domain_service),
) -> list[DomainResponse]:
    """Retrieve a filtered, paginated list of cached domains."""
    filters = DomainFilter(
        search=search,
        lifecycle_status=_lifecycle_filter(lifecycle_status),
        expiring_within_days=expiring,
        has_glue=glue,
        tld=tld,
        nameserver=nameserver,
        skip=skip,
        limit=limit,
    )
    domains = await service.list_domains(filters)
    return [DomainResponse.from_entity(d) for d in domains]


@router.post("/sync", response_model=SyncReportResponse)
async def sync_all_domains(
    service: DomainService = Depends(get_domain_service),
) -> SyncReportResponse:
    """Sync every active domain from the registrar."""
    try:
        report = await service.sync_all()
    except _HANDLED as e:
        raise _http_error(e)
    return SyncReportResponse.from_report(report)


@router.get("/{domain_name}", response_model=DomainResponse)
async def get_domain(
    domain_name: str,
    service: DomainService = Depends(get_domain_service),
) -> DomainResponse:
    """Retrieve a single cached domain."""
    try:
        domain = await service.get_domain(domain_name)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return DomainResponse.from_entity(domain)


@router.post("/{domain_name}/sync", response_model=SyncOutcomeResponse)
async def sync_domain(
    domain_name: str,
    service: DomainService = Depends(get_domain_service),
) -> SyncOutcomeResponse:
    """Sync one domain (and its glue records) from the registrar."""
    try:
        outcome = await service.sync(domain_name)
    except _HANDLED as e:
        raise _http_error(e)
    return SyncOutcomeResponse.from_outcome(outcome)


@router.patch("/{domain_name}/glue-records/{hostname}", response_model=DomainResponse)
async def update_glue_record(
    domain_name: str,
    hostname: str,
    data: GlueRecordUpdate,
    service: DomainService = Depends(get_domain_service),
) -> DomainResponse:
    """Mark a glue record stale, or clear the flag. Local only."""
    try:
        domain = await service.mark_glue_stale(domain_name, hostname, stale=data.is_stale)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return DomainResponse.from_entity(domain)


@router.put("/{domain_name}/metadata/{key}", response_model=DomainResponse)
async def set_metadata(
    domain_name: str,
    key: str,
    data: MetadataValue,
    service: DomainService = Depends(get_domain_service),
) -> DomainResponse:
    """Set an operator-owned metadata value."""
    try:
        domain = await service.set_metadata(domain_name, key, data.value)
    except _HANDLED as e:
        raise _http_error(e)
    return DomainResponse.from_entity(domain)


@router.delete("/{domain_name}/metadata/{key}", response_model=DomainResponse)
async def delete_metadata(
    domain_name: str,
    key: str,
    service: DomainService = Depends(get_domain_service),
) -> DomainResponse:
    """Remove a metadata key."""
    try:
        domain = await service.delete_metadata(domain_name, key)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return DomainResponse.from_entity(domain)


@router.delete("/{domain_name}", response_model=DeletionSummary)
async def delete_domain(
    domain_name: str,
    service: DomainService = Depends(get_domain_service),
) -> DeletionSummary:
    """Remove a domain from the local cache. The registration is untouched."""
    try:
        return await service.delete_local(domain_name)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
