"""Application service (use case) for the local domain cache and operator actions."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from domainsync.application.interfaces import DomainRepository, RegistrarClient
from domainsync.application.schemas.domain import DeletionSummary, DomainRegistrationRequest
from domainsync.application.services.domain_sync_service import DomainSyncService
from domainsync.domain.entities import (
    Domain,
    DomainFilter,
    GlueSyncResult,
    LifecycleStatus,
    SyncOutcome,
    SyncReport,
)
from domainsync.domain.exceptions import (
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    RegistrarConfigurationError,
)
from domainsync.domain.validation import (
    is_valid_domain_name,
    looks_like_domain_name,
    normalize_domain_name,
    validate_glue_hostname,
    validate_ip_addresses,
    validate_nameservers,
    validate_years,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    domain: Domain
    order_id: str | None = None
    price: Any = None


class DomainService:
    """Orchestrates cache queries and registrar actions.

    Every registrar call goes through the ``RegistrarClient`` port. Remote
    changes are made first; the cache is only updated once the registrar
    has accepted them.
    """

    def __init__(
        self,
        repository: DomainRepository,
        registrar: RegistrarClient | None = None,
    ):
        self._repository = repository
        self._registrar = registrar
        self._sync = DomainSyncService(repository, registrar) if registrar else None

    def _require_registrar(self) -> RegistrarClient:
        if self._registrar is None:
            raise RegistrarConfigurationError(
                "Synergy Wholesale credentials not configured "
                "(set SW_RESELLER_ID and SW_API_KEY)"
            )
        return self._registrar

    def _require_sync(self) -> DomainSyncService:
        self._require_registrar()
        assert self._sync is not None
        return self._sync

    # ── Queries ──────────────────────────────────────────────────────

    async def get_domain(self, domain_name: str) -> Domain:
        name = normalize_domain_name(domain_name)
        domain = await self._repository.get_by_name(name)
        if domain is None:
            raise EntityNotFoundError("Domain", name)
        return domain

    async def exists(self, domain_name: str) -> bool:
        return await self._repository.get_by_name(normalize_domain_name(domain_name)) is not None

    async def list_domains(self, filters: DomainFilter | None = None) -> list[Domain]:
        return await self._repository.get_all(filters or DomainFilter())

    async def find(self, filters: DomainFilter) -> Domain | list[Domain]:
        """A single domain when the search names one that is cached, else a list."""
        if filters.search and looks_like_domain_name(filters.search):
            domain = await self._repository.get_by_name(normalize_domain_name(filters.search))
            if domain is not None:
                return domain
        return await self._repository.get_all(filters)

    async def expiring_soon(self, days: int = 30) -> list[Domain]:
        now = datetime.now(timezone.utc)
        return await self._repository.get_expiring_between(now, now + timedelta(days=days))

    async def using_nameservers(self, pattern: str) -> list[Domain]:
        return await self._repository.get_all(
            DomainFilter(nameserver=pattern.strip().lower(), limit=None)
        )

    # ── Sync ─────────────────────────────────────────────────────────

    async def sync(self, domain_name: str) -> SyncOutcome:
        return await self._require_sync().sync_domain(domain_name)

    async def sync_all(self, progress=None) -> SyncReport:
        return await self._require_sync().sync_all(progress)

    async def sync_glue_records(self, domain_name: str) -> GlueSyncResult:
        await self.get_domain(domain_name)
        return await self._require_sync().sync_glue_records(domain_name)

    async def sync_after(self, domain_name: str, enabled: bool = True) -> Domain:
        """Refresh from the registrar when requested, otherwise return the cached copy."""
        if enabled:
            outcome = await self.sync(domain_name)
            return outcome.domain
        return await self.get_domain(domain_name)

    # ── Registration ─────────────────────────────────────────────────

    async def check_availability(self, domain_name: str) -> dict[str, Any]:
        name = normalize_domain_name(domain_name)
        if not is_valid_domain_name(name):
            raise DomainValidationError(f"Invalid domain name: {name}")
        return await self._require_registrar().check_domain_availability(name)

    async def register_domain(
        self,
        data: DomainRegistrationRequest,
        *,
        check_availability: bool = True,
    ) -> RegistrationResult:
        name = normalize_domain_name(data.domain_name)
        if await self._repository.get_by_name(name) is not None:
            raise DuplicateEntityError("Domain", "domain_name", name)
        if not is_valid_domain_name(name):
            raise DomainValidationError(f"Invalid domain name: {name}")
        years = validate_years(data.years)
        nameservers = validate_nameservers(data.nameservers) if data.nameservers else []

        registrar = self._require_registrar()
        if check_availability:
            availability = await registrar.check_domain_availability(name)
            if not availability.get("available"):
                raise DomainValidationError(
                    f"Domain {name} is not available: {availability.get('status', 'unknown')}"
                )

        response = await registrar.register_domain(
            name,
            years=years,
            auto_renew=data.auto_renew,
            id_protect=data.id_protect,
            nameservers=nameservers or None,
        )
        logger.info("Registered %s for %d year(s)", name, years)

        if data.sync:
            domain = (await self.sync(name)).domain
        else:
            domain = await self._repository.save(
                Domain(
                    domain_name=name,
                    lifecycle_status=LifecycleStatus.PENDING_REGISTRATION,
                    registration_period_years=years,
                    auto_renew=data.auto_renew,
                    id_protection_enabled=data.id_protect,
                    nameservers=nameservers,
                    is_active=True,
                )
            )
        return RegistrationResult(
            domain=domain,
            order_id=response.get("orderID") or response.get("orderId"),
            price=response.get("price") or response.get("totalPrice"),
        )

    # ── Registrar actions ────────────────────────────────────────────

    async def update_nameservers(self, domain_name: str, nameservers: list[str]) -> Domain:
        domain = await self.get_domain(domain_name)
        cleaned = validate_nameservers(nameservers)
        await self._require_registrar().update_nameservers(domain.domain_name, cleaned)
        domain.nameservers = cleaned
        domain.touch()
        return await self._repository.save(domain)

    async def renew_domain(self, domain_name: str, years: int) -> dict[str, Any]:
        domain = await self.get_domain(domain_name)
        validate_years(years)
        return await self._require_registrar().renew_domain(domain.domain_name, years)

    async def lock_domain(self, domain_name: str) -> dict[str, Any]:
        domain = await self.get_domain(domain_name)
        return await self._require_registrar().lock_domain(domain.domain_name)

    async def unlock_domain(self, domain_name: str) -> dict[str, Any]:
        domain = await self.get_domain(domain_name)
        return await self._require_registrar().unlock_domain(domain.domain_name)

    async def set_id_protection(self, domain_name: str, enabled: bool) -> Domain:
        domain = await self.get_domain(domain_name)
        await self._require_registrar().set_id_protection(domain.domain_name, enabled)
        domain.id_protection_enabled = enabled
        domain.touch()
        return await self._repository.save(domain)

    async def set_auto_renew(self, domain_name: str, enabled: bool) -> Domain:
        domain = await self.get_domain(domain_name)
        await self._require_registrar().set_auto_renew(domain.domain_name, enabled)
        domain.auto_renew = enabled
        domain.touch()
        return await self._repository.save(domain)

    async def rotate_auth_code(self, domain_name: str) -> str | None:
        """Generate a new EPP auth code and cache it. Returns the new code."""
        domain = await self.get_domain(domain_name)
        response = await self._require_registrar().generate_auth_code(domain.domain_name)
        code = response.get("authCode") or response.get("domainPassword")
        if code:
            domain.domain_password = str(code)
            domain.touch()
            await self._repository.save(domain)
        return code

    # ── Glue records ─────────────────────────────────────────────────

    async def add_glue_record(
        self, domain_name: str, hostname: str, ip_addresses: list[str]
    ) -> GlueSyncResult:
        domain = await self.get_domain(domain_name)
        host = validate_glue_hostname(hostname, domain.domain_name)
        ips = validate_ip_addresses(ip_addresses)
        await self._require_registrar().add_child_host(domain.domain_name, host, ips)
        return await self._require_sync().sync_glue_records(domain.domain_name)

    async def delete_glue_record(self, domain_name: str, hostname: str) -> GlueSyncResult:
        domain = await self.get_domain(domain_name)
        host = normalize_domain_name(hostname)
        await self._require_registrar().delete_child_host(domain.domain_name, host)

        # The registry no longer lists it, so a stale copy can go too.
        record = domain.get_glue_record(host)
        if record is not None and record.is_stale:
            domain.glue_records.remove(record)
            await self._repository.save(domain)
        return await self._require_sync().sync_glue_records(domain.domain_name)

    async def add_glue_ip(self, domain_name: str, hostname: str, ip: str) -> GlueSyncResult:
        domain = await self.get_domain(domain_name)
        host = validate_glue_hostname(hostname, domain.domain_name)
        (address,) = validate_ip_addresses([ip])
        await self._require_registrar().add_child_host_ip(domain.domain_name, host, address)
        return await self._require_sync().sync_glue_records(domain.domain_name)

    async def remove_glue_ip(self, domain_name: str, hostname: str, ip: str) -> GlueSyncResult:
        domain = await self.get_domain(domain_name)
        host = normalize_domain_name(hostname)
        await self._require_registrar().delete_child_host_ip(domain.domain_name, host, ip.strip())
        return await self._require_sync().sync_glue_records(domain.domain_name)

    async def mark_glue_stale(self, domain_name: str, hostname: str, stale: bool = True) -> Domain:
        domain = await self.get_domain(domain_name)
        record = domain.get_glue_record(hostname)
        if record is None:
            raise EntityNotFoundError("GlueRecord", normalize_domain_name(hostname))
        record.is_stale = stale
        domain.touch()
        return await self._repository.save(domain)

    # ── Metadata ─────────────────────────────────────────────────────

    async def set_metadata(self, domain_name: str, key: str, value: str) -> Domain:
        key = key.strip()
        if not key:
            raise DomainValidationError("Metadata key must not be empty")
        domain = await self.get_domain(domain_name)
        domain.set_meta(key, value)
        return await self._repository.save(domain)

    async def delete_metadata(self, domain_name: str, key: str) -> Domain:
        domain = await self.get_domain(domain_name)
        if not domain.delete_meta(key):
            raise EntityNotFoundError("DomainMetadata", key)
        domain.touch()
        return await self._repository.save(domain)

    # ── Removal ──────────────────────────────────────────────────────

    async def delete_local(self, domain_name: str) -> DeletionSummary:
        """Remove a domain from the cache only; the registration is untouched."""
        domain = await self.get_domain(domain_name)
        summary = DeletionSummary(
            domain_name=domain.domain_name,
            glue_records=len(domain.glue_records),
            metadata=len(domain.metadata),
        )
        await self._repository.delete(domain.domain_name)
        logger.info("Removed %s from local cache", domain.domain_name)
        return summary

    async def cancel_domain(self, domain_name: str) -> Domain:
        """Cancel at the registrar. The cached record is kept for audit."""
        domain = await self.get_domain(domain_name)
        await self._require_registrar().cancel_domain(domain.domain_name)
        domain.lifecycle_status = LifecycleStatus.CANCELLED
        domain.domain_status = "Cancelled"
        domain.is_active = False
        domain.touch()
        logger.warning("Cancelled %s at registrar", domain.domain_name)
        return await self._repository.save(domain)
