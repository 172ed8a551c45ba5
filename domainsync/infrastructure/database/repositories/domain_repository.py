"""Concrete repository implementation for the domain cache backed by SQLAlchemy."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import String, cast, select
from sqlalchemy.ext.asyncio import AsyncSession

from domainsync.application.interfaces import DomainRepository
from domainsync.domain.entities import Domain, DomainFilter, GlueRecord, LifecycleStatus
from domainsync.infrastructure.database.models import (
    DomainMetadataModel,
    DomainModel,
    GlueRecordModel,
)

# Scalar columns copied verbatim between entity and model.
_SCALAR_FIELDS = (
    "domain_roid",
    "registry_id",
    "domain_status",
    "registration_period_years",
    "registrant",
    "domain_password",
    "dns_config_type",
    "dns_management_enabled",
    "email_forwarding_enabled",
    "id_protection_enabled",
    "is_premium",
    "auto_renew",
    "do_not_renew",
    "bulk_in_progress",
    "icann_status",
    "is_active",
    "is_synced",
    "error_message",
    "customer_id",
)
_DATETIME_FIELDS = (
    "domain_expiry",
    "domain_registered",
    "created_date",
    "icann_verification_date_end",
    "last_synced_at",
    "created_at",
    "updated_at",
)
_JSON_FIELDS = ("nameservers", "ds_data", "categories", "contacts", "raw_response")


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; every stored timestamp is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SQLAlchemyDomainRepository(DomainRepository):
    """Implements the DomainRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    # ── Mapping ──────────────────────────────────────────────────────

    def _to_entity(self, model: DomainModel) -> Domain:
        """Map ORM model → domain entity."""
        domain = Domain(
            domain_name=model.domain_name,
            id=model.id,
            lifecycle_status=LifecycleStatus(model.lifecycle_status),
            glue_records=[self._glue_to_entity(g) for g in model.glue_records],
            metadata={m.key: m.value for m in model.metadata_entries},
        )
        for name in _SCALAR_FIELDS:
            setattr(domain, name, getattr(model, name))
        for name in _DATETIME_FIELDS:
            setattr(domain, name, _as_utc(getattr(model, name)))
        for name in _JSON_FIELDS:
            value = getattr(model, name)
            setattr(domain, name, type(value)(value) if value is not None else value)
        return domain

    @staticmethod
    def _glue_to_entity(model: GlueRecordModel) -> GlueRecord:
        return GlueRecord(
            id=model.id,
            domain_id=model.sw_domain_id,
            hostname=model.hostname,
            ip_addresses=list(model.ip_addresses or []),
            is_synced=model.is_synced,
            is_stale=model.is_stale,
            last_synced_at=_as_utc(model.last_synced_at),
            sync_error=model.sync_error,
        )

    def _apply(self, domain: Domain, model: DomainModel) -> None:
        """Copy entity state onto the ORM model."""
        model.lifecycle_status = domain.lifecycle_status.value
        for name in _SCALAR_FIELDS:
            setattr(model, name, getattr(domain, name))
        for name in _DATETIME_FIELDS:
            setattr(model, name, _as_utc(getattr(domain, name)))
        for name in _JSON_FIELDS:
            # New container objects so the JSON columns are flagged dirty.
            value = getattr(domain, name)
            setattr(model, name, type(value)(value))

    @staticmethod
    def _apply_glue(domain: Domain, model: DomainModel) -> None:
        """Replace the model's glue records with the entity's, keyed by hostname."""
        wanted = {g.hostname: g for g in domain.glue_records}
        for existing in list(model.glue_records):
            if existing.hostname not in wanted:
                model.glue_records.remove(existing)

        current = {g.hostname: g for g in model.glue_records}
        for hostname, glue in wanted.items():
            row = current.get(hostname)
            if row is None:
                row = GlueRecordModel(hostname=hostname)
                model.glue_records.append(row)
            row.ip_addresses = list(glue.ip_addresses)
            row.is_synced = glue.is_synced
            row.is_stale = glue.is_stale
            row.last_synced_at = _as_utc(glue.last_synced_at)
            row.sync_error = glue.sync_error

    @staticmethod
    def _apply_metadata(domain: Domain, model: DomainModel) -> None:
        for existing in list(model.metadata_entries):
            if existing.key not in domain.metadata:
                model.metadata_entries.remove(existing)

        current = {m.key: m for m in model.metadata_entries}
        for key, value in domain.metadata.items():
            row = current.get(key)
            if row is None:
                model.metadata_entries.append(DomainMetadataModel(key=key, value=value))
            else:
                row.value = value

    async def _get_model(self, domain_name: str) -> DomainModel | None:
        stmt = select(DomainModel).where(DomainModel.domain_name == domain_name)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    # ── Queries ──────────────────────────────────────────────────────

    async def get_by_name(self, domain_name: str) -> Domain | None:
        model = await self._get_model(domain_name)
        return self._to_entity(model) if model else None

    async def get_all(self, filters: DomainFilter) -> list[Domain]:
        stmt = select(DomainModel)

        pattern = filters.like_pattern
        if pattern is not None:
            stmt = stmt.where(DomainModel.domain_name.ilike(pattern))
        if filters.lifecycle_status is not None:
            stmt = stmt.where(DomainModel.lifecycle_status == filters.lifecycle_status.value)
        if filters.has_glue:
            stmt = stmt.where(DomainModel.glue_records.any())
        if filters.tld:
            stmt = stmt.where(DomainModel.domain_name.ilike(f"%.{filters.tld.lstrip('.')}"))
        if filters.nameserver:
            stmt = stmt.where(
                cast(DomainModel.nameservers, String).ilike(f"%{filters.nameserver}%")
            )

        if filters.expiring_within_days is not None:
            cutoff = datetime.now(timezone.utc) + timedelta(days=filters.expiring_within_days)
            stmt = stmt.where(
                DomainModel.lifecycle_status == LifecycleStatus.ACTIVE.value,
                DomainModel.domain_expiry.is_not(None),
                DomainModel.domain_expiry <= cutoff,
            ).order_by(DomainModel.domain_expiry)

        stmt = stmt.order_by(DomainModel.domain_name).offset(filters.skip).limit(filters.limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def get_expiring_between(self, start: datetime, end: datetime) -> list[Domain]:
        stmt = (
            select(DomainModel)
            .where(
                DomainModel.lifecycle_status == LifecycleStatus.ACTIVE.value,
                DomainModel.domain_expiry >= _as_utc(start),
                DomainModel.domain_expiry <= _as_utc(end),
            )
            .order_by(DomainModel.domain_expiry, DomainModel.domain_name)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    # ── Commands ─────────────────────────────────────────────────────

    async def save(self, domain: Domain) -> Domain:
        model = await self._get_model(domain.domain_name)
        if model is None:
            model = DomainModel(domain_name=domain.domain_name, glue_records=[], metadata_entries=[])
            self._session.add(model)

        self._apply(domain, model)
        self._apply_glue(domain, model)
        self._apply_metadata(domain, model)
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, domain_name: str) -> bool:
        model = await self._get_model(domain_name)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True
