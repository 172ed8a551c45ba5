"""Pydantic DTOs (Data Transfer Objects) for the domain cache and sync workflow."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, computed_field

from domainsync.domain.entities import Domain, LifecycleStatus, SyncOutcome, SyncReport


# ── Requests ──────────────────────────────────────────────────────────


class DomainRegistrationRequest(BaseModel):
    """Schema for registering a new domain at the registrar."""

    domain_name: str = Field(..., min_length=3, max_length=253, examples=["netserva.org"])
    years: int = Field(1, ge=1, le=10)
    auto_renew: bool = False
    id_protect: bool = False
    nameservers: list[str] = Field(default_factory=list, max_length=13)
    sync: bool = False


class GlueRecordUpdate(BaseModel):
    """Local-only change to a glue record."""

    is_stale: bool


class MetadataValue(BaseModel):
    value: str = Field(..., max_length=10_000)


# ── Responses ─────────────────────────────────────────────────────────


class GlueRecordResponse(BaseModel):
    hostname: str
    ip_addresses: list[str]
    is_synced: bool
    is_stale: bool
    last_synced_at: datetime | None

    model_config = {"from_attributes": True}


class DomainResponse(BaseModel):
    """Schema returned to the client. The EPP auth code is never exposed."""

    domain_name: str
    domain_roid: str | None
    registry_id: str | None
    domain_status: str | None
    lifecycle_status: LifecycleStatus
    domain_expiry: datetime | None
    domain_registered: datetime | None
    created_date: datetime | None
    registrant: str | None
    nameservers: list[str]
    ds_data: list[Any]
    dns_config_type: int | None
    categories: list[Any]
    dns_management_enabled: bool
    email_forwarding_enabled: bool
    id_protection_enabled: bool
    is_premium: bool
    auto_renew: bool
    do_not_renew: bool
    icann_status: str | None
    icann_verification_date_end: datetime | None
    contacts: dict[str, Any]
    is_active: bool
    is_synced: bool
    error_message: str | None
    last_synced_at: datetime | None
    customer_id: int | None
    glue_records: list[GlueRecordResponse]
    metadata: dict[str, str]
    has_auth_code: bool
    days_until_expiry: int | None

    model_config = {"from_attributes": True}

    @classmethod
    def from_entity(cls, domain: Domain) -> "DomainResponse":
        data = {
            name: getattr(domain, name)
            for name in cls.model_fields
            if name not in {"has_auth_code", "days_until_expiry", "glue_records"}
        }
        return cls(
            **data,
            glue_records=[GlueRecordResponse.model_validate(g) for g in domain.glue_records],
            has_auth_code=bool(domain.domain_password),
            days_until_expiry=domain.days_until_expiry(),
        )


class FieldChangeResponse(BaseModel):
    field: str
    before: Any
    after: Any

    model_config = {"from_attributes": True}


class SyncOutcomeResponse(BaseModel):
    domain_name: str
    lifecycle_status: LifecycleStatus
    is_active: bool
    created: bool
    skipped: bool
    error: str | None
    changes: list[FieldChangeResponse]
    glue_added: list[str]
    glue_updated: list[str]
    glue_removed: list[str]
    glue_stale: list[str]

    @classmethod
    def from_outcome(cls, outcome: SyncOutcome) -> "SyncOutcomeResponse":
        return cls(
            domain_name=outcome.domain.domain_name,
            lifecycle_status=outcome.domain.lifecycle_status,
            is_active=outcome.domain.is_active,
            created=outcome.created,
            skipped=outcome.skipped,
            error=outcome.error,
            changes=[FieldChangeResponse.model_validate(c) for c in outcome.changes],
            glue_added=outcome.glue.added,
            glue_updated=outcome.glue.updated,
            glue_removed=outcome.glue.removed,
            glue_stale=outcome.glue.stale,
        )


class SyncReportResponse(BaseModel):
    total: int
    synced: int
    errors: int
    skipped: int = 0
    outcomes: list[SyncOutcomeResponse]

    @computed_field
    @property
    def diverged(self) -> list[str]:
        return [
            o.domain_name
            for o in self.outcomes
            if not o.created and (o.changes or o.glue_added or o.glue_removed or o.glue_updated or o.glue_stale)
        ]

    @classmethod
    def from_report(cls, report: SyncReport) -> "SyncReportResponse":
        return cls(
            total=report.total,
            synced=report.synced,
            errors=report.errors,
            skipped=report.skipped,
            outcomes=[SyncOutcomeResponse.from_outcome(o) for o in report.outcomes],
        )


class DeletionSummary(BaseModel):
    """What a local-only removal took out of the cache."""

    domain_name: str
    glue_records: int
    metadata: int
