"""Domain entity — local cache of a registrar-tracked domain."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .glue_record import GlueRecord
from .lifecycle import LifecycleStatus


@dataclass
class Domain:
    """Core domain entity mirroring the registrar's view of one domain.

    The registrar is the system of record; this object is the cached copy
    refreshed by each reconciliation. ``metadata`` holds operator-owned
    key/value pairs that the registrar knows nothing about.
    """

    domain_name: str
    id: int | None = None
    domain_roid: str | None = None
    registry_id: str | None = None
    domain_status: str | None = None
    lifecycle_status: LifecycleStatus = LifecycleStatus.ACTIVE
    domain_expiry: datetime | None = None
    domain_registered: datetime | None = None
    created_date: datetime | None = None
    registration_period_years: int | None = None
    registrant: str | None = None
    domain_password: str | None = None
    nameservers: list[str] = field(default_factory=list)
    ds_data: list[Any] = field(default_factory=list)
    dns_config_type: int | None = None
    categories: list[Any] = field(default_factory=list)
    dns_management_enabled: bool = False
    email_forwarding_enabled: bool = False
    id_protection_enabled: bool = False
    is_premium: bool = False
    auto_renew: bool = False
    do_not_renew: bool = False
    bulk_in_progress: bool = False
    icann_verification_date_end: datetime | None = None
    icann_status: str | None = None
    contacts: dict[str, Any] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    is_synced: bool = False
    error_message: str | None = None
    last_synced_at: datetime | None = None
    customer_id: int | None = None
    glue_records: list[GlueRecord] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # ── Expiry ────────────────────────────────────────────────────────

    def days_until_expiry(self, now: datetime | None = None) -> int | None:
        """Signed whole days until expiry (negative once expired)."""
        if self.domain_expiry is None:
            return None
        now = now or datetime.now(timezone.utc)
        delta = self.domain_expiry - now
        return int(delta.total_seconds() / 86400)

    def is_expiring_soon(self, days: int = 30, now: datetime | None = None) -> bool:
        remaining = self.days_until_expiry(now)
        return remaining is not None and 0 <= remaining <= days

    # ── Display helpers ───────────────────────────────────────────────

    @property
    def nameservers_display(self) -> str:
        if not self.nameservers:
            return "N/A"
        shown = ", ".join(self.nameservers[:2])
        return shown + ("..." if len(self.nameservers) > 2 else "")

    @property
    def is_au_domain(self) -> bool:
        return self.domain_name.endswith(".au")

    @property
    def is_cancelled(self) -> bool:
        return self.lifecycle_status is LifecycleStatus.CANCELLED

    # ── Glue records ──────────────────────────────────────────────────

    @property
    def has_glue_records(self) -> bool:
        return bool(self.glue_records)

    @property
    def stale_glue_records(self) -> list[GlueRecord]:
        return [g for g in self.glue_records if g.is_stale]

    def get_glue_record(self, hostname: str) -> GlueRecord | None:
        hostname = hostname.lower()
        return next((g for g in self.glue_records if g.hostname == hostname), None)

    # ── Metadata ──────────────────────────────────────────────────────

    def get_meta(self, key: str, default: str | None = None) -> str | None:
        return self.metadata.get(key, default)

    def set_meta(self, key: str, value: str) -> None:
        self.metadata[key] = value
        self.touch()

    def delete_meta(self, key: str) -> bool:
        """Remove a metadata key. Returns False when the key was not set."""
        if key not in self.metadata:
            return False
        del self.metadata[key]
        self.touch()
        return True

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
