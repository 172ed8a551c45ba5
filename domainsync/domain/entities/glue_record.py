"""Domain entity — a child host (glue record) registered under a domain."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class GlueRecord:
    """Hostname plus IP set belonging to a domain.

    A stale record exists locally (and in the registrar's web UI) but not in
    the registry's authoritative host list. Reconciliation leaves stale
    records alone; they must be cleaned up by an operator.
    """

    hostname: str
    ip_addresses: list[str] = field(default_factory=list)
    id: int | None = None
    domain_id: int | None = None
    is_synced: bool = False
    is_stale: bool = False
    last_synced_at: datetime | None = None
    sync_error: str | None = None

    def mark_synced(self, ip_addresses: list[str]) -> None:
        """Record the registry's view of this host."""
        self.ip_addresses = list(ip_addresses)
        self.is_synced = True
        self.is_stale = False
        self.last_synced_at = datetime.now(timezone.utc)
        self.sync_error = None

    @property
    def status_label(self) -> str:
        if self.is_stale:
            return "STALE"
        return "Active" if self.is_synced else "Pending"
