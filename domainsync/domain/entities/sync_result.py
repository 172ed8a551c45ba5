"""Value objects describing what a reconciliation run changed."""

from dataclasses import dataclass, field
from typing import Any

from .domain import Domain


@dataclass
class FieldChange:
    """One cached field whose value differed from the registry's."""

    field: str
    before: Any
    after: Any


@dataclass
class GlueSyncResult:
    """Outcome of reconciling a domain's glue records."""

    synced: int = 0
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    stale: list[str] = field(default_factory=list)


@dataclass
class SyncOutcome:
    """Result of syncing a single domain against the registrar."""

    domain: Domain
    created: bool = False
    skipped: bool = False
    changes: list[FieldChange] = field(default_factory=list)
    glue: GlueSyncResult = field(default_factory=GlueSyncResult)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.domain.is_active and self.error is None

    @property
    def nameserver_drift(self) -> FieldChange | None:
        return self._change("nameservers")

    @property
    def auth_code_rotated(self) -> bool:
        return self._change("domain_password") is not None

    @property
    def has_divergence(self) -> bool:
        return bool(
            self.changes
            or self.glue.added
            or self.glue.removed
            or self.glue.updated
            or self.glue.stale
        )

    def _change(self, name: str) -> FieldChange | None:
        return next((c for c in self.changes if c.field == name), None)


@dataclass
class SyncReport:
    """Aggregate result of a bulk sync."""

    total: int = 0
    synced: int = 0
    errors: int = 0
    skipped: int = 0
    outcomes: list[SyncOutcome] = field(default_factory=list)

    def record(self, outcome: SyncOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.skipped:
            self.skipped += 1
        elif outcome.domain.is_active:
            self.synced += 1
        else:
            self.errors += 1

    @property
    def diverged(self) -> list[SyncOutcome]:
        return [o for o in self.outcomes if o.has_divergence and not o.created]

    @property
    def stale_glue(self) -> dict[str, list[str]]:
        return {
            o.domain.domain_name: o.glue.stale for o in self.outcomes if o.glue.stale
        }
