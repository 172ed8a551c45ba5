from .lifecycle import (
    LifecycleStatus,
    display_status_from_error,
    lifecycle_from_domain_status,
    lifecycle_from_error,
)
from .glue_record import GlueRecord
from .domain import Domain
from .domain_filter import DomainFilter
from .sync_result import FieldChange, GlueSyncResult, SyncOutcome, SyncReport

__all__ = [
    "LifecycleStatus",
    "display_status_from_error",
    "lifecycle_from_domain_status",
    "lifecycle_from_error",
    "GlueRecord",
    "Domain",
    "DomainFilter",
    "FieldChange",
    "GlueSyncResult",
    "SyncOutcome",
    "SyncReport",
]
