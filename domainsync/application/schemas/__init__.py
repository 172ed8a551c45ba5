from .domain import (
    DeletionSummary,
    DomainRegistrationRequest,
    DomainResponse,
    FieldChangeResponse,
    GlueRecordResponse,
    GlueRecordUpdate,
    MetadataValue,
    SyncOutcomeResponse,
    SyncReportResponse,
)

__all__ = [
    "DeletionSummary",
    "DomainRegistrationRequest",
    "DomainResponse",
    "FieldChangeResponse",
    "GlueRecordResponse",
    "GlueRecordUpdate",
    "MetadataValue",
    "SyncOutcomeResponse",
    "SyncReportResponse",
]
