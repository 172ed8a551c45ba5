from .domain_models import DomainMetadataModel, DomainModel, GlueRecordModel

__all__ = [
    "DomainModel",
    "GlueRecordModel",
    "DomainMetadataModel",
]
