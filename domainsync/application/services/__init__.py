from .domain_sync_service import DomainSyncService
from .domain_service import DomainService, RegistrationResult

__all__ = [
    "DomainService",
    "DomainSyncService",
    "RegistrationResult",
]
