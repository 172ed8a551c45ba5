"""Abstract repository interface (port) for the local domain cache."""

from abc import ABC, abstractmethod
from datetime import datetime

from domainsync.domain.entities import Domain
from domainsync.domain.entities.domain_filter import DomainFilter


class DomainRepository(ABC):
    """Port for domain persistence — implemented in the infrastructure layer.

    Domains are keyed by ``domain_name``; ``save`` is an upsert that also
    replaces the domain's glue records and metadata with the entity's.
    """

    @abstractmethod
    async def get_by_name(self, domain_name: str) -> Domain | None:
        """Retrieve a single domain (with glue records and metadata)."""
        ...

    @abstractmethod
    async def get_all(self, filters: DomainFilter) -> list[Domain]:
        """Retrieve a filtered, paginated list of domains."""
        ...

    @abstractmethod
    async def get_expiring_between(
        self, start: datetime, end: datetime
    ) -> list[Domain]:
        """Active domains whose expiry falls within [start, end], soonest first."""
        ...

    @abstractmethod
    async def save(self, domain: Domain) -> Domain:
        """Insert or update a domain by name and return the stored state."""
        ...

    @abstractmethod
    async def delete(self, domain_name: str) -> bool:
        """Delete a domain and its children. Returns False if not found."""
        ...
