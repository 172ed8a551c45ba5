"""Abstract registrar client interface — port for registrar API adapters."""

from abc import ABC, abstractmethod
from typing import Any


class RegistrarClient(ABC):
    """Port — what the application layer needs from a domain registrar.

    Informational calls return the registrar payload unchanged, including
    error statuses, so callers can categorize them. Mutating calls raise
    ``RegistrarError`` when the registrar rejects the command.
    """

    @property
    @abstractmethod
    def registrar_name(self) -> str:
        ...

    # ── Informational ────────────────────────────────────────────────

    @abstractmethod
    async def list_domains(self, status: str | None = None) -> dict[str, Any]:
        """List the domains held by this reseller account."""
        ...

    @abstractmethod
    async def list_active_domains(self) -> dict[str, Any]:
        """List only active (transfer-locked) domains."""
        ...

    @abstractmethod
    async def get_domain_info(self, domain_name: str) -> dict[str, Any]:
        """Detailed information about a single domain."""
        ...

    @abstractmethod
    async def get_bulk_domain_info(self, domain_names: list[str]) -> dict[str, Any]:
        ...

    @abstractmethod
    async def list_all_hosts(self, domain_name: str) -> dict[str, Any]:
        """List child hosts (glue records) registered under a domain."""
        ...

    @abstractmethod
    async def get_nameservers(self, domain_name: str) -> list[str]:
        ...

    @abstractmethod
    async def is_using_custom_nameservers(self, domain_name: str) -> bool:
        ...

    @abstractmethod
    async def check_domain_availability(self, domain_name: str) -> dict[str, Any]:
        """Returns a dict with at least ``available`` and ``status``."""
        ...

    # ── Mutating ─────────────────────────────────────────────────────

    @abstractmethod
    async def register_domain(
        self,
        domain_name: str,
        *,
        years: int = 1,
        auto_renew: bool = False,
        id_protect: bool = False,
        nameservers: list[str] | None = None,
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    async def renew_domain(self, domain_name: str, years: int) -> dict[str, Any]:
        ...

    @abstractmethod
    async def update_nameservers(
        self, domain_name: str, nameservers: list[str]
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    async def add_child_host(
        self, domain_name: str, host: str, ips: list[str]
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    async def delete_child_host(self, domain_name: str, host: str) -> dict[str, Any]:
        ...

    @abstractmethod
    async def add_child_host_ip(
        self, domain_name: str, host: str, ip: str
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    async def delete_child_host_ip(
        self, domain_name: str, host: str, ip: str
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    async def lock_domain(self, domain_name: str) -> dict[str, Any]:
        ...

    @abstractmethod
    async def unlock_domain(self, domain_name: str) -> dict[str, Any]:
        ...

    @abstractmethod
    async def set_id_protection(self, domain_name: str, enabled: bool) -> dict[str, Any]:
        ...

    @abstractmethod
    async def set_auto_renew(self, domain_name: str, enabled: bool) -> dict[str, Any]:
        ...

    @abstractmethod
    async def generate_auth_code(self, domain_name: str) -> dict[str, Any]:
        """Rotate the EPP auth code; the new code is returned as ``authCode``."""
        ...

    @abstractmethod
    async def cancel_domain(self, domain_name: str) -> dict[str, Any]:
        ...
