"""In-memory fakes for the repository and registrar ports."""

import copy
import fnmatch
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from domainsync.application.interfaces import DomainRepository, RegistrarClient
from domainsync.domain.entities import Domain, DomainFilter, LifecycleStatus
from domainsync.domain.exceptions import RegistrarError


class FakeDomainRepository(DomainRepository):
    """In-memory fake repository. Stores copies so callers cannot mutate state."""

    def __init__(self):
        self._domains: dict[str, Domain] = {}
        self._next_id = 1
        self.saves = 0

    def add(self, domain: Domain) -> Domain:
        domain.id = self._next_id
        self._next_id += 1
        self._domains[domain.domain_name] = copy.deepcopy(domain)
        return domain

    def stored(self, domain_name: str) -> Domain | None:
        return self._domains.get(domain_name)

    async def get_by_name(self, domain_name: str) -> Domain | None:
        domain = self._domains.get(domain_name)
        return copy.deepcopy(domain) if domain else None

    async def get_all(self, filters: DomainFilter) -> list[Domain]:
        domains = list(self._domains.values())
        pattern = filters.like_pattern
        if pattern:
            glob = pattern.replace("%", "*").lower()
            domains = [d for d in domains if fnmatch.fnmatch(d.domain_name, glob)]
        if filters.lifecycle_status is not None:
            domains = [d for d in domains if d.lifecycle_status == filters.lifecycle_status]
        if filters.has_glue:
            domains = [d for d in domains if d.glue_records]
        if filters.tld:
            domains = [d for d in domains if d.domain_name.endswith(f".{filters.tld.lstrip('.')}")]
        if filters.nameserver:
            domains = [d for d in domains if any(filters.nameserver in ns for ns in d.nameservers)]
        domains.sort(key=lambda d: d.domain_name)
        if filters.expiring_within_days is not None:
            cutoff = datetime.now(timezone.utc) + timedelta(days=filters.expiring_within_days)
            domains = [
                d
                for d in domains
                if d.lifecycle_status == LifecycleStatus.ACTIVE
                and d.domain_expiry is not None
                and d.domain_expiry <= cutoff
            ]
            domains.sort(key=lambda d: d.domain_expiry)
        end = None if filters.limit is None else filters.skip + filters.limit
        return [copy.deepcopy(d) for d in domains[filters.skip : end]]

    async def get_expiring_between(self, start: datetime, end: datetime) -> list[Domain]:
        domains = [
            d
            for d in self._domains.values()
            if d.lifecycle_status == LifecycleStatus.ACTIVE
            and d.domain_expiry is not None
            and start <= d.domain_expiry <= end
        ]
        return [copy.deepcopy(d) for d in sorted(domains, key=lambda d: d.domain_expiry)]

    async def save(self, domain: Domain) -> Domain:
        if domain.id is None:
            existing = self._domains.get(domain.domain_name)
            domain.id = existing.id if existing else self._next_id
            if existing is None:
                self._next_id += 1
        for record in domain.glue_records:
            record.domain_id = domain.id
        self._domains[domain.domain_name] = copy.deepcopy(domain)
        self.saves += 1
        return copy.deepcopy(domain)

    async def delete(self, domain_name: str) -> bool:
        return self._domains.pop(domain_name, None) is not None


class FakeRegistrar(RegistrarClient):
    """Scriptable registrar. Unscripted domains answer with ERR_DOMAININFO_FAILED."""

    def __init__(self):
        self.domain_info: dict[str, dict[str, Any] | Exception] = {}
        self.hosts: dict[str, dict[str, Any] | Exception] = {}
        self.domain_list: dict[str, Any] = {"status": "OK", "domainList": []}
        self.availability: dict[str, dict[str, Any]] = {}
        self.failures: dict[str, RegistrarError] = {}
        self.responses: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, tuple]] = []

    @property
    def registrar_name(self) -> str:
        return "fake"

    def called(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    def _mutate(self, method: str, *args: Any) -> dict[str, Any]:
        self.calls.append((method, args))
        if method in self.failures:
            raise self.failures[method]
        return self.responses.get(method, {"status": "OK"})

    async def list_domains(self, status: str | None = None) -> dict[str, Any]:
        self.calls.append(("list_domains", (status,)))
        return self.domain_list

    async def list_active_domains(self) -> dict[str, Any]:
        self.calls.append(("list_active_domains", ()))
        return self.domain_list

    async def get_domain_info(self, domain_name: str) -> dict[str, Any]:
        self.calls.append(("get_domain_info", (domain_name,)))
        info = self.domain_info.get(
            domain_name,
            {"status": "ERR_DOMAININFO_FAILED", "errorMessage": "Domain Info Failed - Unable to retrieve domain"},
        )
        if isinstance(info, Exception):
            raise info
        return info

    async def get_bulk_domain_info(self, domain_names: list[str]) -> dict[str, Any]:
        self.calls.append(("get_bulk_domain_info", (domain_names,)))
        return {"status": "OK", "domainList": [self.domain_info.get(n) for n in domain_names]}

    async def list_all_hosts(self, domain_name: str) -> dict[str, Any]:
        self.calls.append(("list_all_hosts", (domain_name,)))
        hosts = self.hosts.get(domain_name, {"status": "OK"})
        if isinstance(hosts, Exception):
            raise hosts
        return hosts

    async def get_nameservers(self, domain_name: str) -> list[str]:
        info = await self.get_domain_info(domain_name)
        return list(info.get("nameServers") or [])

    async def is_using_custom_nameservers(self, domain_name: str) -> bool:
        info = await self.get_domain_info(domain_name)
        return int(info.get("dnsConfig") or 0) == 1

    async def check_domain_availability(self, domain_name: str) -> dict[str, Any]:
        self.calls.append(("check_domain_availability", (domain_name,)))
        return self.availability.get(domain_name, {"available": True, "status": "AVAILABLE"})

    async def register_domain(
        self,
        domain_name: str,
        *,
        years: int = 1,
        auto_renew: bool = False,
        id_protect: bool = False,
        nameservers: list[str] | None = None,
    ) -> dict[str, Any]:
        return self._mutate("register_domain", domain_name, years, auto_renew, id_protect, nameservers)

    async def renew_domain(self, domain_name: str, years: int) -> dict[str, Any]:
        return self._mutate("renew_domain", domain_name, years)

    async def update_nameservers(self, domain_name: str, nameservers: list[str]) -> dict[str, Any]:
        return self._mutate("update_nameservers", domain_name, nameservers)

    async def add_child_host(self, domain_name: str, host: str, ips: list[str]) -> dict[str, Any]:
        return self._mutate("add_child_host", domain_name, host, ips)

    async def delete_child_host(self, domain_name: str, host: str) -> dict[str, Any]:
        return self._mutate("delete_child_host", domain_name, host)

    async def add_child_host_ip(self, domain_name: str, host: str, ip: str) -> dict[str, Any]:
        return self._mutate("add_child_host_ip", domain_name, host, ip)

    async def delete_child_host_ip(self, domain_name: str, host: str, ip: str) -> dict[str, Any]:
        return self._mutate("delete_child_host_ip", domain_name, host, ip)

    async def lock_domain(self, domain_name: str) -> dict[str, Any]:
        return self._mutate("lock_domain", domain_name)

    async def unlock_domain(self, domain_name: str) -> dict[str, Any]:
        return self._mutate("unlock_domain", domain_name)

    async def set_id_protection(self, domain_name: str, enabled: bool) -> dict[str, Any]:
        return self._mutate("set_id_protection", domain_name, enabled)

    async def set_auto_renew(self, domain_name: str, enabled: bool) -> dict[str, Any]:
        return self._mutate("set_auto_renew", domain_name, enabled)

    async def generate_auth_code(self, domain_name: str) -> dict[str, Any]:
        return self._mutate("generate_auth_code", domain_name)

    async def cancel_domain(self, domain_name: str) -> dict[str, Any]:
        return self._mutate("cancel_domain", domain_name)


def domain_info_payload(**overrides: Any) -> dict[str, Any]:
    """A successful domainInfo payload as the registrar returns it."""
    payload = {
        "status": "OK",
        "domain_status": "clientTransferProhibited",
        "domainRoid": "D123456-AU",
        "registryID": "REG-1",
        "domain_expiry": "2031-03-15 00:00:00",
        "domain_registered": "2021-03-15 00:00:00",
        "nameServers": ["ns1.netserva.org", "ns2.netserva.org"],
        "dnsConfig": "1",
        "domainPassword": "Auth#Code1",
        "autoRenew": "on",
        "idProtect": "Disabled",
        "categories": "Hosting",
        "contacts": {
            "registrant": {"firstname": "Ada"},
            "tech": {"firstname": "Tech"},
            "billing": None,
            "admin": {"firstname": "Admin"},
            "reseller": {"firstname": "ignored"},
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def repository() -> FakeDomainRepository:
    return FakeDomainRepository()


@pytest.fixture
def registrar() -> FakeRegistrar:
    return FakeRegistrar()


@pytest.fixture
def make_info():
    """Factory for successful domainInfo payloads."""
    return domain_info_payload
