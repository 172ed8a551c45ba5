"""Unit tests for the DomainService."""

from datetime import datetime, timedelta, timezone

import pytest

from domainsync.application.schemas import DomainRegistrationRequest
from domainsync.application.services import DomainService
from domainsync.domain.entities import Domain, DomainFilter, GlueRecord, LifecycleStatus
from domainsync.domain.exceptions import (
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    RegistrarConfigurationError,
    RegistrarError,
)


@pytest.fixture
def service(repository, registrar) -> DomainService:
    return DomainService(repository, registrar)


def _in_days(days: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days, hours=1)


# ── Queries ──


@pytest.mark.asyncio
async def test_get_domain_not_found(service: DomainService):
    with pytest.raises(EntityNotFoundError):
        await service.get_domain("missing.org")


@pytest.mark.asyncio
async def test_get_domain_is_case_insensitive(service, repository):
    repository.add(Domain(domain_name="netserva.org"))
    domain = await service.get_domain("NetServa.ORG.")
    assert domain.domain_name == "netserva.org"


@pytest.mark.asyncio
async def test_list_domains_filters(service, repository):
    repository.add(Domain(domain_name="alpha.com.au"))
    repository.add(Domain(domain_name="beta.com", glue_records=[GlueRecord(hostname="ns1.beta.com")]))
    repository.add(Domain(domain_name="gamma.com", lifecycle_status=LifecycleStatus.EXPIRED))

    assert [d.domain_name for d in await service.list_domains()] == ["alpha.com.au", "beta.com"]
    assert [d.domain_name for d in await service.list_domains(DomainFilter(tld="au"))] == ["alpha.com.au"]
    assert [d.domain_name for d in await service.list_domains(DomainFilter(has_glue=True))] == ["beta.com"]
    everything = await service.list_domains(DomainFilter(lifecycle_status=None))
    assert len(everything) == 3
    wildcard = await service.list_domains(DomainFilter(search="*.com", lifecycle_status=None))
    assert [d.domain_name for d in wildcard] == ["beta.com", "gamma.com"]


@pytest.mark.asyncio
async def test_find_returns_detail_for_exact_name(service, repository):
    repository.add(Domain(domain_name="netserva.org"))
    repository.add(Domain(domain_name="netserva.net"))

    exact = await service.find(DomainFilter(search="netserva.org"))
    assert isinstance(exact, Domain)

    listing = await service.find(DomainFilter(search="netserva"))
    assert [d.domain_name for d in listing] == ["netserva.net", "netserva.org"]

    missing = await service.find(DomainFilter(search="other.org"))
    assert missing == []


@pytest.mark.asyncio
async def test_expiring_soon(service, repository):
    repository.add(Domain(domain_name="soon.com", domain_expiry=_in_days(10)))
    repository.add(Domain(domain_name="later.com", domain_expiry=_in_days(90)))
    repository.add(Domain(domain_name="past.com", domain_expiry=_in_days(-5)))

    soon = await service.expiring_soon(30)

    assert [d.domain_name for d in soon] == ["soon.com"]


@pytest.mark.asyncio
async def test_using_nameservers(service, repository):
    repository.add(Domain(domain_name="a.com", nameservers=["ns1.netserva.org", "ns2.netserva.org"]))
    repository.add(Domain(domain_name="b.com", nameservers=["ns1.other.net", "ns2.other.net"]))

    matches = await service.using_nameservers("NetServa")

    assert [d.domain_name for d in matches] == ["a.com"]


# ── Registration ──


@pytest.mark.asyncio
async def test_register_creates_pending_record(service, repository, registrar):
    registrar.responses["register_domain"] = {"status": "OK", "orderID": "42"}

    result = await service.register_domain(
        DomainRegistrationRequest(
            domain_name="New-Site.com",
            years=2,
            nameservers=["ns1.netserva.org", "ns2.netserva.org"],
        )
    )

    assert result.order_id == "42"
    assert result.domain.lifecycle_status == LifecycleStatus.PENDING_REGISTRATION
    assert repository.stored("new-site.com") is not None
    assert registrar.called("register_domain") == [
        ("new-site.com", 2, False, False, ["ns1.netserva.org", "ns2.netserva.org"])
    ]


@pytest.mark.asyncio
async def test_register_with_sync_pulls_registrar_state(service, repository, registrar, make_info):
    registrar.domain_info["fresh.com"] = make_info()

    result = await service.register_domain(DomainRegistrationRequest(domain_name="fresh.com", sync=True))

    assert result.domain.lifecycle_status == LifecycleStatus.ACTIVE
    assert repository.stored("fresh.com").is_synced is True


@pytest.mark.asyncio
async def test_register_rejects_duplicate(service, repository, registrar):
    repository.add(Domain(domain_name="taken.com"))
    with pytest.raises(DuplicateEntityError):
        await service.register_domain(DomainRegistrationRequest(domain_name="taken.com"))
    assert registrar.called("register_domain") == []


@pytest.mark.asyncio
async def test_register_rejects_unavailable(service, registrar):
    registrar.availability["taken.com"] = {"available": False, "status": "UNAVAILABLE"}
    with pytest.raises(DomainValidationError, match="not available"):
        await service.register_domain(DomainRegistrationRequest(domain_name="taken.com"))


@pytest.mark.asyncio
async def test_register_rejects_invalid_name(service):
    with pytest.raises(DomainValidationError):
        await service.register_domain(DomainRegistrationRequest(domain_name="not_a_domain"))


@pytest.mark.asyncio
async def test_registrar_actions_need_credentials(repository):
    repository.add(Domain(domain_name="netserva.org"))
    service = DomainService(repository)

    with pytest.raises(RegistrarConfigurationError):
        await service.lock_domain("netserva.org")
    with pytest.raises(RegistrarConfigurationError):
        await service.sync("netserva.org")


# ── Registrar actions ──


@pytest.mark.asyncio
async def test_update_nameservers_remote_then_local(service, repository, registrar):
    repository.add(Domain(domain_name="netserva.org", nameservers=["ns1.old.net", "ns2.old.net"]))

    domain = await service.update_nameservers("netserva.org", ["NS1.new.net", "ns2.new.net", ""])

    assert domain.nameservers == ["ns1.new.net", "ns2.new.net"]
    assert registrar.called("update_nameservers") == [("netserva.org", ["ns1.new.net", "ns2.new.net"])]


@pytest.mark.asyncio
async def test_update_nameservers_needs_two(service, repository, registrar):
    repository.add(Domain(domain_name="netserva.org"))
    with pytest.raises(DomainValidationError):
        await service.update_nameservers("netserva.org", ["ns1.new.net"])
    assert registrar.called("update_nameservers") == []


@pytest.mark.asyncio
async def test_failed_remote_change_leaves_cache_untouched(service, repository, registrar):
    repository.add(Domain(domain_name="netserva.org", nameservers=["ns1.old.net", "ns2.old.net"]))
    registrar.failures["update_nameservers"] = RegistrarError("updateNameServers", "Domain locked")

    with pytest.raises(RegistrarError):
        await service.update_nameservers("netserva.org", ["ns1.new.net", "ns2.new.net"])

    assert repository.stored("netserva.org").nameservers == ["ns1.old.net", "ns2.old.net"]


@pytest.mark.asyncio
async def test_renew_validates_years(service, repository):
    repository.add(Domain(domain_name="netserva.org"))
    with pytest.raises(DomainValidationError):
        await service.renew_domain("netserva.org", 11)


@pytest.mark.asyncio
async def test_toggles_update_local_flags(service, repository, registrar):
    repository.add(Domain(domain_name="netserva.org"))

    await service.set_auto_renew("netserva.org", True)
    await service.set_id_protection("netserva.org", True)

    stored = repository.stored("netserva.org")
    assert stored.auto_renew is True
    assert stored.id_protection_enabled is True
    assert registrar.called("set_auto_renew") == [("netserva.org", True)]


@pytest.mark.asyncio
async def test_rotate_auth_code_stores_new_code(service, repository, registrar):
    repository.add(Domain(domain_name="netserva.org", domain_password="old"))
    registrar.responses["generate_auth_code"] = {"status": "OK", "authCode": "fresh-code"}

    code = await service.rotate_auth_code("netserva.org")

    assert code == "fresh-code"
    assert repository.stored("netserva.org").domain_password == "fresh-code"


# ── Glue records ──


@pytest.mark.asyncio
async def test_add_glue_record_then_reconciles(service, repository, registrar):
    repository.add(Domain(domain_name="netserva.org"))
    registrar.hosts["netserva.org"] = {
        "status": "OK",
        "hosts": [{"hostName": "ns1.netserva.org", "ip": ["192.0.2.1"]}],
    }

    result = await service.add_glue_record("netserva.org", "NS1.netserva.org", ["192.0.2.1"])

    assert result.added == ["ns1.netserva.org"]
    assert registrar.called("add_child_host") == [("netserva.org", "ns1.netserva.org", ["192.0.2.1"])]


@pytest.mark.parametrize(
    "hostname,ips",
    [
        ("ns1.other.org", ["192.0.2.1"]),
        ("ns1.netserva.org", []),
        ("ns1.netserva.org", ["999.1.1.1"]),
    ],
)
@pytest.mark.asyncio
async def test_add_glue_record_validation(service, repository, registrar, hostname, ips):
    repository.add(Domain(domain_name="netserva.org"))
    with pytest.raises(DomainValidationError):
        await service.add_glue_record("netserva.org", hostname, ips)
    assert registrar.called("add_child_host") == []


@pytest.mark.asyncio
async def test_delete_stale_glue_record_removes_local_copy(service, repository, registrar):
    repository.add(
        Domain(
            domain_name="netserva.org",
            glue_records=[GlueRecord(hostname="ns3.netserva.org", ip_addresses=["192.0.2.3"], is_stale=True)],
        )
    )

    await service.delete_glue_record("netserva.org", "ns3.netserva.org")

    assert repository.stored("netserva.org").glue_records == []
    assert registrar.called("delete_child_host") == [("netserva.org", "ns3.netserva.org")]


@pytest.mark.asyncio
async def test_mark_glue_stale_is_local_only(service, repository, registrar):
    repository.add(
        Domain(domain_name="netserva.org", glue_records=[GlueRecord(hostname="ns1.netserva.org")])
    )

    domain = await service.mark_glue_stale("netserva.org", "ns1.netserva.org")

    assert domain.glue_records[0].is_stale is True
    assert registrar.calls == []

    with pytest.raises(EntityNotFoundError):
        await service.mark_glue_stale("netserva.org", "ns9.netserva.org")


# ── Metadata & removal ──


@pytest.mark.asyncio
async def test_metadata_set_and_delete(service, repository):
    repository.add(Domain(domain_name="netserva.org"))

    domain = await service.set_metadata("netserva.org", "customer", "Acme")
    assert domain.get_meta("customer") == "Acme"

    domain = await service.delete_metadata("netserva.org", "customer")
    assert domain.metadata == {}

    with pytest.raises(EntityNotFoundError):
        await service.delete_metadata("netserva.org", "customer")


@pytest.mark.asyncio
async def test_delete_local_reports_counts(service, repository, registrar):
    repository.add(
        Domain(
            domain_name="netserva.org",
            glue_records=[GlueRecord(hostname="ns1.netserva.org")],
            metadata={"a": "1", "b": "2"},
        )
    )

    summary = await service.delete_local("netserva.org")

    assert (summary.glue_records, summary.metadata) == (1, 2)
    assert repository.stored("netserva.org") is None
    assert registrar.calls == []


@pytest.mark.asyncio
async def test_cancel_domain_keeps_record(service, repository):
    repository.add(Domain(domain_name="netserva.org"))

    domain = await service.cancel_domain("netserva.org")

    assert domain.lifecycle_status == LifecycleStatus.CANCELLED
    assert domain.is_active is False
    assert repository.stored("netserva.org").is_cancelled


@pytest.mark.asyncio
async def test_cancel_failure_does_not_modify_record(service, repository, registrar):
    repository.add(Domain(domain_name="netserva.org"))
    registrar.failures["cancel_domain"] = RegistrarError("cancelDomain", "Not permitted")

    with pytest.raises(RegistrarError):
        await service.cancel_domain("netserva.org")

    stored = repository.stored("netserva.org")
    assert stored.lifecycle_status == LifecycleStatus.ACTIVE
    assert stored.is_active is True
