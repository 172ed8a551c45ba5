"""End-to-end tests for the /api/v1/domains endpoints.

The app runs against an in-memory database and a SynergyWholesaleClient
whose HTTP traffic is answered by ``httpx.MockTransport``.
"""

import json
from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from domainsync.infrastructure.database.session import get_db_session
from domainsync.infrastructure.dependencies import get_registrar_client
from domainsync.infrastructure.registrar import SynergyWholesaleClient
from domainsync.main import app

REGISTRY = {
    "listDomains": {"status": "OK", "domainList": [{"domainName": "netserva.org"}, {"domainName": "gone.com"}]},
    "domainInfo:netserva.org": {
        "status": "OK",
        "domain_status": "clientTransferProhibited",
        "domain_expiry": "2031-03-15 00:00:00",
        "nameServers": ["ns1.netserva.org", "ns2.netserva.org"],
        "dnsConfig": 1,
        "domainPassword": "Auth#Code1",
        "autoRenew": True,
    },
    "domainInfo:gone.com": {"status": "ERR_DOMAININFO_FAILED", "errorMessage": "Domain Does Not Exist"},
    "listAllHosts:netserva.org": {
        "status": "OK",
        "hosts": [{"hostName": "ns1.netserva.org", "ip": ["192.0.2.1"]}],
    },
    "listAllHosts:gone.com": {"status": "OK"},
}


def _registry_handler(request: httpx.Request) -> httpx.Response:
    command = request.url.path.rsplit("/", 1)[-1]
    body = json.loads(request.content)
    key = f"{command}:{body['domainName']}" if "domainName" in body else command
    if key not in REGISTRY:
        return httpx.Response(500, json={"errorMessage": f"unexpected {key}"})
    return httpx.Response(200, json=REGISTRY[key])


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncIterator[AsyncClient]:
    async def override_session():
        async with session_factory() as session:
            yield session
            await session.commit()

    async def override_registrar():
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(_registry_handler))
        yield SynergyWholesaleClient(
            reseller_id="1234",
            api_key="key",
            api_url="https://api.test/api",
            http_client=http_client,
        )
        await http_client.aclose()

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_registrar_client] = override_registrar
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_sync_all_then_list_and_get(client: AsyncClient):
    response = await client.post("/api/v1/domains/sync")
    assert response.status_code == 200
    report = response.json()
    assert report["total"] == 2
    assert report["synced"] == 1
    assert report["errors"] == 1

    listing = await client.get("/api/v1/domains")
    assert [d["domain_name"] for d in listing.json()] == ["netserva.org"]

    everything = await client.get("/api/v1/domains", params={"lifecycle_status": "all"})
    assert {d["domain_name"] for d in everything.json()} == {"netserva.org", "gone.com"}

    detail = await client.get("/api/v1/domains/netserva.org")
    assert detail.status_code == 200
    data = detail.json()
    assert data["nameservers"] == ["ns1.netserva.org", "ns2.netserva.org"]
    assert data["has_auth_code"] is True
    assert "domain_password" not in data
    assert data["glue_records"][0]["hostname"] == "ns1.netserva.org"

    gone = await client.get("/api/v1/domains/gone.com")
    assert gone.json()["lifecycle_status"] == "transferred_away"


@pytest.mark.asyncio
async def test_single_sync_is_idempotent(client: AsyncClient):
    first = await client.post("/api/v1/domains/netserva.org/sync")
    assert first.json()["created"] is True

    second = await client.post("/api/v1/domains/netserva.org/sync")
    assert second.status_code == 200
    assert second.json()["created"] is False
    assert second.json()["changes"] == []


@pytest.mark.asyncio
async def test_registrar_failure_maps_to_502(client: AsyncClient):
    await client.post("/api/v1/domains/netserva.org/sync")
    saved = REGISTRY.pop("listDomains")
    try:
        response = await client.post("/api/v1/domains/sync")
    finally:
        REGISTRY["listDomains"] = saved
    assert response.status_code == 502


@pytest.mark.asyncio
async def test_unknown_domain_is_404(client: AsyncClient):
    response = await client.get("/api/v1/domains/missing.org")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_lifecycle_filter_is_422(client: AsyncClient):
    response = await client.get("/api/v1/domains", params={"lifecycle_status": "bogus"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_glue_stale_flag_and_metadata(client: AsyncClient):
    await client.post("/api/v1/domains/netserva.org/sync")

    response = await client.patch(
        "/api/v1/domains/netserva.org/glue-records/ns1.netserva.org", json={"is_stale": True}
    )
    assert response.status_code == 200
    assert response.json()["glue_records"][0]["is_stale"] is True

    missing = await client.patch(
        "/api/v1/domains/netserva.org/glue-records/ns9.netserva.org", json={"is_stale": True}
    )
    assert missing.status_code == 404

    response = await client.put("/api/v1/domains/netserva.org/metadata/owner", json={"value": "ops"})
    assert response.json()["metadata"] == {"owner": "ops"}

    response = await client.delete("/api/v1/domains/netserva.org/metadata/owner")
    assert response.json()["metadata"] == {}


@pytest.mark.asyncio
async def test_delete_is_local_only(client: AsyncClient):
    await client.post("/api/v1/domains/netserva.org/sync")

    response = await client.delete("/api/v1/domains/netserva.org")
    assert response.status_code == 200
    assert response.json() == {"domain_name": "netserva.org", "glue_records": 1, "metadata": 0}

    assert (await client.get("/api/v1/domains/netserva.org")).status_code == 404
