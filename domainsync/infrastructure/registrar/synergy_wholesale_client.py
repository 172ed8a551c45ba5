"""Synergy Wholesale API client — implements the RegistrarClient interface.

Every registrar command is a JSON POST to ``{api_url}/{command}`` whose body
carries the reseller credentials merged with the command parameters. The
registrar answers with a JSON object holding a ``status`` field (``OK``…
or ``ERR_``…) and an optional ``errorMessage``.
"""

import logging
from typing import Any

import httpx

from domainsync.application.interfaces.registrar_client import RegistrarClient
from domainsync.domain.exceptions import RegistrarConfigurationError, RegistrarError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.synergywholesale.com/api"
ACTIVE_DOMAIN_STATUS = "clientTransferProhibited"
CUSTOM_NAMESERVERS_CONFIG = 1


class SynergyWholesaleClient(RegistrarClient):
    """Infrastructure adapter — connects to the Synergy Wholesale API.

    Pass ``http_client`` to reuse a connection pool (and in tests, a
    ``httpx.MockTransport``). Used as an async context manager the client
    keeps one pool open for the duration of a bulk sync.
    """

    def __init__(
        self,
        reseller_id: str,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not reseller_id or not api_key:
            raise RegistrarConfigurationError(
                "Synergy Wholesale credentials not configured "
                "(set SW_RESELLER_ID and SW_API_KEY)"
            )
        self._reseller_id = reseller_id
        self._api_key = api_key
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = False

    @property
    def registrar_name(self) -> str:
        return "synergy_wholesale"

    async def __aenter__(self) -> "SynergyWholesaleClient":
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_client = False

    # ── Transport ────────────────────────────────────────────────────

    def _build_payload(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "resellerID": self._reseller_id,
            "apiKey": self._api_key,
            **params,
        }

    async def _execute(self, command: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a command and return the decoded payload, errors included."""
        params = params or {}
        url = f"{self._api_url}/{command}"

        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        should_close = self._http_client is None

        try:
            response = await client.post(url, json=self._build_payload(params))
        except httpx.HTTPError as exc:
            logger.error("SW API transport error: %s (%s)", command, exc)
            raise RegistrarError(command, str(exc)) from exc
        finally:
            if should_close:
                await client.aclose()

        if not response.is_success:
            self._raise_registrar_error(command, response)

        try:
            data = response.json()
        except ValueError as exc:
            raise RegistrarError(command, "Invalid JSON in registrar response", response.status_code) from exc
        if not isinstance(data, dict):
            raise RegistrarError(command, "Unexpected registrar response shape", response.status_code)

        logger.debug("SW API call: %s params=%s status=%s", command, params, data.get("status"))
        return data

    async def _execute_checked(self, command: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a mutating command; an ERR_ status raises RegistrarError."""
        data = await self._execute(command, params)
        status = str(data.get("status", ""))
        if status.startswith("ERR_"):
            message = data.get("errorMessage") or status
            logger.error("SW API error: %s status=%s message=%s", command, status, message)
            raise RegistrarError(command, message)
        return data

    @staticmethod
    def _raise_registrar_error(command: str, response: httpx.Response) -> None:
        """Raise RegistrarError from a non-200 response."""
        try:
            data = response.json()
            message = data.get("errorMessage") or data.get("status") or response.text
        except Exception:
            message = response.text
        logger.error("SW API error: %s HTTP %d: %s", command, response.status_code, message)
        raise RegistrarError(command, message, response.status_code)

    # ── Informational ────────────────────────────────────────────────

    async def list_domains(self, status: str | None = None) -> dict[str, Any]:
        params = {"status": status} if status else {}
        return await self._execute("listDomains", params)

    async def list_active_domains(self) -> dict[str, Any]:
        """Filter at the API so transferred-away domains are never fetched."""
        return await self.list_domains(status=ACTIVE_DOMAIN_STATUS)

    async def get_domain_info(self, domain_name: str) -> dict[str, Any]:
        return await self._execute("domainInfo", {"domainName": domain_name})

    async def get_bulk_domain_info(self, domain_names: list[str]) -> dict[str, Any]:
        return await self._execute("bulkDomainInfo", {"domainList": list(domain_names)})

    async def list_all_hosts(self, domain_name: str) -> dict[str, Any]:
        return await self._execute("listAllHosts", {"domainName": domain_name})

    async def get_nameservers(self, domain_name: str) -> list[str]:
        info = await self.get_domain_info(domain_name)
        nameservers = info.get("nameServers") or []
        if not isinstance(nameservers, list):
            nameservers = [nameservers]
        return [ns["nameServer"] if isinstance(ns, dict) else str(ns) for ns in nameservers]

    async def is_using_custom_nameservers(self, domain_name: str) -> bool:
        info = await self.get_domain_info(domain_name)
        try:
            return int(info.get("dnsConfig") or 0) == CUSTOM_NAMESERVERS_CONFIG
        except (TypeError, ValueError):
            return False

    async def check_domain_availability(self, domain_name: str) -> dict[str, Any]:
        data = await self._execute_checked("checkDomain", {"domainName": domain_name})
        status = str(data.get("status", ""))
        available = data.get("available")
        if available is None:
            available = status.upper() == "AVAILABLE"
        result: dict[str, Any] = {"available": bool(available), "status": status}
        if data.get("price") is not None:
            result["price"] = data["price"]
        return result

    # ── Mutating ─────────────────────────────────────────────────────

    async def register_domain(
        self,
        domain_name: str,
        *,
        years: int = 1,
        auto_renew: bool = False,
        id_protect: bool = False,
        nameservers: list[str] | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "domainName": domain_name,
            "years": years,
            "autoRenew": auto_renew,
            "idProtect": id_protect,
        }
        if nameservers:
            params["nameServers"] = list(nameservers)
        return await self._execute_checked("domainRegister", params)

    async def renew_domain(self, domain_name: str, years: int) -> dict[str, Any]:
        return await self._execute_checked("renewDomain", {"domainName": domain_name, "years": years})

    async def update_nameservers(self, domain_name: str, nameservers: list[str]) -> dict[str, Any]:
        return await self._execute_checked(
            "updateNameServers",
            {"domainName": domain_name, "nameServers": list(nameservers)},
        )

    async def add_child_host(self, domain_name: str, host: str, ips: list[str]) -> dict[str, Any]:
        return await self._execute_checked(
            "addHost", {"domainName": domain_name, "host": host, "ips": list(ips)}
        )

    async def delete_child_host(self, domain_name: str, host: str) -> dict[str, Any]:
        return await self._execute_checked("deleteHost", {"domainName": domain_name, "host": host})

    async def add_child_host_ip(self, domain_name: str, host: str, ip: str) -> dict[str, Any]:
        return await self._execute_checked(
            "addHostIP", {"domainName": domain_name, "host": host, "ipAddress": ip}
        )

    async def delete_child_host_ip(self, domain_name: str, host: str, ip: str) -> dict[str, Any]:
        return await self._execute_checked(
            "deleteHostIP", {"domainName": domain_name, "host": host, "ipAddress": ip}
        )

    async def lock_domain(self, domain_name: str) -> dict[str, Any]:
        return await self._execute_checked("lockDomain", {"domainName": domain_name})

    async def unlock_domain(self, domain_name: str) -> dict[str, Any]:
        return await self._execute_checked("unlockDomain", {"domainName": domain_name})

    async def set_id_protection(self, domain_name: str, enabled: bool) -> dict[str, Any]:
        command = "enableIDProtection" if enabled else "disableIDProtection"
        return await self._execute_checked(command, {"domainName": domain_name})

    async def set_auto_renew(self, domain_name: str, enabled: bool) -> dict[str, Any]:
        command = "enableAutoRenewal" if enabled else "disableAutoRenewal"
        return await self._execute_checked(command, {"domainName": domain_name})

    async def generate_auth_code(self, domain_name: str) -> dict[str, Any]:
        return await self._execute_checked("generateAuthCode", {"domainName": domain_name})

    async def cancel_domain(self, domain_name: str) -> dict[str, Any]:
        return await self._execute_checked("cancelDomain", {"domainName": domain_name})
