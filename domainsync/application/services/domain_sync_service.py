"""Domain Sync Service — reconciles the local domain cache against the registrar.

The registrar is the system of record. Each sync fetches its view of a
domain, upserts the cached copy keyed by domain name, reconciles the
domain's glue records and reports every place where the cache had drifted
from the registry (nameservers, auth code, lifecycle, stale glue).

Bulk syncs are sequential: one ``domainInfo`` plus one ``listAllHosts``
call per domain, no concurrency and no retries.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from domainsync.application.interfaces import DomainRepository, RegistrarClient
from domainsync.domain.entities import (
    Domain,
    FieldChange,
    GlueRecord,
    GlueSyncResult,
    SyncOutcome,
    SyncReport,
    display_status_from_error,
    lifecycle_from_domain_status,
    lifecycle_from_error,
)
from domainsync.domain.exceptions import EntityNotFoundError, RegistrarError
from domainsync.domain.validation import normalize_domain_name
from domainsync.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, SyncOutcome], None]

# dnsConfig values that give the registrar's DNS hosting / email forwarding.
_DNS_MANAGED_CONFIGS = frozenset({2, 4})
_EMAIL_FORWARDING_CONFIG = 2

_EMPTY_MARKERS = frozenset({"", "n/a", "null", "none"})
_FALSE_MARKERS = frozenset({"", "0", "false", "no", "off", "disabled", "n/a"})
_CONTACT_ROLES = ("registrant", "tech", "admin", "billing")

# Fields compared before/after a sync to surface divergence.
_TRACKED_FIELDS = (
    "nameservers",
    "domain_password",
    "lifecycle_status",
    "domain_status",
    "domain_expiry",
    "auto_renew",
    "id_protection_enabled",
)
_MASK = "******"


# ── Payload normalization ────────────────────────────────────────────

def _as_list(value: Any) -> list[Any]:
    """The registrar returns a bare value where a list holds one element."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_MARKERS
    return bool(value)


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return None if text.lower() in _EMPTY_MARKERS else text


def _parse_date(value: Any) -> datetime | None:
    """Lenient date parsing: blanks, N/A and unparsable values become None."""
    text = _optional_str(value)
    if text is None:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in ("%d/%m/%Y %H:%M:%S", "%d/%m/%Y", "%Y-%m-%d %H:%M"):
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        else:
            logger.debug("Unparsable registrar date: %r", text)
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _field(item: Any, key: str) -> Any:
    return item.get(key) if isinstance(item, dict) else None


def extract_nameservers(data: dict[str, Any]) -> list[str]:
    """Nameservers arrive as strings or ``{"nameServer": ...}`` objects."""
    nameservers = []
    for ns in _as_list(data.get("nameServers")):
        name = ns.get("nameServer") if isinstance(ns, dict) else ns
        if name:
            nameservers.append(normalize_domain_name(str(name)))
    return nameservers


def extract_hosts(data: dict[str, Any]) -> list[tuple[str, list[str]]]:
    """(hostname, ips) pairs from a listAllHosts payload."""
    hosts = []
    for host in _as_list(data.get("hosts")):
        hostname = _field(host, "hostName") if isinstance(host, dict) else host
        if not hostname:
            continue
        ips = [str(ip).strip() for ip in _as_list(_field(host, "ip")) if str(ip).strip()]
        hosts.append((normalize_domain_name(str(hostname)), ips))
    return hosts


def _snapshot(domain: Domain) -> dict[str, Any]:
    return {
        name: list(value) if isinstance(value, list) else value
        for name in _TRACKED_FIELDS
        for value in [getattr(domain, name)]
    }


def _diff(before: dict[str, Any], domain: Domain) -> list[FieldChange]:
    changes = []
    for name in _TRACKED_FIELDS:
        old, new = before[name], getattr(domain, name)
        if old == new:
            continue
        if name == "domain_password":
            old = _MASK if old else None
            new = _MASK if new else None
        elif name == "lifecycle_status":
            old, new = old.value, new.value
        changes.append(FieldChange(field=name, before=old, after=new))
    return changes


class DomainSyncService:
    """Application service that reconciles cached domains with the registrar."""

    def __init__(
        self,
        repository: DomainRepository,
        registrar: RegistrarClient,
    ) -> None:
        self._repository = repository
        self._registrar = registrar
        self._log = SyncLogger("DomainSyncService")

    # ── Single domain ────────────────────────────────────────────────

    async def sync_domain(self, domain_name: str) -> SyncOutcome:
        """Fetch one domain from the registrar and upsert the cached copy."""
        domain_name = normalize_domain_name(domain_name)
        existing = await self._repository.get_by_name(domain_name)

        if existing is not None and existing.is_cancelled:
            self._log.detail("Skipping cancelled domain", domain=domain_name)
            return SyncOutcome(domain=existing, skipped=True)

        domain = existing or Domain(domain_name=domain_name)
        before = _snapshot(domain) if existing is not None else None
        outcome = SyncOutcome(domain=domain, created=existing is None)
        now = datetime.now(timezone.utc)

        self._log.step_start(SyncStage.FETCH, domain_name)
        try:
            data = await self._registrar.get_domain_info(domain_name)
        except RegistrarError as exc:
            self._log.step_error(SyncStage.FETCH, domain_name, error=exc)
            domain.is_active = False
            domain.error_message = str(exc)
            domain.last_synced_at = now
            domain.touch()
            outcome.error = str(exc)
            outcome.domain = await self._repository.save(domain)
            return outcome

        status = str(data.get("status") or "")
        if status.startswith("ERR_"):
            message = str(data.get("errorMessage") or "")
            domain.domain_status = display_status_from_error(status, message)
            domain.lifecycle_status = lifecycle_from_error(status, message)
            domain.is_active = False
            domain.is_synced = True
            domain.error_message = message or status
            domain.last_synced_at = now
            outcome.error = domain.error_message
            self._log.step_error(SyncStage.ERROR, f"{domain_name}: {domain.error_message}")
        else:
            self._log.step_start(SyncStage.RECONCILE, domain_name)
            self._apply_domain_info(domain, data, now)
            try:
                outcome.glue = await self._reconcile_glue(domain)
            except RegistrarError as exc:
                logger.warning("Glue record sync failed for %s: %s", domain_name, exc)

        domain.touch()
        if before is not None:
            outcome.changes = _diff(before, domain)
            for change in outcome.changes:
                self._log.divergence(domain_name, change.field, change.before, change.after)

        outcome.domain = await self._repository.save(domain)
        self._log.step_complete(
            SyncStage.COMPLETE,
            domain_name,
            lifecycle=domain.lifecycle_status.value,
            glue=len(domain.glue_records),
        )
        return outcome

    @staticmethod
    def _apply_domain_info(domain: Domain, data: dict[str, Any], now: datetime) -> None:
        """Map a successful domainInfo payload onto the cached entity."""
        dns_config = _as_int(data.get("dnsConfig"))
        contacts = data.get("contacts") if isinstance(data.get("contacts"), dict) else {}

        domain.domain_roid = _optional_str(data.get("domainRoid"))
        domain.registry_id = _optional_str(data.get("registryID"))
        domain.domain_status = _optional_str(data.get("domain_status"))
        domain.lifecycle_status = lifecycle_from_domain_status(domain.domain_status)
        domain.domain_expiry = _parse_date(data.get("domain_expiry"))
        domain.domain_registered = _parse_date(data.get("domain_registered"))
        domain.created_date = _parse_date(data.get("createdDate"))
        domain.registrant = _optional_str(data.get("registrant"))
        domain.domain_password = _optional_str(data.get("domainPassword"))
        domain.nameservers = extract_nameservers(data)
        domain.ds_data = _as_list(data.get("DSData"))
        domain.dns_config_type = dns_config
        domain.categories = _as_list(data.get("categories"))
        domain.dns_management_enabled = dns_config in _DNS_MANAGED_CONFIGS
        domain.email_forwarding_enabled = dns_config == _EMAIL_FORWARDING_CONFIG
        domain.id_protection_enabled = _as_bool(data.get("idProtect"))
        domain.auto_renew = _as_bool(data.get("autoRenew"))
        domain.bulk_in_progress = _as_bool(data.get("bulkInProgress"))
        domain.icann_verification_date_end = _parse_date(data.get("icannVerificationDateEnd"))
        domain.icann_status = _optional_str(data.get("icannStatus"))
        domain.contacts = {role: contacts.get(role) for role in _CONTACT_ROLES}
        domain.raw_response = dict(data)
        domain.is_active = True
        domain.is_synced = True
        domain.error_message = None
        domain.last_synced_at = now

    # ── Glue records ─────────────────────────────────────────────────

    async def sync_glue_records(self, domain_name: str) -> GlueSyncResult:
        """Reconcile one cached domain's glue records with the registry."""
        domain_name = normalize_domain_name(domain_name)
        domain = await self._repository.get_by_name(domain_name)
        if domain is None:
            raise EntityNotFoundError("Domain", domain_name)

        result = await self._reconcile_glue(domain)
        domain.touch()
        await self._repository.save(domain)
        return result

    async def _reconcile_glue(self, domain: Domain) -> GlueSyncResult:
        """Apply the registry's host list to ``domain.glue_records`` in place.

        Stale records are neither updated nor deleted. Non-stale records the
        registry no longer lists are dropped.
        """
        self._log.step_start(SyncStage.GLUE, domain.domain_name)
        payload = await self._registrar.list_all_hosts(domain.domain_name)
        status = str(payload.get("status") or "")
        if status.startswith("ERR_"):
            raise RegistrarError("listAllHosts", str(payload.get("errorMessage") or status))
        hosts = extract_hosts(payload)
        result = GlueSyncResult()
        seen: set[str] = set()

        for hostname, ips in hosts:
            seen.add(hostname)
            record = domain.get_glue_record(hostname)
            if record is not None and record.is_stale:
                continue
            if record is None:
                record = GlueRecord(hostname=hostname, domain_id=domain.id)
                domain.glue_records.append(record)
                result.added.append(hostname)
            elif record.ip_addresses != ips:
                result.updated.append(hostname)
            record.mark_synced(ips)
            result.synced += 1

        for record in list(domain.glue_records):
            if not record.is_stale and record.hostname not in seen:
                domain.glue_records.remove(record)
                result.removed.append(record.hostname)

        result.stale = [g.hostname for g in domain.stale_glue_records]
        if result.stale:
            self._log.divergence(domain.domain_name, "stale_glue", None, result.stale)
        self._log.step_complete(
            SyncStage.GLUE,
            domain.domain_name,
            synced=result.synced,
            removed=len(result.removed),
        )
        return result

    # ── Bulk ─────────────────────────────────────────────────────────

    async def sync_all(self, progress: ProgressCallback | None = None) -> SyncReport:
        """Sync every active domain held at the registrar, one at a time."""
        with self._log.timed_step(SyncStage.BULK, "Syncing active domains"):
            listing = await self._registrar.list_active_domains()
            if "domainList" not in listing:
                message = listing.get("errorMessage") or "Unable to fetch domain list from Synergy Wholesale"
                raise RegistrarError("listDomains", str(message))

            entries = _as_list(listing["domainList"])
            report = SyncReport(total=len(entries))

            for index, entry in enumerate(entries, start=1):
                name = _field(entry, "domainName") if isinstance(entry, dict) else entry
                outcome = await self.sync_domain(str(name))
                report.record(outcome)
                if progress is not None:
                    progress(index, report.total, outcome)

            self._log.stats(
                total=report.total,
                synced=report.synced,
                errors=report.errors,
                diverged=len(report.diverged),
            )
        return report
