"""Validation rules for operator input — pure functions, no I/O."""

import ipaddress
import re

from domainsync.domain.exceptions import DomainValidationError

MIN_NAMESERVERS = 2
MAX_NAMESERVERS = 13
MIN_YEARS = 1
MAX_YEARS = 10

_DOMAIN_PATTERN = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,}$",
    re.IGNORECASE,
)
# Characters that turn a lookup into a pattern search.
_PATTERN_CHARS = re.compile(r"[*\[\]^$%]")


def normalize_domain_name(name: str) -> str:
    """Domain names are case-insensitive; the cache stores them lower-case."""
    return name.strip().lower().rstrip(".")


def is_valid_domain_name(name: str) -> bool:
    return bool(_DOMAIN_PATTERN.match(name))


def looks_like_domain_name(search: str) -> bool:
    """True when a search string names one domain rather than a pattern."""
    return "." in search and not _PATTERN_CHARS.search(search)


def validate_years(years: int) -> int:
    if not MIN_YEARS <= years <= MAX_YEARS:
        raise DomainValidationError(f"Years must be between {MIN_YEARS} and {MAX_YEARS}")
    return years


def validate_nameservers(nameservers: list[str]) -> list[str]:
    cleaned = [normalize_domain_name(ns) for ns in nameservers if ns and ns.strip()]
    if not cleaned:
        raise DomainValidationError("No nameservers provided")
    if len(cleaned) < MIN_NAMESERVERS:
        raise DomainValidationError(f"At least {MIN_NAMESERVERS} nameservers required")
    if len(cleaned) > MAX_NAMESERVERS:
        raise DomainValidationError(f"At most {MAX_NAMESERVERS} nameservers allowed")
    invalid = [ns for ns in cleaned if not is_valid_domain_name(ns)]
    if invalid:
        raise DomainValidationError(f"Invalid nameserver: {', '.join(invalid)}")
    return cleaned


def validate_ip_addresses(ips: list[str]) -> list[str]:
    cleaned = [ip.strip() for ip in ips if ip and ip.strip()]
    if not cleaned:
        raise DomainValidationError("At least one IP address required")
    for ip in cleaned:
        try:
            ipaddress.ip_address(ip)
        except ValueError:
            raise DomainValidationError(f"Invalid IP address: {ip}") from None
    return cleaned


def validate_glue_hostname(hostname: str, domain_name: str) -> str:
    """A glue record must name a host inside the domain it is registered under."""
    host = normalize_domain_name(hostname)
    if not host.endswith(f".{domain_name}") or not is_valid_domain_name(host):
        raise DomainValidationError(
            f"Glue hostname {host!r} must be a valid host within {domain_name}"
        )
    return host
