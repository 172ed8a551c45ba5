"""Domain lifecycle states and the mapping rules from registrar statuses."""

from enum import Enum


class LifecycleStatus(str, Enum):
    """Lifecycle states of a registrar domain."""

    ACTIVE = "active"
    PENDING = "pending"
    PENDING_REGISTRATION = "pending_registration"
    PENDING_TRANSFER = "pending_transfer"
    REDEMPTION = "redemption"
    GRACE = "grace"
    EXPIRED = "expired"
    TRANSFERRED_AWAY = "transferred_away"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is LifecycleStatus.CANCELLED


# Order matters: the first matching substring wins.
_DOMAIN_STATUS_RULES: tuple[tuple[str, LifecycleStatus], ...] = (
    ("clientTransferProhibited", LifecycleStatus.ACTIVE),
    ("serverTransferProhibited", LifecycleStatus.ACTIVE),
    ("ok", LifecycleStatus.ACTIVE),
    ("pendingCreate", LifecycleStatus.PENDING_REGISTRATION),
    ("pendingTransfer", LifecycleStatus.PENDING_TRANSFER),
    ("pending", LifecycleStatus.PENDING),
    ("redemptionPeriod", LifecycleStatus.REDEMPTION),
    ("GracePeriod", LifecycleStatus.GRACE),
)

_ERROR_LIFECYCLE_RULES: tuple[tuple[str, LifecycleStatus], ...] = (
    ("Does Not Exist", LifecycleStatus.TRANSFERRED_AWAY),
    ("Expired", LifecycleStatus.EXPIRED),
    ("Pending", LifecycleStatus.PENDING_TRANSFER),
)

_ERROR_DISPLAY_RULES: tuple[tuple[str, str], ...] = (
    ("Does Not Exist", "Transferred Away"),
    ("Expired", "Expired"),
    ("Suspended", "Suspended"),
    ("Pending", "Pending Transfer"),
    ("Deleted", "Deleted"),
)


def lifecycle_from_domain_status(domain_status: str | None) -> LifecycleStatus:
    """Map the registry ``domain_status`` string (e.g. clientTransferProhibited)."""
    if not domain_status:
        return LifecycleStatus.ACTIVE
    for needle, lifecycle in _DOMAIN_STATUS_RULES:
        if needle in domain_status:
            return lifecycle
    return LifecycleStatus.ACTIVE


def lifecycle_from_error(status: str, error_message: str) -> LifecycleStatus:
    """Map a domainInfo ERR_ response to a lifecycle state."""
    for needle, lifecycle in _ERROR_LIFECYCLE_RULES:
        if needle in error_message:
            return lifecycle
    return LifecycleStatus.CANCELLED


def display_status_from_error(status: str, error_message: str) -> str:
    """Human-readable status matching what the registrar's web UI shows."""
    for needle, label in _ERROR_DISPLAY_RULES:
        if needle in error_message:
            return label
    if "ERR_DOMAININFO_FAILED" in status:
        return "Unavailable"
    return "Inactive"
