"""Query object for listing cached domains."""

from dataclasses import dataclass

from .lifecycle import LifecycleStatus


@dataclass
class DomainFilter:
    """Filters applied when listing the local domain cache.

    ``search`` accepts ``*``/``%`` wildcards; without a wildcard it matches
    any name containing the text. ``lifecycle_status=None`` means all states.
    """

    search: str | None = None
    lifecycle_status: LifecycleStatus | None = LifecycleStatus.ACTIVE
    expiring_within_days: int | None = None
    has_glue: bool = False
    tld: str | None = None
    nameserver: str | None = None
    skip: int = 0
    limit: int | None = 25

    @property
    def like_pattern(self) -> str | None:
        """SQL LIKE pattern derived from ``search``."""
        if not self.search:
            return None
        pattern = self.search.replace("*", "%")
        if "%" not in pattern:
            pattern = f"%{pattern}%"
        return pattern
