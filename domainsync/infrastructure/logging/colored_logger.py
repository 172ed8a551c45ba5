"""Colored sync logger — ANSI-colored console logging for domain reconciliation.

Provides a SyncLogger with color-coded output per sync stage, making it
easy to follow a bulk sync of hundreds of domains in the terminal.

Color scheme:
    🔵 Blue    — Fetch from registrar
    🟡 Yellow  — Reconcile local cache
    🟣 Magenta — Glue records
    🟠 Cyan    — Divergence
    🔴 Red     — Errors
    ⚪ Gray    — Timing / Stats
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Sync Stage Definitions ───────────────────────────────────────────

class SyncStage:
    """Predefined sync stages with colors and icons."""

    FETCH = ("FETCH", _Colors.BLUE, "🌐")
    RECONCILE = ("RECONCILE", _Colors.YELLOW, "🔁")
    GLUE = ("GLUE", _Colors.MAGENTA, "🔗")
    DIVERGENCE = ("DIVERGED", _Colors.CYAN, "⚠️")
    BULK = ("BULK", _Colors.WHITE, "⚙️")
    ERROR = ("ERROR", _Colors.RED, "❌")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


# ── SyncLogger ───────────────────────────────────────────────────────

class SyncLogger:
    """Color-coded logger for the domain sync workflow.

    Usage:
        log = SyncLogger("DomainSyncService")
        log.step_start(SyncStage.FETCH, "example.com")
        log.detail("nameservers changed", before="ns1.a", after="ns1.b")
        log.step_complete(SyncStage.RECONCILE, "example.com")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a sync step with its stage color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += f" {_Colors.GRAY}({_format_kwargs(kwargs)}){_Colors.RESET}"
        self._logger.info(formatted)

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a sync step."""
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        if kwargs:
            formatted += f" {_Colors.GRAY}({_format_kwargs(kwargs)}){_Colors.RESET}"
        self._logger.info(formatted)

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a sync step error in red."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def divergence(self, domain_name: str, field: str, before: Any, after: Any) -> None:
        """Log a cached value that disagreed with the registry."""
        label, color, icon = SyncStage.DIVERGENCE
        self._logger.warning(
            f"{color}{icon} [{label}]{_Colors.RESET} {domain_name} "
            f"{_Colors.BOLD}{field}{_Colors.RESET}: "
            f"{_Colors.GRAY}{before!r} → {after!r}{_Colors.RESET}"
        )

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed)."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        if kwargs:
            formatted += f" {_Colors.DIM}({_format_kwargs(kwargs)}){_Colors.RESET}"
        self._logger.debug(formatted)

    def stats(self, **kwargs: Any) -> None:
        """Log statistics / timing information."""
        parts = [f"{_Colors.GRAY}{k}: {v}" for k, v in kwargs.items()]
        self._logger.info(f"   {_Colors.GRAY}📈 {' | '.join(parts)}{_Colors.RESET}")

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(SyncStage.BULK, "Syncing all domains"):
                report = await sync.sync_all()
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s", **kwargs)


def _format_kwargs(kwargs: dict[str, Any]) -> str:
    return " | ".join(f"{k}={v}" for k, v in kwargs.items())
