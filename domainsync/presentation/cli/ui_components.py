"""Rich renderables for the CLI.

Kept apart from the commands so the list, nameserver and detail views can
be reused by ``show``, ``sync`` and ``change``.
"""

from datetime import datetime

from rich.console import Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from domainsync.domain.entities import Domain, SyncOutcome, SyncReport

_MAX_NS_COLUMNS = 3


def _date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value else "N/A"


def days_label(domain: Domain) -> str:
    days = domain.days_until_expiry()
    if days is None:
        return "N/A"
    return "EXPIRED" if days < 0 else str(days)


def status_label(domain: Domain) -> str:
    return domain.lifecycle_status.value


def build_domain_table(domains: list[Domain], warning_days: int = 30) -> Table:
    """List view: one row per cached domain."""
    table = Table(title=f"Domains ({len(domains)})")
    table.add_column("Domain", style="cyan", no_wrap=True)
    table.add_column("Expiry", style="white")
    table.add_column("Days", justify="right")
    table.add_column("Renew", justify="center")
    table.add_column("Glue", justify="right")
    table.add_column("Status", style="dim")

    for domain in domains:
        days = domain.days_until_expiry()
        if days is not None and days < 0:
            days_style = "bold red"
        elif domain.is_expiring_soon(warning_days):
            days_style = "yellow"
        else:
            days_style = "green"
        glue = str(len(domain.glue_records))
        if domain.stale_glue_records:
            glue += "!"
        table.add_row(
            domain.domain_name,
            _date(domain.domain_expiry),
            Text(days_label(domain), style=days_style),
            "Yes" if domain.auto_renew else "No",
            glue,
            escape(status_label(domain)),
        )
    return table


def build_nameserver_table(domains: list[Domain]) -> Table:
    table = Table(title="Nameservers")
    table.add_column("Domain", style="cyan", no_wrap=True)
    for index in range(1, _MAX_NS_COLUMNS + 1):
        table.add_column(f"NS{index}", style="white")

    for domain in domains:
        nameservers = domain.nameservers[:_MAX_NS_COLUMNS]
        padded = nameservers + [""] * (_MAX_NS_COLUMNS - len(nameservers))
        table.add_row(domain.domain_name, *padded)
    return table


def text_rows(domains: list[Domain]) -> list[str]:
    """Tab-separated rows for piping into other tools."""
    return [
        "\t".join(
            [
                domain.domain_name,
                _date(domain.domain_expiry),
                days_label(domain),
                "yes" if domain.auto_renew else "no",
                str(len(domain.glue_records)),
                status_label(domain),
            ]
        )
        for domain in domains
    ]


def build_glue_table(domain: Domain) -> Table:
    table = Table(title=f"Glue records ({len(domain.glue_records)})")
    table.add_column("Hostname", style="cyan", no_wrap=True)
    table.add_column("IP addresses", style="white")
    table.add_column("Status")
    table.add_column("Last synced", style="dim")
    for record in domain.glue_records:
        style = "bold red" if record.is_stale else "green" if record.is_synced else "yellow"
        table.add_row(
            record.hostname,
            ", ".join(record.ip_addresses) or "-",
            Text(record.status_label, style=style),
            record.last_synced_at.strftime("%Y-%m-%d %H:%M") if record.last_synced_at else "never",
        )
    return table


def build_detail_view(domain: Domain, warning_days: int = 30) -> Group:
    """Detail view for a single domain, with glue records and metadata."""
    info = Table.grid(padding=(0, 2))
    info.add_column(style="bold")
    info.add_column()

    days = days_label(domain)
    if days == "EXPIRED":
        days = "[bold red]EXPIRED[/bold red]"
    elif domain.is_expiring_soon(warning_days):
        days = f"[yellow]{days}[/yellow]"

    info.add_row("Status", escape(domain.domain_status or "N/A"))
    info.add_row("Lifecycle", domain.lifecycle_status.value)
    info.add_row("Expiry", f"{_date(domain.domain_expiry)} ({days} days)")
    info.add_row("Registered", _date(domain.domain_registered))
    info.add_row("Registrant", escape(domain.registrant or "N/A"))
    info.add_row("Nameservers", escape(", ".join(domain.nameservers) or "N/A"))
    info.add_row("Auto renew", "Yes" if domain.auto_renew else "No")
    info.add_row("ID protection", "Yes" if domain.id_protection_enabled else "No")
    info.add_row("DNS config", str(domain.dns_config_type) if domain.dns_config_type is not None else "N/A")
    info.add_row("Auth code", "set" if domain.domain_password else "not cached")
    info.add_row("Last synced", domain.last_synced_at.strftime("%Y-%m-%d %H:%M") if domain.last_synced_at else "never")
    if domain.error_message:
        info.add_row("Error", f"[red]{escape(domain.error_message)}[/red]")

    parts: list = [Panel(info, title=f"[bold cyan]{domain.domain_name}[/bold cyan]", border_style="cyan")]

    if domain.glue_records:
        parts.append(build_glue_table(domain))
        stale = domain.stale_glue_records
        if stale:
            names = ", ".join(g.hostname for g in stale)
            parts.append(
                Text(
                    f"Warning: {len(stale)} stale glue record(s) no longer at the registry: {names}. "
                    "Remove them in the registrar web UI, then clear the flag.",
                    style="yellow",
                )
            )

    if domain.metadata:
        meta = Table(title="Metadata")
        meta.add_column("Key", style="cyan")
        meta.add_column("Value")
        for key, value in sorted(domain.metadata.items()):
            meta.add_row(escape(key), escape(value))
        parts.append(meta)

    return Group(*parts)


def outcome_lines(outcome: SyncOutcome) -> list[str]:
    """Markup lines describing what one sync changed."""
    name = outcome.domain.domain_name
    if outcome.skipped:
        return [f"[dim]{name}: skipped (cancelled)[/dim]"]
    if outcome.error:
        head = f"[red]{name}: {escape(outcome.error)}[/red]"
    elif outcome.created:
        head = f"[green]{name}: added to cache[/green]"
    else:
        head = f"[green]{name}: synced[/green]"

    lines = [head]
    for change in outcome.changes:
        label = {
            "nameservers": "nameserver drift",
            "domain_password": "auth code rotated",
        }.get(change.field, change.field)
        lines.append(f"  [yellow]{label}:[/yellow] {escape(str(change.before))} -> {escape(str(change.after))}")
    glue = outcome.glue
    if glue.added:
        lines.append(f"  glue added: {', '.join(glue.added)}")
    if glue.updated:
        lines.append(f"  glue updated: {', '.join(glue.updated)}")
    if glue.removed:
        lines.append(f"  glue removed: {', '.join(glue.removed)}")
    if glue.stale:
        lines.append(f"  [bold red]stale glue:[/bold red] {', '.join(glue.stale)}")
    return lines


def build_sync_summary(report: SyncReport) -> Table:
    table = Table(title="Sync summary")
    table.add_column("Total", justify="right")
    table.add_column("Synced", justify="right", style="green")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Skipped", justify="right", style="dim")
    table.add_column("Diverged", justify="right", style="yellow")
    table.add_row(
        str(report.total),
        str(report.synced),
        str(report.errors),
        str(report.skipped),
        str(len(report.diverged)),
    )
    return table
