"""``domainsync`` command line interface.

Each command opens one database session and, when credentials are set, one
registrar connection pool, runs against ``DomainService`` and commits on
success. Domain errors are printed in red and exit with status 1.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from enum import Enum
from typing import TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from domainsync.application.schemas import DomainRegistrationRequest, DomainResponse
from domainsync.application.services import DomainService
from domainsync.config import get_settings
from domainsync.domain.entities import Domain, DomainFilter, LifecycleStatus, SyncOutcome
from domainsync.domain.exceptions import (
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    RegistrarConfigurationError,
    RegistrarError,
)
from domainsync.infrastructure.database.repositories import SQLAlchemyDomainRepository
from domainsync.infrastructure.database.session import create_tables, session_scope
from domainsync.infrastructure.dependencies import build_registrar_client
from domainsync.infrastructure.logging.log_config import setup_logging
from domainsync.presentation.cli.ui_components import (
    build_detail_view,
    build_domain_table,
    build_nameserver_table,
    build_sync_summary,
    outcome_lines,
    text_rows,
)

app = typer.Typer(
    no_args_is_help=True,
    help="Synergy Wholesale domain cache: show, sync, register and manage domains.",
)

_console = Console()

T = TypeVar("T")

_DOMAIN_ERRORS = (
    EntityNotFoundError,
    DuplicateEntityError,
    DomainValidationError,
    RegistrarError,
    RegistrarConfigurationError,
)


class ChangeAction(str, Enum):
    NS = "ns"
    RENEW = "renew"
    LOCK = "lock"
    UNLOCK = "unlock"
    ID_PROTECT = "id-protect"
    AUTO_RENEW = "auto-renew"
    AUTH_CODE = "auth-code"
    GLUE = "glue"
    METADATA = "metadata"


class GlueAction(str, Enum):
    SYNC = "sync"
    ADD = "add"
    DELETE = "delete"
    ADD_IP = "add-ip"
    REMOVE_IP = "remove-ip"
    STALE = "stale"
    UNSTALE = "unstale"


@asynccontextmanager
async def open_service() -> AsyncIterator[DomainService]:
    """DomainService bound to a fresh session and, if configured, the registrar."""
    await create_tables()
    registrar = build_registrar_client(get_settings())
    async with session_scope() as session:
        repository = SQLAlchemyDomainRepository(session)
        if registrar is None:
            yield DomainService(repository)
            return
        async with registrar:
            yield DomainService(repository, registrar)


def _run(action: Callable[[DomainService], Awaitable[T]]) -> T:
    """Run one unit of work against the service and map domain errors to exit 1."""

    async def runner() -> T:
        async with open_service() as service:
            return await action(service)

    try:
        return asyncio.run(runner())
    except _DOMAIN_ERRORS as exc:
        _console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)


def _lifecycle(value: str) -> LifecycleStatus | None:
    if value == "all":
        return None
    try:
        return LifecycleStatus(value)
    except ValueError:
        choices = ", ".join(s.value for s in LifecycleStatus)
        raise typer.BadParameter(f"expected one of: all, {choices}", param_hint="--status")


def _print_outcome(outcome: SyncOutcome) -> None:
    for line in outcome_lines(outcome):
        _console.print(line)


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Override the root log level"),
) -> None:
    setup_logging(level_override=log_level)


# ── show ──────────────────────────────────────────────────────────────


@app.command()
def show(
    search: str | None = typer.Argument(None, help="Domain name or pattern (* wildcard)"),
    status: str = typer.Option("active", "--status", help="Lifecycle status, or 'all'"),
    expiring: int | None = typer.Option(None, "--expiring", min=0, help="Expiring within N days"),
    glue: bool = typer.Option(False, "--glue", help="Only domains with glue records"),
    tld: str | None = typer.Option(None, "--tld", help="Filter by TLD"),
    limit: int = typer.Option(25, "--limit", min=1, help="Maximum rows"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
    as_text: bool = typer.Option(False, "--text", help="Print tab-separated rows"),
    ns: bool = typer.Option(False, "--ns", help="Show nameservers"),
) -> None:
    """Show one cached domain in detail, or list cached domains."""
    filters = DomainFilter(
        search=search,
        lifecycle_status=_lifecycle(status),
        expiring_within_days=expiring,
        has_glue=glue,
        tld=tld,
        limit=limit,
    )
    result = _run(lambda service: service.find(filters))
    warning_days = get_settings().expiry_warning_days

    if isinstance(result, Domain):
        if as_json:
            typer.echo(DomainResponse.from_entity(result).model_dump_json(indent=2))
        else:
            _console.print(build_detail_view(result, warning_days))
        return

    if as_json:
        payload = [DomainResponse.from_entity(d).model_dump(mode="json") for d in result]
        typer.echo(json.dumps(payload, indent=2))
        return
    if not result:
        _console.print("[yellow]No domains found[/yellow]")
        return
    if as_text:
        for row in text_rows(result):
            typer.echo(row)
    elif ns:
        _console.print(build_nameserver_table(result))
    else:
        _console.print(build_domain_table(result, warning_days))


# ── sync ──────────────────────────────────────────────────────────────


@app.command()
def sync(
    domain: str | None = typer.Argument(None, help="Sync a single domain"),
) -> None:
    """Refresh the cache from Synergy Wholesale and report divergence."""
    if domain:
        outcome = _run(lambda service: service.sync(domain))
        _print_outcome(outcome)
        if not outcome.ok and not outcome.skipped:
            raise typer.Exit(code=1)
        return

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=_console,
        transient=True,
    ) as progress:
        task = progress.add_task("Syncing domains", total=None)

        def on_progress(current: int, total: int, outcome: SyncOutcome) -> None:
            progress.update(task, completed=current, total=total, description=outcome.domain.domain_name)

        report = _run(lambda service: service.sync_all(progress=on_progress))

    _console.print(build_sync_summary(report))
    for outcome in report.outcomes:
        if outcome.error or outcome.has_divergence and not outcome.created:
            _print_outcome(outcome)
    for name, hosts in report.stale_glue.items():
        _console.print(f"[yellow]Warning:[/yellow] {name} has stale glue records: {', '.join(hosts)}")


# ── add ───────────────────────────────────────────────────────────────


@app.command()
def add(
    domain: str = typer.Argument(..., help="Domain name to register"),
    years: int = typer.Option(1, "--years", min=1, max=10, help="Registration period"),
    auto_renew: bool = typer.Option(False, "--auto-renew", help="Enable auto renewal"),
    id_protect: bool = typer.Option(False, "--id-protect", help="Enable ID protection"),
    nameservers: list[str] = typer.Option([], "--ns", help="Nameserver (repeat for each)"),
    sync_after: bool = typer.Option(False, "--sync", help="Sync from the registrar after registering"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Register a new domain at Synergy Wholesale."""
    try:
        request = DomainRegistrationRequest(
            domain_name=domain,
            years=years,
            auto_renew=auto_renew,
            id_protect=id_protect,
            nameservers=nameservers,
            sync=sync_after,
        )
    except ValidationError as exc:
        _console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    async def register(service: DomainService):
        if await service.exists(request.domain_name):
            raise DuplicateEntityError("Domain", "domain_name", request.domain_name.lower())
        availability = await service.check_availability(request.domain_name)
        if not availability.get("available"):
            raise DomainValidationError(
                f"Domain {request.domain_name} is not available: {availability.get('status', 'unknown')}"
            )
        price = availability.get("price")
        _console.print(
            f"[green]{request.domain_name} is available[/green]"
            + (f" (price: {price})" if price is not None else "")
        )
        if not yes and not typer.confirm(f"Register {request.domain_name} for {years} year(s)?"):
            return None
        return await service.register_domain(request, check_availability=False)

    result = _run(register)
    if result is None:
        _console.print("[yellow]Cancelled[/yellow]")
        return
    _console.print(f"[green]Registered {result.domain.domain_name}[/green]")
    if result.order_id:
        _console.print(f"Order ID: {result.order_id}")
    _console.print(f"Lifecycle: {result.domain.lifecycle_status.value}")


# ── change ────────────────────────────────────────────────────────────


@app.command()
def change(
    domain: str = typer.Argument(..., help="Domain name"),
    action: ChangeAction = typer.Option(..., "--action", "-a", help="What to change"),
    nameservers: list[str] = typer.Option([], "--ns", help="Nameserver (repeat for each)"),
    years: int = typer.Option(1, "--years", min=1, max=10, help="Renewal period"),
    auto_renew: bool | None = typer.Option(None, "--auto-renew/--no-auto-renew"),
    id_protect: bool | None = typer.Option(None, "--id-protect/--no-id-protect"),
    glue_action: GlueAction = typer.Option(GlueAction.SYNC, "--glue-action", help="Glue record operation"),
    hostname: str | None = typer.Option(None, "--hostname", help="Glue record hostname"),
    ips: list[str] = typer.Option([], "--ip", help="Glue record IP (repeat for each)"),
    key: str | None = typer.Option(None, "--key", help="Metadata key"),
    value: str | None = typer.Option(None, "--value", help="Metadata value"),
    delete_key: str | None = typer.Option(None, "--delete-key", help="Metadata key to remove"),
    sync_after: bool = typer.Option(False, "--sync", help="Sync from the registrar afterwards"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Change a domain at the registrar, or its local glue/metadata state."""

    def require_hostname() -> str:
        if not hostname:
            raise DomainValidationError("--hostname is required for this glue action")
        return hostname

    def require_ip() -> str:
        if len(ips) != 1:
            raise DomainValidationError("exactly one --ip is required for this glue action")
        return ips[0]

    async def apply(service: DomainService) -> str | None:
        name = (await service.get_domain(domain)).domain_name

        if action is ChangeAction.NS:
            updated = await service.update_nameservers(name, nameservers)
            message = f"Nameservers updated: {', '.join(updated.nameservers)}"
        elif action is ChangeAction.RENEW:
            if not yes and not typer.confirm(f"Renew {name} for {years} year(s)?"):
                return None
            await service.renew_domain(name, years)
            message = f"Renewed {name} for {years} year(s)"
        elif action is ChangeAction.LOCK:
            await service.lock_domain(name)
            message = f"Locked {name}"
        elif action is ChangeAction.UNLOCK:
            await service.unlock_domain(name)
            message = f"Unlocked {name}"
        elif action is ChangeAction.ID_PROTECT:
            if id_protect is None:
                raise DomainValidationError("--id-protect or --no-id-protect is required")
            await service.set_id_protection(name, id_protect)
            message = f"ID protection {'enabled' if id_protect else 'disabled'}"
        elif action is ChangeAction.AUTO_RENEW:
            if auto_renew is None:
                raise DomainValidationError("--auto-renew or --no-auto-renew is required")
            await service.set_auto_renew(name, auto_renew)
            message = f"Auto renewal {'enabled' if auto_renew else 'disabled'}"
        elif action is ChangeAction.AUTH_CODE:
            code = await service.rotate_auth_code(name)
            message = f"New auth code: {code}" if code else "Auth code regenerated"
        elif action is ChangeAction.GLUE:
            message = await apply_glue(service, name)
            if message is None:
                return None
        else:
            message = await apply_metadata(service, name)

        if sync_after:
            await service.sync_after(name)
            message += " (synced)"
        return message

    async def apply_glue(service: DomainService, name: str) -> str | None:
        if glue_action is GlueAction.SYNC:
            result = await service.sync_glue_records(name)
            message = f"Glue records synced: {result.synced}"
            if result.stale:
                message += f" ([yellow]stale: {', '.join(result.stale)}[/yellow])"
            return message
        if glue_action is GlueAction.ADD:
            host = require_hostname()
            await service.add_glue_record(name, host, ips)
            return f"Glue record {host} added"
        if glue_action is GlueAction.DELETE:
            host = require_hostname()
            if not yes and not typer.confirm(f"Delete glue record {host}?"):
                return None
            await service.delete_glue_record(name, host)
            return f"Glue record {host} deleted"
        if glue_action is GlueAction.ADD_IP:
            host, ip = require_hostname(), require_ip()
            await service.add_glue_ip(name, host, ip)
            return f"Added {ip} to {host}"
        if glue_action is GlueAction.REMOVE_IP:
            host, ip = require_hostname(), require_ip()
            await service.remove_glue_ip(name, host, ip)
            return f"Removed {ip} from {host}"
        stale = glue_action is GlueAction.STALE
        host = require_hostname()
        await service.mark_glue_stale(name, host, stale=stale)
        return f"Glue record {host} marked {'stale' if stale else 'active'}"

    async def apply_metadata(service: DomainService, name: str) -> str:
        if delete_key:
            await service.delete_metadata(name, delete_key)
            return f"Metadata '{delete_key}' removed"
        if key:
            if value is None:
                raise DomainValidationError("--value is required with --key")
            await service.set_metadata(name, key, value)
            return f"Metadata '{key}' set"
        current = (await service.get_domain(name)).metadata
        if not current:
            return "No metadata"
        return "\n".join(f"{k} = {v}" for k, v in sorted(current.items()))

    message = _run(apply)
    if message is None:
        _console.print("[yellow]Cancelled[/yellow]")
        return
    _console.print(f"[green]{message}[/green]")


# ── delete ────────────────────────────────────────────────────────────


@app.command()
def delete(
    domain: str = typer.Argument(..., help="Domain name"),
    local_only: bool = typer.Option(False, "--local-only", help="Only remove from the local cache"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Remove a domain from the cache, or cancel it at the registrar."""

    async def remove(service: DomainService):
        current = await service.get_domain(domain)
        name = current.domain_name

        if local_only:
            if not force and not typer.confirm(f"Remove {name} from the local cache?"):
                return None
            summary = await service.delete_local(name)
            return (
                f"Removed {summary.domain_name} from cache "
                f"({summary.glue_records} glue record(s), {summary.metadata} metadata key(s))"
            )

        _console.print(
            f"[bold red]This cancels {name} at Synergy Wholesale. It cannot be undone.[/bold red]"
        )
        if not force:
            typed = typer.prompt("Type the domain name to confirm")
            if typed.strip().lower() != name:
                raise DomainValidationError("Domain name did not match; nothing cancelled")
            if not typer.confirm("Are you absolutely sure?"):
                return None
        cancelled = await service.cancel_domain(name)
        return f"Cancelled {cancelled.domain_name} (kept in cache as {cancelled.lifecycle_status.value})"

    message = _run(remove)
    if message is None:
        _console.print("[yellow]Cancelled[/yellow]")
        return
    _console.print(f"[green]{message}[/green]")


# ── serve ─────────────────────────────────────────────────────────────


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8020, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("domainsync.main:app", host=host, port=port, reload=reload)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
