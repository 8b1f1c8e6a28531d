"""clinch CLI — the main entry point for the contract registry."""

import logging
from contextlib import contextmanager
from datetime import datetime

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from clinch import __version__
from clinch.config import load_config
from clinch.errors import ClinchError, ConfigError, NameConflictError

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


@contextmanager
def _handle_errors():
    """Report operation failures and exit non-zero."""
    try:
        yield
    except NameConflictError as e:
        console.print(f"\n[red]Error:[/] {e}")
        console.print("\nSuggestion: try a network-specific name:")
        console.print(
            f"  clinch add {e.suggested_name} {e.existing.address} {e.existing.network}"
        )
        raise SystemExit(1)
    except ClinchError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1)
    except OSError as e:
        console.print(f"[red]Error:[/] {e.strerror or e} ({e.filename or 'registry'})")
        console.print("  Check that you have write permission in this directory.")
        raise SystemExit(1)


def _registry(ctx):
    from clinch.registry.local_registry import ContractRegistry

    return ContractRegistry(ctx.obj)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--root",
    envvar="CLINCH_ROOT",
    default=None,
    type=click.Path(file_okay=False),
    help="Project root (default: current directory)",
)
@click.option("--verbose", "-V", is_flag=True, help="Show debug diagnostics")
@click.pass_context
def main(ctx, root, verbose: bool):
    """clinch — a local registry for deployed smart contracts.

    Track contract names, addresses, networks and ABIs, and sync them
    straight from Foundry broadcast files.
    """
    _setup_logging(verbose)
    try:
        ctx.obj = load_config(root)
    except ConfigError as e:
        raise click.ClickException(str(e))


# ── Add ──────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.argument("address")
@click.argument("network")
@click.option("--abi", "-a", "abi_path", default=None, help="Path to ABI file")
@click.option("--verified", "-v", is_flag=True, help="Mark contract as verified")
@click.pass_context
def add(ctx, name: str, address: str, network: str, abi_path, verified: bool):
    """Add a new contract to the registry."""
    from clinch.utils.validator import is_known_network

    if not is_known_network(network, extra=ctx.obj.networks):
        console.print(f"[yellow]![/] Network '{network}' is not in the known network list")

    with _handle_errors():
        result = _registry(ctx).add(
            name, address, network, verified=verified, abi_source=abi_path
        )

    record = result.record
    if result.is_alias:
        console.print("\n[bold]Alias detected[/]")
        console.print(
            f"  Address {record.address} is already registered as "
            f'"{result.alias_of.name}" on {record.network}.'
        )
        console.print(f'  "{record.name}" was registered as a secondary alias.')

    if result.abi_failed:
        console.print("[yellow]![/] ABI could not be captured; contract added without it.")
        console.print(f"  Add it later: clinch update {record.name} --abi <path>")
    elif record.abi:
        console.print(f"  ABI captured: {record.abi}")

    console.print(f'\n[green]Added[/] "{record.name}" to the registry.')


# ── List / Find ──────────────────────────────────────────────────────


def _print_records(records, title: str) -> None:
    table = Table(title=title)
    table.add_column("No.", style="dim", width=4)
    table.add_column("Name", style="cyan")
    table.add_column("Address")
    table.add_column("Network")
    table.add_column("Verified", justify="center")
    table.add_column("ABI")

    for i, record in enumerate(records):
        verified = "[green]Y[/]" if record.verified else "[red]N[/]"
        table.add_row(
            str(i + 1), record.name, record.address, record.network, verified, record.abi or "N/A"
        )

    console.print(table)


@main.command(name="list")
@click.option("--network", "-n", default="", help="Filter by network")
@click.option("--verified", "-v", is_flag=True, help="Only show verified contracts")
@click.option("--sort", "sort_by", type=click.Choice(["name", "date"]), default=None)
@click.option("--desc", is_flag=True, help="Sort in descending order")
@click.pass_context
def list_contracts(ctx, network: str, verified: bool, sort_by, desc: bool):
    """List all registered contracts."""
    from clinch.registry.models import SearchQuery

    reg = _registry(ctx)
    if not reg.list_all():
        console.print("[yellow]No contracts found.[/] Add some with: clinch add")
        return

    records = reg.search(
        SearchQuery(
            network=network,
            verified=True if verified else None,
            sort_by=sort_by or "",
            descending=desc,
        )
    )
    if not records:
        console.print("[yellow]No contracts match your filters.[/]")
        return

    _print_records(records, f"Registry ({len(records)} contracts)")


@main.command()
@click.argument("query", required=False, default="")
@click.option("--network", "-n", default="", help="Filter by network")
@click.option("--verified", "-v", is_flag=True, help="Only show verified contracts")
@click.option("--address", "-a", default=None, help="Exact address lookup (lists every alias)")
@click.pass_context
def find(ctx, query: str, network: str, verified: bool, address):
    """Search contracts by name or address."""
    from clinch.registry.models import SearchQuery

    reg = _registry(ctx)
    if address:
        records = reg.by_address(address, network=network)
        if verified:
            records = [r for r in records if r.verified]
    else:
        records = reg.search(
            SearchQuery(text=query, network=network, verified=True if verified else None)
        )
    if not records:
        console.print("[yellow]No contracts found matching your search.[/]")
        console.print("  Try a different term, remove filters, or run: clinch list")
        return

    _print_records(records, f"Found {len(records)} contract(s)")


# ── Show ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.pass_context
def show(ctx, name: str):
    """Show detailed information about a contract."""
    reg = _registry(ctx)
    with _handle_errors():
        record = reg.require(name)
        aliases = reg.aliases_of(name)

    lines = [
        f"Name:       {record.name}",
        f"Address:    {record.address}",
        f"Network:    {record.network}",
        f"Verified:   {'Yes' if record.verified else 'No'}",
    ]
    if record.abi:
        lines.append(f"ABI:        {record.abi}")
    if record.tx_hash:
        lines.append(f"Tx Hash:    {record.tx_hash}")
    if record.deployer:
        lines.append(f"Deployer:   {record.deployer}")
    if record.deployed_at:
        deployed = datetime.fromtimestamp(record.deployed_at).strftime("%Y-%m-%d %H:%M:%S")
        lines.append(f"Deployed:   {deployed}")
    if aliases:
        lines.append(f"Aliases:    {', '.join(a.name for a in aliases)}")

    console.print(Panel("\n".join(lines), title="Contract Details"))


# ── Update ───────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option("--name", "-n", "new_name", default=None, help="Rename the contract")
@click.option("--address", "-a", default=None, help="Update contract address")
@click.option("--network", default=None, help="Update network")
@click.option("--abi", "abi_path", default=None, help="Update ABI file")
@click.option("--verified/--unverify", "-v", default=None, help="Mark as verified or not")
@click.pass_context
def update(ctx, name: str, new_name, address, network, abi_path, verified):
    """Update an existing contract; only the given fields change."""
    with _handle_errors():
        record = _registry(ctx).update(
            name,
            new_name=new_name,
            address=address,
            network=network,
            verified=verified,
            abi_source=abi_path,
        )

    if abi_path and record.abi is None:
        console.print("[yellow]![/] ABI could not be captured; other changes were kept.")
    console.print(f'[green]Updated[/] contract "{record.name}".')


# ── Delete ───────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete(ctx, name: str, force: bool):
    """Delete a contract (and its ABI file) from the registry."""
    reg = _registry(ctx)
    with _handle_errors():
        reg.require(name)

    if not force and not click.confirm(f'Are you sure you want to delete "{name}"?'):
        console.print("Deletion cancelled")
        return

    with _handle_errors():
        record = reg.delete(name)
    console.print(f'[green]Deleted[/] contract "{record.name}".')


main.add_command(delete, name="remove")


# ── Sync ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--broadcast", "-b", default=None, help="Path to a Foundry broadcast JSON")
@click.option("--commit/--no-commit", default=False, help="Commit registry changes to Git")
@click.option("--push", is_flag=True, help="Also push the commit (or set git_push in clinch.yaml)")
@click.pass_context
def sync(ctx, broadcast, commit: bool, push: bool):
    """Sync contracts from a Foundry broadcast file."""
    from pathlib import Path

    from clinch.sync.foundry import find_latest_broadcast
    from clinch.sync.syncer import sync_from_foundry

    config = ctx.obj
    if broadcast:
        target = Path(broadcast)
        if not target.is_absolute():
            target = config.root / target
    else:
        target = find_latest_broadcast(config)

    if target is None:
        console.print("[red]Could not find a broadcast file automatically.[/]")
        console.print("  Specify one: clinch sync -b ./broadcast/Deploy.s.sol/31337/run-latest.json")
        raise SystemExit(1)

    console.print(f"\n[bold blue]clinch[/] — Syncing from: {target}\n")

    with _handle_errors():
        report = sync_from_foundry(_registry(ctx), target)

    if not report.candidates:
        console.print("[yellow]No new contracts found in this broadcast.[/]")
        return

    for record in report.synced:
        console.print(f"  [green]+[/] {record.name} ({record.network})")
    for record, target_record in report.aliases:
        console.print(f"    [dim]{record.name} is an alias of {target_record.name}[/]")
    for conflict in report.conflicts:
        console.print(
            f"  [yellow]![/] {conflict.record.name}: name already taken "
            f"(suggestion: {conflict.suggested_name})"
        )
    for record, reason in report.invalid:
        console.print(f"  [red]x[/] {record.name}: {reason}")

    console.print(f"\n{report.summary()}.")

    push = push or config.git_push
    if (commit or push) and report.synced:
        _commit(config, [r.name for r in report.synced], push)


def _commit(config, names: list[str], push: bool) -> None:
    from clinch.utils.git_ops import commit_registry

    result = commit_registry(config.root, config.registry_path, names, push=push)
    if result.committed:
        console.print(f"  [green]v[/] Committed: {result.message}")
    elif result.message:
        console.print(f"  {result.message}")
    if result.pushed:
        console.print(f"  [green]v[/] Pushed to {result.branch}")
    for error in result.errors:
        console.print(f"  [yellow]![/] {error}")
    if result.errors:
        console.print("  Registry changes are saved locally.")


# ── Init / Networks ──────────────────────────────────────────────────


@main.command()
@click.pass_context
def init(ctx):
    """Initialize the registry in the project root."""
    from clinch.registry.store import RegistryStore

    store = RegistryStore(ctx.obj)
    with _handle_errors():
        created = store.init()

    if created:
        console.print(f"[green]Registry initialized[/] at {ctx.obj.registry_path}")
    else:
        console.print("Registry is already initialized.")


@main.command()
@click.pass_context
def networks(ctx):
    """List all networks with registered contracts."""
    reg = _registry(ctx)
    stats = reg.networks()
    if not stats:
        console.print("[yellow]No contracts found.[/]")
        return

    table = Table(title="Networks")
    table.add_column("Network", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Verified", justify="right", style="green")

    for entry in stats.values():
        table.add_row(entry.network, str(entry.total), str(entry.verified))

    console.print(table)

    totals = reg.stats()
    console.print(
        f"Total: {totals.total} contract(s), {totals.verified} verified, "
        f"{totals.unverified} unverified"
    )


if __name__ == "__main__":
    main()
