"""Command-line entry point for coding class workstations.

Usage::

    coding-class create --name max
    coding-class list
    coding-class delete --name max --force
    python -m coding_class.cli ls
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from coding_class.config import Config
from coding_class.discovery import display_name, validate_identifier
from coding_class.errors import CodingClassError, ResourceConflictError
from coding_class.models import CreateResult, ManagedInstance
from coding_class.orchestrator import WorkstationOrchestrator
from coding_class.utils import (
    console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

PENDING_IP = "pending"
ASSIGNING_IP = "being assigned..."


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

def ask(question: str) -> str:
    """Ask a free-text question on the terminal."""
    return Prompt.ask(question, console=console).strip()


def confirm(question: str) -> bool:
    """Ask a yes/no question, defaulting to no."""
    return Confirm.ask(question, console=console, default=False)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

def _rdp_url(identifier: str, ip: str) -> str:
    return f"rdp://{identifier}@{ip}"


def print_create_report(result: CreateResult, admin_name: str) -> None:
    """Print the one-time credential report for a new workstation."""
    ip = result.instance.ipv4 or ASSIGNING_IP
    creds = result.credentials
    name = result.identifier
    admin = escape(admin_name)

    print_success("\nServer created!")
    print_summary_table(
        {
            "Server": result.instance.name,
            "ID": str(result.instance.id),
            "Status": result.instance.status,
            "IP": ip,
        },
        title="Workstation",
    )
    console.print("Installation is running (~10 minutes), the server reboots automatically.\n")
    console.print(
        Panel(
            f"[bold]Person ({name})[/bold]\n"
            f"  RDP:      open {_rdp_url(name, ip)}\n"
            f"  Password: {creds.mentee}\n\n"
            f"[bold]Admin ({admin})[/bold]\n"
            f"  SSH:      ssh {admin}@{ip}\n"
            f"  Password: {creds.admin}\n\n"
            f"[bold]Screen sharing (VNC)[/bold]\n"
            f"  VNC:      open vnc://{ip}:5900\n"
            f"  Password: {creds.vnc}",
            title="[bold]Credentials[/bold]",
            border_style="bright_cyan",
        )
    )
    print_warning("These passwords are shown only once. Store them now.")


def print_workstations(servers: list[ManagedInstance]) -> None:
    """Print the detailed list of owned workstations."""
    console.print("\n[bold]Coding class workstations:[/bold]\n")
    for server in servers:
        ip = server.ipv4 or PENDING_IP
        name = escape(display_name(server.name))
        console.print(f"  [bold]{name}[/bold]")
        console.print(f"    Status: {server.status}")
        console.print(f"    IP: {ip}")
        console.print(f"    RDP: open {_rdp_url(name, ip)}")
        console.print()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def cmd_create(orchestrator: WorkstationOrchestrator, name: str | None) -> int:
    if not name:
        name = ask("What is the person's name?")
    try:
        result = await orchestrator.create(name)
    except ResourceConflictError as exc:
        print_error(str(exc))
        if exc.existing is not None and exc.existing.ipv4:
            console.print(
                f"   RDP: open {_rdp_url(display_name(exc.existing.name), exc.existing.ipv4)}"
            )
        return exc.exit_code
    print_create_report(result, orchestrator.config.admin.name)
    return 0


async def cmd_list(orchestrator: WorkstationOrchestrator) -> int:
    servers = await orchestrator.list_workstations()
    if not servers:
        console.print("No coding class workstations found.")
        return 0
    print_workstations(servers)
    return 0


async def cmd_delete(orchestrator: WorkstationOrchestrator, name: str | None, force: bool) -> int:
    if name:
        name = validate_identifier(name)

    owned = await orchestrator.list_workstations()
    if not owned and not name:
        console.print("No workstations to delete.")
        return 0

    if not name:
        console.print("\nExisting workstations:")
        for server in owned:
            console.print(f"  - {escape(display_name(server.name))}")
        name = ask("\nWhich workstation should be deleted?")

    deleted = await orchestrator.delete(name, force=force, owned=owned)
    if deleted is None:
        console.print("Aborted.")
        return 0
    print_success(f"{deleted.name} deleted.")
    return 0


async def cmd_overview(orchestrator: WorkstationOrchestrator) -> int:
    """Default action when no subcommand is given."""
    console.print("[bold]Coding Class - Server Deployment[/bold]\n")

    servers = await orchestrator.list_workstations()
    if servers:
        console.print("Existing workstations:")
        for server in servers:
            ip = server.ipv4 or PENDING_IP
            console.print(f"  - {escape(display_name(server.name))} ({server.status}) - {ip}")
        console.print()

    console.print("Commands:")
    console.print("  coding-class create --name <name>  Create a new workstation")
    console.print("  coding-class delete --name <name>  Delete a workstation")
    console.print("  coding-class list                  Show all workstations")
    console.print()
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coding-class",
        description="Coding Class -- workstation deployment on Hetzner Cloud",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  coding-class create --name max\n"
            "  coding-class list\n"
            "  coding-class delete --name max --force\n"
        ),
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to config.json (default: $CODING_CLASS_CONFIG or ./config.json)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show progress details",
    )

    subparsers = parser.add_subparsers(dest="command")

    create = subparsers.add_parser("create", aliases=["new"], help="Create a new workstation")
    create.add_argument("--name", "-n", help="Person's name (lowercase letters)")

    subparsers.add_parser("list", aliases=["ls"], help="Show all workstations")

    delete = subparsers.add_parser("delete", aliases=["rm"], help="Delete a workstation")
    delete.add_argument("--name", "-n", help="Person's name")
    delete.add_argument("--force", "-f", action="store_true", help="Delete without confirmation")

    return parser


async def run(args: argparse.Namespace, orchestrator: WorkstationOrchestrator) -> int:
    if args.command in ("create", "new"):
        return await cmd_create(orchestrator, args.name)
    if args.command in ("list", "ls"):
        return await cmd_list(orchestrator)
    if args.command in ("delete", "rm"):
        return await cmd_delete(orchestrator, args.name, args.force)
    return await cmd_overview(orchestrator)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``coding-class`` and ``python -m coding_class.cli``."""
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env(args.config)
        config.ensure_ready()
        orchestrator = WorkstationOrchestrator(config, confirm=confirm, verbose=args.verbose)
        return asyncio.run(run(args, orchestrator))
    except CodingClassError as exc:
        print_error(str(exc))
        return exc.exit_code
    except KeyboardInterrupt:
        console.print("\nAborted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
