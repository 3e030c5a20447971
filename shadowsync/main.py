import asyncio
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from shadowsync.config import SHADOW_DIR_PREFIX
from shadowsync.errors import ShadowSyncError
from shadowsync.workspace import SyncWorkspace

app = typer.Typer(
    name="shadowsync",
    help="shadowsync - Private shadow copies of Forc projects for language tooling",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()

HELP_TEXT = """
[bold cyan]shadowsync[/bold cyan] - shadow workspaces for Sway projects

[bold]COMMANDS[/bold]
  [cyan]mirror[/cyan]    Copy a project into a fresh shadow tree and print its path
  [cyan]watch[/cyan]     Mirror a project and keep its Forc.toml in sync until Ctrl+C
  [cyan]clean[/cyan]     Remove shadow trees left behind in the temp directory

[bold]EXAMPLES[/bold]
  shadowsync mirror ~/code/my-contract
  shadowsync watch ~/code/my-contract -v
  shadowsync clean --dry-run
"""


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def stray_shadow_dirs(temp_root: Path, prefix: str = SHADOW_DIR_PREFIX) -> list[Path]:
    if not temp_root.is_dir():
        return []
    return sorted(p for p in temp_root.iterdir() if p.is_dir() and p.name.startswith(prefix))


def _open_workspace(path: Path) -> SyncWorkspace:
    resolved = path.resolve()
    if not resolved.exists():
        console.print(f"[red]Error:[/red] Path {resolved} does not exist")
        raise typer.Exit(1)

    workspace = SyncWorkspace()
    try:
        workspace.create_from_workspace(resolved)
        workspace.resync()
    except ShadowSyncError as e:
        workspace.teardown()
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)
    return workspace


@app.command(help="Create a shadow tree for a project and print where it lives")
def mirror(
    path: Annotated[Path, typer.Argument(help="Path to the project (or any directory inside it)")] = Path("."),
) -> None:
    workspace = _open_workspace(path)
    console.print(f"[green]✓[/green] Mirrored {workspace.manifest_dir()}")
    console.print(str(workspace.shadow_dir()))


@app.command(help="Mirror a project and keep its manifest in sync until interrupted")
def watch(
    path: Annotated[Path, typer.Argument(help="Path to the project (or any directory inside it)")] = Path("."),
) -> None:
    workspace = _open_workspace(path)
    console.print(f"[bold blue]shadowsync[/bold blue] watching {workspace.manifest_dir()}")
    console.print(f"Shadow: {workspace.shadow_dir()}")
    console.print("Press Ctrl+C to stop\n")

    async def run_watch() -> None:
        watcher = await workspace.watch_and_sync()
        try:
            await watcher.wait_closed()
        finally:
            workspace.stop_watching()

    try:
        asyncio.run(run_watch())
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down...[/yellow]")
    finally:
        workspace.teardown()
    console.print("[green]Shadow tree removed[/green]")


@app.command(help="Remove shadow trees left behind in the system temp directory")
def clean(
    dry_run: Annotated[bool, typer.Option("--dry-run", "-n", help="Only list what would be removed")] = False,
    temp_dir: Annotated[Path | None, typer.Option("--temp-dir", help="Temp directory to scan")] = None,
) -> None:
    root = temp_dir or Path(tempfile.gettempdir())
    found = stray_shadow_dirs(root)
    if not found:
        console.print("[dim]No shadow trees found[/dim]")
        return

    table = Table(title="Shadow Trees")
    table.add_column("Directory", style="cyan")
    table.add_column("Projects", style="dim")
    table.add_column("Status", style="green")

    failed = 0
    for path in found:
        projects = ", ".join(sorted(p.name for p in path.iterdir() if p.is_dir()))
        if dry_run:
            table.add_row(str(path), projects, "[yellow]kept[/yellow]")
            continue
        try:
            shutil.rmtree(path)
            table.add_row(str(path), projects, "removed")
        except OSError as e:
            failed += 1
            table.add_row(str(path), projects, f"[red]{e.strerror or e}[/red]")

    console.print(table)
    if failed:
        raise typer.Exit(1)


@app.command(name="help", help="Show detailed help")
def show_help() -> None:
    console.print(Panel(HELP_TEXT, title="shadowsync Help", border_style="blue"))


if __name__ == "__main__":
    app()
