"""CLI for Tree Sync."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import TREESYNC_DIR, __version__
from .config import SyncConfig, get_treesync_dir, load_config, save_config
from .errors import MalformedTreeError, TreeSyncError
from .hashlist import build_hashlist, contains
from .pack import UpdatePack, apply_update_pack, make_update_pack, verify_pack
from .tree import DirNode
from .validation import CheckMode, check_case_insensitive_duplicates, check_tree_names_legal

console = Console()
error_console = Console(stderr=True)


def get_project_root() -> Path:
    """Get the project root directory (current working directory)."""
    return Path.cwd()


def setup_logging(level: str) -> None:
    """Route library log records through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedTreeError(f"{path} is not valid JSON: {e}") from e
    except RecursionError as e:
        raise MalformedTreeError(f"{path} is nested too deeply to parse") from e


def write_json(data: Any, output: Path | None) -> None:
    """Write *data* to *output*, or to stdout when no file is given."""
    text = json.dumps(data, indent=2)
    if output is None:
        click.echo(text)
    else:
        output.write_text(text + "\n")


def load_tree(path: Path, config: SyncConfig, require_payload: bool = True) -> DirNode:
    """Load a tree document and enforce the configured depth limit."""
    data = read_json(path)
    try:
        tree = DirNode.from_dict(data, require_payload=require_payload)
        depth = tree.depth()
    except RecursionError as e:
        raise MalformedTreeError(f"{path} is nested too deeply to load") from e
    if depth > config.max_depth:
        raise MalformedTreeError(
            f"{path} is nested deeper than max_depth={config.max_depth}"
        )
    return tree


def _count_files(tree: DirNode) -> int:
    return sum(1 for _ in tree.iter_files())


@click.group()
@click.version_option(version=__version__, prog_name="treesync")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Tree Sync - Content-addressed directory tree synchronization."""
    config = load_config(get_project_root())
    setup_logging("debug" if verbose else config.log_level)
    ctx.obj = config


@main.command()
@click.option(
    "--digest",
    type=click.Choice(["md5", "sha256"]),
    default="md5",
    help="Digest algorithm for file contents",
)
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(digest: str, force: bool) -> None:
    """Initialize treesync in the current project."""
    project_root = get_project_root()
    treesync_dir = get_treesync_dir(project_root)

    if treesync_dir.exists() and not force:
        error_console.print(
            f"[yellow]Warning:[/yellow] {TREESYNC_DIR}/ already exists. Use --force to reinitialize."
        )
        sys.exit(1)

    save_config(SyncConfig(digest_algorithm=digest), project_root)

    console.print(
        Panel(
            f"[green]Initialized Tree Sync[/green]\n\n"
            f"Digest algorithm: [bold]{digest}[/bold]\n"
            f"Config directory: [dim]{treesync_dir}[/dim]",
            title="treesync init",
        )
    )


@main.command()
@click.argument("tree_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--collect-all", is_flag=True, help="Report every violation instead of the first")
@click.option("--no-duplicates", is_flag=True, help="Skip the case-insensitive duplicate check")
@click.pass_obj
def check(config: SyncConfig, tree_path: Path, collect_all: bool, no_duplicates: bool) -> None:
    """Check that every name in a tree is safe to materialize."""
    mode = CheckMode.COLLECT_ALL if collect_all else config.check_mode
    try:
        tree = load_tree(tree_path, config, require_payload=False)
    except TreeSyncError as e:
        fail(str(e))

    results = [("Illegal name", check_tree_names_legal(tree, mode))]
    if config.check_duplicates and not no_duplicates:
        results.append(("Case duplicate", check_case_insensitive_duplicates(tree, mode)))

    if all(result.ok for _, result in results):
        console.print("[green]All names are legal.[/green]")
        return

    table = Table(title="Name Violations")
    table.add_column("Problem", style="cyan")
    table.add_column("Path")
    for label, result in results:
        for path in result.violations:
            table.add_row(label, path)
    console.print(table)
    sys.exit(1)


@main.command()
@click.argument("tree_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def hashlist(config: SyncConfig, tree_path: Path, output: Path | None) -> None:
    """Write the name and digest projection of a tree."""
    try:
        tree = load_tree(tree_path, config)
        result = build_hashlist(tree, config.digest)
    except TreeSyncError as e:
        fail(str(e))

    write_json(result.to_dict(), output)
    if output is not None:
        console.print(f"[green]Wrote hashlist of {_count_files(result)} files to {output}[/green]")


@main.command("contains")
@click.argument("tree_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("hashlist_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def contains_command(config: SyncConfig, tree_path: Path, hashlist_path: Path) -> None:
    """Check whether a tree already holds every file of a hashlist."""
    try:
        tree = load_tree(tree_path, config, require_payload=False)
        candidate = load_tree(hashlist_path, config)
        contained = contains(tree, candidate, config.digest)
    except TreeSyncError as e:
        fail(str(e))

    if contained:
        console.print("[green]Contained.[/green]")
    else:
        console.print("[yellow]Not contained.[/yellow]")
        sys.exit(1)


@main.command()
@click.argument("from_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("to_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def diff(config: SyncConfig, from_path: Path, to_path: Path, output: Path | None) -> None:
    """Compute the update pack turning one tree into another."""
    try:
        from_tree = load_tree(from_path, config)
        to_tree = load_tree(to_path, config)
        pack = make_update_pack(from_tree, to_tree, config.digest)
    except TreeSyncError as e:
        fail(str(e))

    write_json(pack.to_dict(), output)
    if output is None:
        return

    table = Table(title="Update Pack")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Files to remove", str(_count_files(pack.removelist)))
    table.add_row("Files to add", str(_count_files(pack.addlist)))
    console.print(table)

    if pack.is_empty:
        console.print("[green]Trees are already in sync.[/green]")


@main.command()
@click.argument("tree_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("pack_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def apply(config: SyncConfig, tree_path: Path, pack_path: Path, output: Path | None) -> None:
    """Apply an update pack to a tree."""
    try:
        tree = load_tree(tree_path, config)
        pack = UpdatePack.from_dict(read_json(pack_path))
        verify_pack(pack, config.digest)
        result = apply_update_pack(tree, pack)
    except TreeSyncError as e:
        fail(str(e))

    write_json(result.to_dict(), output)
    if output is not None:
        console.print(f"[green]Wrote updated tree to {output}[/green]")


if __name__ == "__main__":
    main()
