"""Main entry point for the tabkey CLI.

Provides a Typer-based CLI for listing keys, showing tab sheets and
transposing songs into another key.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tabkey import __version__
from tabkey.config import TabkeyConfig, ensure_config_exists, get_config_path
from tabkey.logging_config import get_logger, setup_logging
from tabkey.models import Song
from tabkey.services.tables import LoadError, TableStore
from tabkey.services.transpose import TransposeEngine
from tabkey.settings import SongSettingsStore
from tabkey.sources import DocumentStoreClient, DocumentStoreError, JsonSongSource, JsonTableSource

console = Console()
logger = get_logger(__name__)

app = typer.Typer(
    name="tabkey",
    help="Show and transpose chord tab sheets",
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"tabkey version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """tabkey: chord tab sheets in any key.

    ## Commands

    * [bold cyan]keys[/bold cyan] - List the keys available for transposition
    * [bold cyan]show[/bold cyan] - Show a song's tab sheet
    * [bold cyan]transpose[/bold cyan] - Show a song in another key
    * [bold cyan]config[/bold cyan] - Manage configuration
    """
    pass


def _load_config(config_path: Optional[Path]) -> TabkeyConfig:
    try:
        config = TabkeyConfig.load(config_path) if config_path else ensure_config_exists()
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config_path}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Invalid config: {e}[/red]")
        raise typer.Exit(1)

    setup_logging(config.log_dir, config.log_level)
    return config


def _load_store(config: TabkeyConfig) -> TableStore:
    if config.tables_file:
        source = JsonTableSource(config.tables_file)
    else:
        source = DocumentStoreClient(config.base_url, timeout=config.timeout)

    store = TableStore(source)
    try:
        store.load()
    except LoadError as e:
        console.print(f"[red]Error loading transposition tables: {e}[/red]")
        raise typer.Exit(1)
    return store


def _load_song(song_ref: str, config: TabkeyConfig, lang: Optional[str]) -> Song:
    """Load a song from a JSON file path or by ID from the document store."""
    path = Path(song_ref)
    try:
        if path.exists():
            data = JsonSongSource(path).get_song()
        else:
            data = DocumentStoreClient(config.base_url, timeout=config.timeout).get_song(song_ref)
    except (DocumentStoreError, OSError, ValueError) as e:
        console.print(f"[red]Error loading song: {e}[/red]")
        raise typer.Exit(1)

    if not data:
        console.print(f"[red]Song not found: {song_ref}[/red]")
        raise typer.Exit(1)

    return Song.from_dict(data, lang=lang)


def resolve_table_index(store: TableStore, value: str) -> Optional[int]:
    """Resolve a table index from a number or a key name.

    Args:
        store: Loaded table store
        value: Table index (e.g., "5") or key name (e.g., "F", "Dm")

    Returns:
        Table index, or None if nothing matches
    """
    if value.isdigit():
        index = int(value)
        return index if store.get_by_index(index) is not None else None

    signatures = store.key_signatures()
    for match in (lambda a, b: a == b, lambda a, b: a.casefold() == b.casefold()):
        for entry in signatures:
            if match(entry["major"], value) or match(entry["minor"], value):
                return entry["index"]
    return None


def render_sheet(song: Song, key_name: str) -> None:
    """Print a song's tab sheet with chords above lyrics."""
    header = Text(song.title or song.id, style="bold")
    header.append(f"  key: {key_name}", style="magenta")
    if song.rhythm:
        header.append(f"  rhythm: {song.rhythm}", style="dim")
    console.print(Panel.fit(header, border_style="green"))

    if song.chords.vocal_note and song.chords.vocal_note.note:
        console.print(Text(f"Vocal note: {song.chords.vocal_note.note}", style="dim"))

    for section in song.sections:
        console.print()
        if section.title:
            console.print(Text(section.title, style="bold yellow"))
        for line in section.lines:
            if line.chords:
                console.print(Text(line.chords, style="cyan"), overflow="ignore", no_wrap=True)
            if line.text:
                console.print(Text(line.text), overflow="ignore", no_wrap=True)


@app.command("keys")
def list_keys(
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """List the keys available for transposition."""
    config = _load_config(config_path)
    store = _load_store(config)

    table = Table(title="Transposition Keys")
    table.add_column("Index", style="dim")
    table.add_column("Major", style="cyan")
    table.add_column("Minor", style="green")
    table.add_column("Table ID", style="dim")

    for entry in store.key_signatures():
        table.add_row(
            str(entry["index"]),
            entry["major"] or "?",
            entry["minor"] or "?",
            entry["table_id"],
        )

    console.print(table)


@app.command("show")
def show_song(
    song_ref: str = typer.Argument(..., help="Song JSON file or song ID"),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Content language"),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Show a song's tab sheet in its original key."""
    config = _load_config(config_path)
    store = _load_store(config)
    song = _load_song(song_ref, config, lang)

    engine = TransposeEngine(store)
    quality = song.chords.key_signature or config.default_quality
    index = engine.get_original_table_index(song.chords)
    render_sheet(song, engine.get_key_signature_display(index, quality))


@app.command("transpose")
def transpose_song(
    song_ref: str = typer.Argument(..., help="Song JSON file or song ID"),
    to: Optional[str] = typer.Option(
        None,
        "--to",
        "-t",
        help="Target table index or key name (default: remembered key for this song)",
    ),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Content language"),
    as_json: bool = typer.Option(False, "--json", help="Print the transposed song as JSON"),
    remember: bool = typer.Option(
        False,
        "--remember",
        "-r",
        help="Remember the target key for this song",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Show a song transposed into another key.

    Examples:
        tabkey transpose song.json --to 5
        tabkey transpose song.json --to Dm --remember
    """
    config = _load_config(config_path)
    store = _load_store(config)
    song = _load_song(song_ref, config, lang)

    engine = TransposeEngine(store)
    settings_store = SongSettingsStore()

    if to is not None:
        target = resolve_table_index(store, to)
        if target is None:
            console.print(f"[red]Unknown key or table index: {to}[/red]")
            console.print("Run 'tabkey keys' to list available keys.")
            raise typer.Exit(1)
    elif settings_store.contains(song.id):
        target = settings_store.load(song.id).table_index
    else:
        target = engine.get_original_table_index(song.chords)

    transposed = engine.transpose_song(song, target)
    logger.info(f"Transposed song {song.id} to table {target}")

    if remember:
        settings = settings_store.load(song.id)
        settings.table_index = target
        settings_store.save(song.id, settings)

    if as_json:
        typer.echo(json.dumps(transposed.to_dict(), ensure_ascii=False, indent=2))
        return

    quality = song.chords.key_signature or config.default_quality
    render_sheet(transposed, engine.get_key_signature_display(target, quality))


@app.command()
def config(
    action: str = typer.Argument(
        ...,
        help="Action to perform (show, set, path)",
    ),
    key: str = typer.Argument(
        None,
        help="Configuration key (for set action)",
    ),
    value: str = typer.Argument(
        None,
        help="Configuration value (for set action)",
    ),
) -> None:
    """Manage configuration.

    Examples:
        tabkey config show
        tabkey config set base_url http://localhost:8081
        tabkey config path
    """
    if action == "show":
        try:
            cfg = ensure_config_exists()
        except OSError as e:
            console.print(f"[red]Error loading config: {e}[/red]")
            raise typer.Exit(1)

        console.print(
            Panel.fit(
                f"[cyan]Store URL:[/cyan] {cfg.base_url}\n"
                f"[cyan]Timeout:[/cyan] {cfg.timeout}s\n"
                f"[cyan]Tables File:[/cyan] {cfg.tables_file or '(not set)'}\n"
                f"[cyan]Default Quality:[/cyan] {cfg.default_quality}\n"
                f"[cyan]Log Dir:[/cyan] {cfg.log_dir}\n"
                f"[cyan]Log Level:[/cyan] {cfg.log_level}",
                title="Configuration",
                border_style="green",
            )
        )

    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage: tabkey config set <key> <value>[/red]")
            raise typer.Exit(1)

        try:
            cfg = ensure_config_exists()
            cfg.set(key, value)
            cfg.save()
            console.print(f"[green]Set {key} = {value}[/green]")
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    elif action == "path":
        console.print(str(get_config_path()), soft_wrap=True)

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Valid actions: show, set, path")
        raise typer.Exit(1)


def cli_entry() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli_entry()
