"""Settings commands.

Shows and initializes the default collection options stored in
~/.config/bundlectl/config.toml.
"""

from typing import Annotated

import typer
from rich.table import Table

from bundlectl.core.paths import get_settings_path
from bundlectl.core.settings import (
    CollectorSettings,
    SettingsError,
    load_settings_or_default,
    save_settings,
)
from bundlectl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize default collection settings.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective collection settings."""
    path = get_settings_path()
    try:
        settings = load_settings_or_default(path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    source = str(path) if path.exists() else "built-in defaults"
    table = Table(title=f"Collection Settings ({source})", show_lines=False)
    table.add_column("Option", style="bold")
    table.add_column("Value")

    for name, value in settings.model_dump().items():
        display = repr(value) if isinstance(value, str) else str(value)
        table.add_row(name, display)

    console.print(table)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file populated with the defaults."""
    path = get_settings_path()
    if path.exists() and not force:
        print_info(f"Settings already exist at {path} (use --force to overwrite).")
        return

    try:
        saved = save_settings(CollectorSettings(), path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Settings written to {saved}")
