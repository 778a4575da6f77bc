"""flipscan init command - Write a default configuration file."""

from __future__ import annotations

from pathlib import Path

import click


@click.command("init")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path(".flipscan.toml"),
    help="Output path",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(output: Path, force: bool) -> None:
    """Initialize configuration file.

    Creates a .flipscan.toml with default settings that can be customized.
    """
    from flipscan.config import get_default_config_toml

    if output.exists() and not force:
        click.echo(f"Config file already exists: {output}")
        if not click.confirm("Overwrite?"):
            return

    output.write_text(get_default_config_toml(), encoding="utf-8")
    click.echo(f"Created config file: {output}")


__all__ = ["init"]
