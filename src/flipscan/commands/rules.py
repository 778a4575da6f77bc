"""flipscan rules command - List the detection rule catalog."""

from __future__ import annotations

import json

import click


@click.command("rules")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def rules(as_json: bool) -> None:
    """List detection rules in evaluation order.

    \b
    Examples:
        flipscan rules
        flipscan rules --json
    """
    from rich.table import Table

    from flipscan.logging import console
    from flipscan.rules import RuleRegistry

    registry = RuleRegistry()

    if as_json:
        data = [
            {
                "name": rule.name,
                "category": rule.category.value,
                "description": rule.description,
                "extracts_flag": rule.extracts_flag,
                "flag_group": rule.flag_group if rule.extracts_flag else None,
                "aliases": dict(rule.aliases) if rule.aliases else None,
            }
            for rule in registry
        ]
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title=f"Detection rules ({len(registry)})")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Flag")
    table.add_column("Description")
    for index, rule in enumerate(registry, start=1):
        table.add_row(
            str(index),
            rule.name,
            rule.category.value,
            f"group {rule.flag_group}" if rule.extracts_flag else "-",
            rule.description,
        )
    console.print(table)


__all__ = ["rules"]
