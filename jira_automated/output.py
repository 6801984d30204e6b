"""Output formatting utilities."""

import json
from typing import Any, Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .models import Issue

ISSUE_COLUMNS = ["key", "summary", "status", "assignee"]


def issue_rows(issues: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten raw JIRA issues into key/summary/status/assignee rows."""
    rows = []
    for payload in issues:
        try:
            issue = Issue.from_payload(payload)
        except ValueError:
            continue
        rows.append(
            {
                "key": issue.key,
                "summary": issue.summary,
                "status": issue.status,
                "assignee": issue.assignee,
            }
        )
    return rows


def format_output(
    data: Any,
    format_type: str = "table",
    console: Optional[Console] = None,
    title: Optional[str] = None,
    columns: Optional[list[str]] = None,
) -> None:
    """Format and display output.

    Args:
        data: Data to format
        format_type: Output format (table, json, yaml)
        console: Rich console instance
        title: Optional title for table output
        columns: Optional list of column names to display (only for table format)
    """
    if console is None:
        console = Console()

    if format_type == "json":
        console.print_json(json.dumps(data))
    elif format_type == "yaml":
        console.print(escape(yaml.safe_dump(data, default_flow_style=False)))
    elif format_type == "table":
        _format_table(data, console, title, columns)
    else:
        console.print(data)


def _format_value(value: Any, indent: Optional[int] = None) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, (list, dict)):
        return json.dumps(value, indent=indent)
    return str(value)


def _format_table(
    data: Any,
    console: Console,
    title: Optional[str] = None,
    columns: Optional[list[str]] = None,
) -> None:
    """Format data as a table.

    Args:
        data: Data to format
        console: Rich console instance
        title: Optional table title
        columns: Optional list of column names to display
    """
    if isinstance(data, list):
        if not data:
            console.print("[yellow]No data to display[/yellow]")
            return

        first_item = data[0]
        if not isinstance(first_item, dict):
            for item in data:
                console.print(f"• {escape(str(item))}")
            return

        table = Table(title=title)
        if columns:
            display_columns = [c for c in columns if c in first_item]
        else:
            display_columns = list(first_item.keys())

        for col in display_columns:
            col_name = col.replace("_", " ").title()
            if col in ("key", "id", "status"):
                table.add_column(col_name, style="cyan", no_wrap=True)
            else:
                table.add_column(col_name, style="cyan", overflow="fold")

        for idx, item in enumerate(data):
            row = [escape(_format_value(item.get(col))) for col in display_columns]
            table.add_row(*row, end_section=(idx < len(data) - 1))

        console.print(table)

    elif isinstance(data, dict):
        table = Table(title=title, show_header=False)
        table.add_column("Key", style="cyan", no_wrap=True, width=25)
        table.add_column("Value", style="green", overflow="fold")

        for key, value in data.items():
            table.add_row(str(key), escape(_format_value(value, indent=2)))

        console.print(table)
    else:
        console.print(escape(str(data)))
