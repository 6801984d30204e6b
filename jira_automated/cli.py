"""Main CLI entry point for jira-automated."""

import json
import logging
import sys
from typing import Any, NoReturn, Optional

import click
import requests
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .client import JiraClient
from .config import Config
from .errors import JiraConfigError, JiraError
from .output import ISSUE_COLUMNS, format_output, issue_rows

console = Console()
error_console = Console(stderr=True)

OUTPUT_OPTION = click.option(
    "--output", "-o", type=click.Choice(["table", "json", "yaml"]), help="Output format"
)


def get_client(ctx: click.Context) -> JiraClient:
    """Get configured JIRA client.

    Args:
        ctx: Click context

    Returns:
        JiraClient instance

    Raises:
        click.ClickException: If the client is not configured
    """
    config: Config = ctx.obj["config"]

    for key in ("url", "username", "password"):
        if not config.get(key):
            raise click.ClickException(
                f"JIRA {key} not configured. Run: jira-automated config set {key} <value>"
            )

    try:
        client = JiraClient(config.url, config.username, config.password)
    except JiraConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.call_on_close(client.close)
    return client


def parse_fields(values: tuple[str, ...]) -> dict[str, Any]:
    """Turn repeated NAME=VALUE options into a field map.

    VALUE is decoded as JSON when possible, so nested structures such as
    '{"name": "Fixed"}' can be passed; anything else is kept as a string.

    Raises:
        click.BadParameter: If an option has no '='
    """
    fields: dict[str, Any] = {}
    for item in values:
        name, sep, raw_value = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise click.BadParameter(f"Expected NAME=VALUE, got '{item}'", param_hint="--field")
        try:
            fields[name] = json.loads(raw_value)
        except ValueError:
            fields[name] = raw_value
    return fields


def fail(exc: Exception) -> NoReturn:
    """Report a failed JIRA call and exit."""
    error_console.print(f"[red]Error:[/red] {escape(str(exc))}")
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every request to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """jira-automated - Create, search, transition and close JIRA issues."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        ctx.obj["config"] = Config()
    ctx.obj["console"] = console


# ============================================================================
# ISSUE COMMANDS
# ============================================================================


@cli.group()
def issue() -> None:
    """Issue commands."""


@issue.command(name="create")
@click.option("--project", required=True, help="Project key")
@click.option("--type", "issue_type", default="Bug", show_default=True, help="Issue type")
@click.option("--summary", required=True, help="Issue summary")
@click.option("--description", help="Issue description")
@OUTPUT_OPTION
@click.pass_context
def issue_create(
    ctx: click.Context,
    project: str,
    issue_type: str,
    summary: str,
    description: Optional[str],
    output: Optional[str],
) -> None:
    """Create new issue."""
    client = get_client(ctx)
    config: Config = ctx.obj["config"]
    output_format = output or config.output_format

    try:
        created = client.create_issue(project, issue_type, summary, description)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    key = (created or {}).get("key")
    if key:
        console.print(f"[green]Created issue {escape(key)}[/green]")
        console.print(client.make_browse_url(key))
    else:
        console.print("[green]Issue created[/green]")
    format_output(created, output_format, console)


@issue.command(name="get")
@click.argument("key")
@OUTPUT_OPTION
@click.pass_context
def issue_get(ctx: click.Context, key: str, output: Optional[str]) -> None:
    """Get issue details."""
    client = get_client(ctx)
    config: Config = ctx.obj["config"]
    output_format = output or config.output_format

    try:
        data = client.get_issue(key)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    if output_format == "table":
        data = data.get("fields", data)
    format_output(data, output_format, console, title=key)


@issue.command(name="update")
@click.argument("key")
@click.option("--field", "field_values", multiple=True, required=True, help="NAME=VALUE (repeatable)")
@click.pass_context
def issue_update(ctx: click.Context, key: str, field_values: tuple[str, ...]) -> None:
    """Update issue fields."""
    fields = parse_fields(field_values)
    client = get_client(ctx)

    try:
        client.update_issue(key, fields)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    console.print(f"[green]Issue {escape(key)} updated[/green]")


@issue.command(name="delete")
@click.argument("key")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def issue_delete(ctx: click.Context, key: str, yes: bool) -> None:
    """Delete issue."""
    if not yes:
        click.confirm(f"Delete issue {key}?", abort=True)
    client = get_client(ctx)

    try:
        client.delete_issue(key)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    console.print(f"[green]Issue {escape(key)} deleted[/green]")


@issue.command(name="comment")
@click.argument("key")
@click.argument("text")
@OUTPUT_OPTION
@click.pass_context
def issue_comment(ctx: click.Context, key: str, text: str, output: Optional[str]) -> None:
    """Add a comment to an issue."""
    client = get_client(ctx)
    config: Config = ctx.obj["config"]
    output_format = output or config.output_format

    try:
        comment = client.create_comment(key, text)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    console.print("[green]Comment added[/green]")
    format_output(comment, output_format, console)


@issue.command(name="attach")
@click.argument("key")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, readable=True))
@OUTPUT_OPTION
@click.pass_context
def issue_attach(ctx: click.Context, key: str, path: str, output: Optional[str]) -> None:
    """Attach a file to an issue."""
    client = get_client(ctx)
    config: Config = ctx.obj["config"]
    output_format = output or config.output_format

    try:
        attachments = client.attach_file_to_issue(key, path)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    console.print(f"[green]Attached {escape(path)} to {escape(key)}[/green]")
    format_output(attachments, output_format, console, columns=["id", "filename", "size"])


@issue.command(name="transitions")
@click.argument("key")
@OUTPUT_OPTION
@click.pass_context
def issue_transitions(ctx: click.Context, key: str, output: Optional[str]) -> None:
    """List transitions available for an issue."""
    client = get_client(ctx)
    config: Config = ctx.obj["config"]
    output_format = output or config.output_format

    try:
        transitions = client.get_transitions(key)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    format_output(
        [{"id": t.id, "name": t.name} for t in transitions],
        output_format,
        console,
        title=f"Transitions for {key}",
    )


@issue.command(name="transition")
@click.argument("key")
@click.argument("name")
@click.option("--field", "field_values", multiple=True, help="Transition payload entry NAME=VALUE (repeatable)")
@click.pass_context
def issue_transition(
    ctx: click.Context, key: str, name: str, field_values: tuple[str, ...]
) -> None:
    """Apply a workflow transition, e.g. "Start Progress"."""
    fields = parse_fields(field_values)
    client = get_client(ctx)

    try:
        client.transition_issue(key, name, fields or None)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    console.print(f"[green]Applied '{escape(name)}' to {escape(key)}[/green]")


@issue.command(name="close")
@click.argument("key")
@click.option("--resolution", help="Resolution name, e.g. Fixed")
@click.option("--comment", help="Closing comment")
@click.pass_context
def issue_close(
    ctx: click.Context, key: str, resolution: Optional[str], comment: Optional[str]
) -> None:
    """Close an issue."""
    client = get_client(ctx)

    try:
        client.close_issue(key, resolution, comment)
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)
    console.print(f"[green]Issue {escape(key)} closed[/green]")


@issue.command(name="browse")
@click.argument("key")
@click.pass_context
def issue_browse(ctx: click.Context, key: str) -> None:
    """Print the web URL of an issue."""
    client = get_client(ctx)
    click.echo(client.make_browse_url(key))


# ============================================================================
# SEARCH COMMAND
# ============================================================================


@cli.command(name="search")
@click.argument("jql")
@click.option("--start", type=int, default=0, show_default=True, help="Offset of the first result")
@click.option("--max", "max_results", type=int, help="Page size (defaults to configured page_size)")
@click.option("--all", "fetch_all", is_flag=True, help="Fetch every page")
@OUTPUT_OPTION
@click.pass_context
def search(
    ctx: click.Context,
    jql: str,
    start: int,
    max_results: Optional[int],
    fetch_all: bool,
    output: Optional[str],
) -> None:
    """Search issues with JQL."""
    client = get_client(ctx)
    config: Config = ctx.obj["config"]
    output_format = output or config.output_format
    page_size = max_results or config.page_size

    try:
        if fetch_all:
            issues = client.all_search_results(jql, page_size)
        else:
            page = client.search_issues(jql, start, page_size)
            if page.has_errors:
                for message in page.errors or ():
                    error_console.print(f"[red]Error:[/red] {escape(message)}")
                sys.exit(1)
            issues = list(page.issues)
            if output_format == "table":
                console.print(
                    f"Showing {len(issues)} of {page.total} results starting at {page.start}"
                )
    except (JiraError, requests.exceptions.RequestException) as exc:
        fail(exc)

    if output_format == "table":
        format_output(issue_rows(issues), output_format, console, columns=ISSUE_COLUMNS)
    else:
        format_output(issues, output_format, console)


# ============================================================================
# CONFIG COMMANDS
# ============================================================================


@cli.group()
def config() -> None:
    """Configuration management commands."""


@config.command(name="show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    config_obj: Config = ctx.obj["config"]

    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    for key, value in config_obj.all().items():
        if key == "password" and value:
            value = "********"
        table.add_row(key, escape(str(value)))

    console.print(table)


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set configuration value."""
    config_obj: Config = ctx.obj["config"]
    config_obj.set(key, value)
    console.print(f"[green]Configuration '{escape(key)}' set successfully![/green]")


@config.command(name="get")
@click.argument("key")
@click.pass_context
def config_get(ctx: click.Context, key: str) -> None:
    """Get configuration value."""
    config_obj: Config = ctx.obj["config"]
    value = config_obj.get(key)

    if value is None:
        console.print(f"[yellow]Configuration '{escape(key)}' not set[/yellow]")
    elif key == "password":
        console.print("********")
    else:
        console.print(escape(str(value)))


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
