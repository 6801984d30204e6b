import pytest
from rich.console import Console

from jira_automated import Issue
from jira_automated.output import format_output, issue_rows


def test_issue_from_payload():
    payload = {
        "key": "OPS-1",
        "fields": {
            "summary": "export failed",
            "status": {"name": "In Progress"},
            "assignee": {"displayName": "Batch User"},
        },
    }

    view = Issue.from_payload(payload)

    assert view.key == "OPS-1"
    assert view.summary == "export failed"
    assert view.status == "In Progress"
    assert view.assignee == "Batch User"
    with pytest.raises(TypeError):
        view.fields["summary"] = "changed"  # type: ignore[index]
    with pytest.raises(AttributeError):
        view.key = "OPS-2"  # type: ignore[misc]


def test_issue_without_key_is_rejected():
    with pytest.raises(ValueError):
        Issue.from_payload({"fields": {}})


def test_issue_rows_skip_keyless_payloads():
    rows = issue_rows([{"key": "OPS-1", "fields": {"summary": "a"}}, {"fields": {}}])

    assert rows == [{"key": "OPS-1", "summary": "a", "status": None, "assignee": None}]


def test_format_output_json():
    console = Console(record=True, width=120)

    format_output([{"key": "OPS-1"}], "json", console)

    assert '"key": "OPS-1"' in console.export_text()


def test_format_output_table_escapes_markup():
    console = Console(record=True, width=120)

    format_output([{"key": "OPS-1", "summary": "[red]not markup[/red]"}], "table", console)

    assert "[red]not markup[/red]" in console.export_text()
