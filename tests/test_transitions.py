import pytest

from jira_automated import JiraOperationError, Transition

from conftest import API_URL, FakeResponse


def transitions_response(*pairs):
    return FakeResponse(
        200, {"transitions": [{"id": tid, "name": name} for tid, name in pairs]}
    )


def test_get_transitions(jira, transport):
    transport.queue(transitions_response(("11", "Start Progress"), ("21", "Close Issue")))

    transitions = jira.get_transitions("OPS-1")

    assert transport.calls[0]["method"] == "GET"
    assert transport.calls[0]["url"] == f"{API_URL}issue/OPS-1/transitions"
    assert transitions == [Transition("11", "Start Progress"), Transition("21", "Close Issue")]


def test_transition_issue_resolves_id_then_posts(jira, transport):
    transport.queue(
        transitions_response(("11", "Start Progress"), ("21", "Close Issue")),
        FakeResponse(204, reason="No Content"),
    )

    assert jira.transition_issue("OPS-1", "Start Progress") == "OPS-1"

    lookup, execute = transport.calls
    assert lookup["method"] == "GET"
    assert execute["method"] == "POST"
    assert execute["url"] == f"{API_URL}issue/OPS-1/transitions"
    assert execute["json"] == {"transition": {"id": "11"}}


def test_transition_issue_keeps_caller_fields(jira, transport):
    transport.queue(
        transitions_response(("5", "Resolve Issue")),
        FakeResponse(204, reason="No Content"),
    )
    fields = {"fields": {"resolution": {"name": "Fixed"}}}

    jira.transition_issue("OPS-1", "Resolve Issue", fields)

    assert transport.calls[1]["json"] == {
        "fields": {"resolution": {"name": "Fixed"}},
        "transition": {"id": "5"},
    }
    assert fields == {"fields": {"resolution": {"name": "Fixed"}}}


def test_transition_names_match_exactly(jira, transport):
    transport.queue(
        transitions_response(("11", "start progress"), ("12", "Start Progress ")),
        FakeResponse(
            400,
            {"errorMessages": ["Transition id 'null' is not valid for this issue."]},
            reason="Bad Request",
        ),
    )

    with pytest.raises(JiraOperationError) as exc:
        jira.transition_issue("OPS-1", "Start Progress")

    assert transport.calls[1]["json"] == {"transition": {"id": None}}
    assert exc.value.description == "Error with Start Progress for JIRA issue OPS-1:"
    assert exc.value.status_line == "400 Bad Request"


def test_last_duplicate_transition_name_wins(jira, transport):
    transport.queue(
        transitions_response(("31", "Done"), ("41", "Done")),
        FakeResponse(204, reason="No Content"),
    )

    jira.transition_issue("OPS-1", "Done")

    assert transport.calls[1]["json"] == {"transition": {"id": "41"}}


def test_transition_lookup_happens_every_call(jira, transport):
    transport.queue(
        transitions_response(("11", "Start Progress")),
        FakeResponse(204, reason="No Content"),
        transitions_response(("12", "Start Progress")),
        FakeResponse(204, reason="No Content"),
    )

    jira.transition_issue("OPS-1", "Start Progress")
    jira.transition_issue("OPS-1", "Start Progress")

    assert [call["method"] for call in transport.calls] == ["GET", "POST", "GET", "POST"]
    assert transport.calls[3]["json"] == {"transition": {"id": "12"}}


def test_transition_lookup_failure(jira, transport):
    transport.queue(FakeResponse(404, text="", reason="Not Found"))

    with pytest.raises(JiraOperationError) as exc:
        jira.transition_issue("OPS-404", "Start Progress")

    assert str(exc.value) == (
        "Error getting available transitions for JIRA issue OPS-404 404 Not Found"
    )
    assert len(transport.calls) == 1


def test_close_issue_with_resolution_and_comment(jira, transport):
    transport.queue(
        transitions_response(("2", "Close Issue")),
        FakeResponse(204, reason="No Content"),
    )

    assert jira.close_issue("OPS-1", "Fixed", "done") == "OPS-1"

    payload = transport.calls[1]["json"]
    assert payload["transition"] == {"id": "2"}
    assert payload["fields"]["resolution"]["name"] == "Fixed"
    assert payload["update"]["comment"][0]["add"]["body"] == "done"


def test_close_issue_defaults(jira, transport):
    transport.queue(
        transitions_response(("2", "Close Issue")),
        FakeResponse(204, reason="No Content"),
    )

    jira.close_issue("OPS-1")

    assert transport.calls[1]["json"] == {
        "update": {"comment": [{"add": {"body": "Issue closed by script"}}]},
        "transition": {"id": "2"},
    }


def test_close_issue_uses_close_issue_transition(jira, transport):
    transport.queue(
        transitions_response(("3", "Resolve Issue"), ("2", "Close Issue")),
        FakeResponse(204, reason="No Content"),
    )

    jira.close_issue("OPS-1", "Won't Fix")

    assert transport.calls[1]["json"]["transition"] == {"id": "2"}
