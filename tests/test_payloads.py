from jira_automated.payloads import (
    DEFAULT_CLOSE_COMMENT,
    close_payload,
    comment_payload,
    issue_payload,
    search_payload,
    transition_payload,
    update_payload,
)


def test_issue_payload_nests_type_and_project():
    assert issue_payload("OPS", "Bug", "export failed", "log attached") == {
        "fields": {
            "summary": "export failed",
            "description": "log attached",
            "issuetype": {"name": "Bug"},
            "project": {"key": "OPS"},
        }
    }


def test_update_payload_wraps_fields_verbatim():
    fields = {
        "summary": "renamed",
        "labels": ["nightly", "export"],
        "customfield_10010": {"value": "High"},
        "story_points": 3,
    }

    payload = update_payload(fields)

    assert payload == {"fields": fields}
    assert list(payload) == ["fields"]


def test_comment_payload():
    assert comment_payload("still failing") == {"body": "still failing"}


def test_close_payload_with_resolution_and_comment():
    payload = close_payload("Fixed", "done")

    assert payload["fields"]["resolution"]["name"] == "Fixed"
    assert payload["update"]["comment"][0]["add"]["body"] == "done"


def test_close_payload_defaults():
    payload = close_payload()

    assert "fields" not in payload
    assert payload == {
        "update": {"comment": [{"add": {"body": DEFAULT_CLOSE_COMMENT}}]}
    }
    assert DEFAULT_CLOSE_COMMENT == "Issue closed by script"


def test_close_payload_keeps_empty_comment():
    assert close_payload(comment="")["update"]["comment"][0]["add"]["body"] == ""


def test_transition_payload_does_not_touch_caller_fields():
    extra = {"fields": {"resolution": {"name": "Done"}}}

    payload = transition_payload("31", extra)

    assert payload == {"fields": {"resolution": {"name": "Done"}}, "transition": {"id": "31"}}
    assert extra == {"fields": {"resolution": {"name": "Done"}}}


def test_transition_payload_without_id():
    assert transition_payload(None) == {"transition": {"id": None}}


def test_search_payload_selects_navigable_fields():
    assert search_payload("project = OPS", 50, 25) == {
        "jql": "project = OPS",
        "startAt": 50,
        "maxResults": 25,
        "fields": ["*navigable"],
    }
