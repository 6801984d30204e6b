"""Request bodies in the nested JSON shape JIRA expects.

JIRA validates field names and values itself, so nothing here checks them:
field maps are passed through exactly as the caller built them.
"""

from typing import Any, Optional

from .models import FieldMap

CLOSE_TRANSITION = "Close Issue"
DEFAULT_CLOSE_COMMENT = "Issue closed by script"
# "all navigable fields"
SEARCH_FIELDS = ["*navigable"]


def issue_payload(
    project: str, issue_type: str, summary: str, description: Optional[str]
) -> dict[str, Any]:
    return {
        "fields": {
            "summary": summary,
            "description": description,
            "issuetype": {"name": issue_type},
            "project": {"key": project},
        }
    }


def update_payload(fields: FieldMap) -> dict[str, Any]:
    return {"fields": dict(fields)}


def comment_payload(text: str) -> dict[str, Any]:
    return {"body": text}


def transition_payload(
    transition_id: Optional[str], extra: Optional[FieldMap] = None
) -> dict[str, Any]:
    """Build the body for executing a transition.

    Args:
        transition_id: Resolved transition ID, or None when the name did not match
        extra: Additional ``update``/``fields`` entries for the transition screen

    Returns:
        New dict; ``extra`` is left untouched
    """
    payload: dict[str, Any] = dict(extra or {})
    payload["transition"] = {"id": transition_id}
    return payload


def close_payload(
    resolution: Optional[str] = None, comment: Optional[str] = None
) -> dict[str, Any]:
    """Build the transition fields used by the "Close Issue" transition.

    Args:
        resolution: Resolution name such as "Fixed"; omitted from the payload if empty
        comment: Comment added while closing (defaults to DEFAULT_CLOSE_COMMENT)

    Returns:
        Field map to hand to the transition call
    """
    if comment is None:
        comment = DEFAULT_CLOSE_COMMENT

    closing: dict[str, Any] = {
        "update": {"comment": [{"add": {"body": comment}}]},
    }
    if resolution:
        closing["fields"] = {"resolution": {"name": resolution}}
    return closing


def search_payload(jql: str, start: int, max_results: int) -> dict[str, Any]:
    return {
        "jql": jql,
        "startAt": start,
        "maxResults": max_results,
        "fields": list(SEARCH_FIELDS),
    }
