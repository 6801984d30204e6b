"""Value types passed in and out of the JIRA client."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Union

# JSON-shaped value accepted in update and transition field maps.
FieldValue = Union[
    str, int, float, bool, None, Mapping[str, "FieldValue"], Sequence["FieldValue"]
]
FieldMap = Mapping[str, FieldValue]


@dataclass(frozen=True, slots=True)
class Issue:
    """Read-only snapshot of an issue as returned by JIRA."""

    key: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Issue:
        key = payload.get("key")
        if not key:
            raise ValueError("JIRA issue payload is missing an issue key.")
        fields = payload.get("fields")
        if not isinstance(fields, Mapping):
            fields = {}
        return cls(
            key=str(key),
            fields=MappingProxyType(dict(fields)),
            raw=MappingProxyType(dict(payload)),
        )

    @property
    def summary(self) -> str:
        return str(self.fields.get("summary") or "")

    @property
    def status(self) -> Optional[str]:
        status = self.fields.get("status")
        if isinstance(status, Mapping):
            name = status.get("name")
            return str(name) if name else None
        return str(status) if status else None

    @property
    def assignee(self) -> Optional[str]:
        assignee = self.fields.get("assignee")
        if isinstance(assignee, Mapping):
            name = assignee.get("displayName") or assignee.get("name")
            return str(name) if name else None
        return None


@dataclass(frozen=True, slots=True)
class Transition:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class SearchPage:
    """One page of a JQL search.

    ``errors`` is only set when JIRA rejected the query; such a page always
    has a total of zero and no issues.
    """

    total: int
    start: int
    max: int
    issues: tuple[dict[str, Any], ...] = ()
    errors: Optional[tuple[str, ...]] = None

    @property
    def has_errors(self) -> bool:
        return self.errors is not None
