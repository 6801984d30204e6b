"""REST client for creating, searching, transitioning and closing JIRA issues."""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import requests
from requests.auth import HTTPBasicAuth

from .connection import Connection
from .errors import JiraOperationError, JiraRequestRejected
from .models import FieldMap, SearchPage, Transition
from .payloads import (
    CLOSE_TRANSITION,
    close_payload,
    comment_payload,
    issue_payload,
    search_payload,
    transition_payload,
    update_payload,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


def _status_line(response: requests.Response) -> str:
    return f"{response.status_code} {response.reason or ''}".strip()


def _error_messages(response: requests.Response) -> Optional[list[str]]:
    """Extract JIRA's ``errorMessages`` list from an error body, if there is one."""
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict) or not isinstance(data.get("errorMessages"), list):
        return None

    messages = [str(message) for message in data["errorMessages"]]
    # Field-level problems come back in a separate "errors" object
    field_errors = data.get("errors")
    if isinstance(field_errors, dict):
        messages.extend(f"{name}: {message}" for name, message in field_errors.items())
    return messages


class JiraClient:
    """Adapter between automated scripts and the JIRA REST API.

    Issues travel through the client as plain dicts in JIRA's own JSON shape;
    nothing is cached between calls and nothing is retried.
    """

    def __init__(self, url: str, username: str, password: str):
        """Initialize JIRA client.

        Args:
            url: JIRA server URL (e.g., https://example.atlassian.net/)
            username: User to log in as; a dedicated "batch" account works best
            password: Password or API token for that user

        Raises:
            JiraConfigError: If a value is missing or the URL is not absolute
        """
        self.connection = Connection.create(url, username, password)
        self._auth = HTTPBasicAuth(self.connection.username, self.connection.password)
        self.session = requests.Session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"JiraClient(url={self.connection.url!r}, username={self.connection.username!r})"

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Any] = None,
        files: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        """Send one authenticated request to the API root.

        Transport failures raised by requests are not caught.

        Args:
            method: HTTP method
            path: Resource path relative to the API root
            json_body: JSON request body
            files: Multipart files to upload
            headers: Extra request headers

        Returns:
            Raw response, whatever its status
        """
        url = f"{self.connection.api_url}{path}"
        request_headers = {"Accept": "application/json"}
        if json_body is not None:
            request_headers["Content-Type"] = "application/json"
        if headers:
            request_headers.update(headers)

        logger.debug("%s %s", method, url)
        response = self.session.request(
            method=method,
            url=url,
            json=json_body,
            files=files,
            headers=request_headers,
            auth=self._auth,
        )
        logger.debug("Response [%s] from %s", response.status_code, url)
        return response

    def _classify(
        self,
        response: requests.Response,
        description: str,
        *,
        expect_body: bool = True,
    ) -> Any:
        """Decode a successful response or raise the matching failure.

        Args:
            response: Response returned by _request
            description: What the call was doing, used in error messages
            expect_body: Whether a 2xx response carries JSON worth decoding

        Returns:
            Decoded JSON body, or None

        Raises:
            JiraRequestRejected: 4xx response carrying JIRA error messages
            JiraOperationError: Any other non-2xx response
        """
        status = response.status_code
        if 200 <= status < 300:
            if not expect_body or not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise JiraOperationError(
                    description, "returned invalid JSON", status
                ) from exc

        status_line = _status_line(response)
        logger.warning("%s %s", description, status_line)
        if 400 <= status < 500:
            errors = _error_messages(response)
            if errors is not None:
                raise JiraRequestRejected(errors, description, status_line, status)
        raise JiraOperationError(description, status_line, status)

    # Issues
    def create_issue(
        self,
        project: str,
        issue_type: str,
        summary: str,
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        """Create an issue.

        Args:
            project: Project key, e.g. "PROJ"
            issue_type: Issue type name ("Bug", "Task", ...)
            summary: One-line summary
            description: Longer description; any JIRA markup is allowed

        Returns:
            JIRA's answer, usually ``{"id", "key", "self"}``
        """
        response = self._request(
            "POST",
            "issue/",
            json_body=issue_payload(project, issue_type, summary, description),
        )
        issue = self._classify(response, f"Error creating new JIRA issue {summary}")
        logger.info("Created JIRA issue %s", (issue or {}).get("key"))
        return issue

    def get_issue(self, key: str) -> dict[str, Any]:
        """Get an issue in JIRA's JSON format."""
        response = self._request("GET", f"issue/{key}")
        return self._classify(response, f"Error getting JIRA issue {key}")

    def update_issue(self, key: str, fields: FieldMap) -> str:
        """Update issue fields.

        Field names and values go to JIRA unchanged, wrapped as
        ``{"fields": fields}``; JIRA decides whether they are legal.

        Args:
            key: Issue key
            fields: Map of field name to new value

        Returns:
            The issue key
        """
        response = self._request("PUT", f"issue/{key}", json_body=update_payload(fields))
        self._classify(response, f"Error updating JIRA issue {key}", expect_body=False)
        return key

    def delete_issue(self, key: str) -> str:
        """Delete an issue.

        Mostly useful for cleaning up after tests; real issues are usually
        better closed with a suitable resolution.
        """
        response = self._request("DELETE", f"issue/{key}")
        self._classify(response, f"Error deleting JIRA issue {key}", expect_body=False)
        logger.info("Deleted JIRA issue %s", key)
        return key

    def create_comment(self, key: str, text: str) -> dict[str, Any]:
        """Add a comment to an issue. Comments are authored by the client's user."""
        response = self._request(
            "POST", f"issue/{key}/comment", json_body=comment_payload(text)
        )
        return self._classify(
            response, f"Error creating new JIRA comment for {key} : {text}"
        )

    def attach_file_to_issue(
        self, key: str, filename: Union[str, Path]
    ) -> list[dict[str, Any]]:
        """Upload a local file as an attachment.

        Args:
            key: Issue key
            filename: Path of the file to upload

        Returns:
            Attachment metadata returned by JIRA
        """
        path = Path(filename)
        with open(path, "rb") as handle:
            response = self._request(
                "POST",
                f"issue/{key}/attachments",
                files={"file": (path.name, handle)},
                # JIRA's XSRF protection rejects uploads without this header
                headers={"X-Atlassian-Token": "nocheck"},
            )
        return self._classify(
            response, f"Error attaching {filename} to JIRA issue {key}:"
        )

    # Transitions
    def get_transitions(self, key: str) -> list[Transition]:
        """List the transitions available from the issue's current status."""
        response = self._request("GET", f"issue/{key}/transitions")
        data = self._classify(
            response, f"Error getting available transitions for JIRA issue {key}"
        )
        items = data.get("transitions") if isinstance(data, dict) else None
        return [
            Transition(id=str(item["id"]), name=str(item.get("name", "")))
            for item in items or []
            if isinstance(item, dict) and item.get("id") is not None
        ]

    def _get_transition_id(self, key: str, name: str) -> Optional[str]:
        # Transition IDs depend on the issue's workflow and current status,
        # so they are looked up right before every use.
        transition_id = None
        for transition in self.get_transitions(key):
            if transition.name == name:
                transition_id = transition.id
        if transition_id is None:
            logger.warning("No transition named %r available for JIRA issue %s", name, key)
        return transition_id

    def transition_issue(
        self, key: str, name: str, fields: Optional[FieldMap] = None
    ) -> str:
        """Move an issue through its workflow.

        Args:
            key: Issue key
            name: Transition name as shown on the button, e.g. "Start Progress";
                spacing and capitalization matter
            fields: Extra ``update``/``fields`` entries required by the
                transition screen (e.g. a resolution)

        Returns:
            The issue key

        Raises:
            JiraOperationError: If JIRA refuses the transition, including when
                no transition with that name is available
        """
        transition_id = self._get_transition_id(key, name)
        response = self._request(
            "POST",
            f"issue/{key}/transitions",
            json_body=transition_payload(transition_id, fields),
        )
        self._classify(
            response, f"Error with {name} for JIRA issue {key}:", expect_body=False
        )
        logger.info("Applied transition %r to JIRA issue %s", name, key)
        return key

    def close_issue(
        self,
        key: str,
        resolution: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> str:
        """Close an issue through its "Close Issue" transition.

        Args:
            key: Issue key
            resolution: Resolution name ("Fixed", "Won't Fix", ...); leave it
                out if the issue was already resolved
            comment: Closing comment, "Issue closed by script" by default

        Returns:
            The issue key
        """
        return self.transition_issue(
            key, CLOSE_TRANSITION, close_payload(resolution, comment)
        )

    # Search
    def search_issues(
        self, jql: str, start: int = 0, max_results: int = DEFAULT_PAGE_SIZE
    ) -> SearchPage:
        """Fetch one page of JQL search results.

        A query JIRA rejects as invalid does not raise: the page comes back
        with a total of zero and JIRA's messages in ``errors``.

        Args:
            jql: JQL query string
            start: Offset of the first result
            max_results: Page size (JIRA may cap it, typically at 1000)

        Returns:
            SearchPage
        """
        response = self._request(
            "POST", "search/", json_body=search_payload(jql, start, max_results)
        )
        try:
            data = self._classify(
                response,
                f"Error searching for {jql} from {start} for {max_results} results",
            )
        except JiraRequestRejected as exc:
            # Only a malformed query becomes an error page; 401/403 stay fatal
            if exc.status_code != 400:
                raise
            return SearchPage(
                total=0, start=start, max=max_results, errors=tuple(exc.errors)
            )

        data = data if isinstance(data, dict) else {}
        return SearchPage(
            total=int(data.get("total") or 0),
            start=int(data.get("startAt") or start),
            max=int(data.get("maxResults") or max_results),
            issues=tuple(data.get("issues") or ()),
        )

    def all_search_results(
        self, jql: str, max_results: int = DEFAULT_PAGE_SIZE
    ) -> list[dict[str, Any]]:
        """Fetch every result of a JQL search, one page at a time.

        Args:
            jql: JQL query string
            max_results: Page size used for each request

        Returns:
            All issues in result order

        Raises:
            JiraRequestRejected: If any page comes back with errors; issues
                collected from earlier pages are dropped
        """
        if max_results < 1:
            raise ValueError("max_results must be a positive integer.")

        start = 0
        results: list[dict[str, Any]] = []
        while True:
            page = self.search_issues(jql, start, max_results)
            if page.has_errors:
                raise JiraRequestRejected(
                    list(page.errors or ()), f"Error searching for {jql}"
                )
            results.extend(page.issues)
            start += max_results

            # A short page is taken as the last one; the reported total is
            # not trusted for termination since it can shift between pages.
            if len(page.issues) < max_results:
                if len(results) < page.total:
                    logger.warning(
                        "Search for %r stopped at %d of %d reported results",
                        jql,
                        len(results),
                        page.total,
                    )
                return results

    def make_browse_url(self, key: str) -> str:
        """Return the web URL of an issue. No request is made."""
        return self.connection.browse_url(key)


__all__ = ["DEFAULT_PAGE_SIZE", "JiraClient"]
