"""Exceptions raised by the JIRA client."""

from typing import Optional


class JiraError(Exception):
    """Base exception for JIRA client errors."""


class JiraConfigError(JiraError):
    """Raised when the client is constructed with missing or invalid settings."""


class JiraOperationError(JiraError):
    """Raised when JIRA answers a request with a non-2xx status."""

    def __init__(
        self,
        description: str,
        status_line: str,
        status_code: Optional[int] = None,
    ):
        """Initialize operation error.

        Args:
            description: What the failed call was doing (issue key, summary, ...)
            status_line: HTTP status line, e.g. "404 Not Found"
            status_code: HTTP status code
        """
        super().__init__(f"{description} {status_line}".strip())
        self.description = description
        self.status_line = status_line
        self.status_code = status_code


class JiraRequestRejected(JiraOperationError):
    """Raised when JIRA rejects a request with a list of error messages."""

    def __init__(
        self,
        errors: list[str],
        description: str = "",
        status_line: str = "",
        status_code: Optional[int] = None,
    ):
        super().__init__(description, status_line, status_code)
        self.errors = list(errors)
        if status_line:
            if self.errors:
                self.args = (f"{self.args[0]}: {'; '.join(self.errors)}",)
        elif self.errors:
            # Raised without a response (e.g. while collecting search pages)
            self.args = ("\n".join(self.errors),)


__all__ = [
    "JiraConfigError",
    "JiraError",
    "JiraOperationError",
    "JiraRequestRejected",
]
