"""jira-automated - A JIRA REST client for automated scripts."""

import os
from importlib import metadata

from .client import JiraClient
from .connection import Connection
from .errors import (
    JiraConfigError,
    JiraError,
    JiraOperationError,
    JiraRequestRejected,
)
from .models import Issue, SearchPage, Transition

_DEFAULT_VERSION = "0.0.0-dev"


def get_version() -> str:
    """Get the package version.

    Priority order:
    1. JIRA_AUTOMATED_VERSION environment variable
    2. Installed package version
    3. Default version
    """
    env_version = os.getenv("JIRA_AUTOMATED_VERSION")
    if env_version:
        return env_version.strip()

    try:
        return metadata.version("jira-automated")
    except metadata.PackageNotFoundError:
        return _DEFAULT_VERSION


__version__ = get_version()

__all__ = [
    "Connection",
    "Issue",
    "JiraClient",
    "JiraConfigError",
    "JiraError",
    "JiraOperationError",
    "JiraRequestRejected",
    "SearchPage",
    "Transition",
    "__version__",
]
