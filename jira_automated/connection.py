"""Connection settings for a JIRA server."""

import re
from dataclasses import dataclass, field

from .errors import JiraConfigError

API_PATH_MARKER = "/rest/api/"
DEFAULT_API_PATH = "rest/api/latest/"

_REPEATED_SLASHES = re.compile(r"/{2,}")


def ensure_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"


def normalize_api_url(url: str) -> str:
    """Return the versioned REST root for a JIRA base URL.

    URLs that already point somewhere under ``/rest/api/`` are kept as they
    are; anything else gets ``rest/api/latest/`` appended. Doubled slashes are
    collapsed, except for the one in the scheme separator.

    Args:
        url: JIRA server URL, e.g. "https://example.atlassian.net"

    Returns:
        API root ending with a slash
    """
    api_url = ensure_trailing_slash(url)
    if API_PATH_MARKER not in api_url:
        api_url += DEFAULT_API_PATH
    api_url = ensure_trailing_slash(api_url)
    api_url = _REPEATED_SLASHES.sub("/", api_url)
    return api_url.replace(":/", "://", 1)


@dataclass(frozen=True)
class Connection:
    """Where and as whom to talk to JIRA. Never mutated after creation."""

    url: str
    api_url: str
    username: str
    password: str = field(repr=False)

    @classmethod
    def create(cls, url: str, username: str, password: str) -> "Connection":
        """Validate credentials and derive the API root.

        Args:
            url: JIRA server URL
            username: Login name used for HTTP Basic authentication
            password: Password or API token for that user

        Returns:
            Connection instance

        Raises:
            JiraConfigError: If a value is missing or the URL is not absolute
        """
        if not url or not username or not password:
            raise JiraConfigError(
                "Need to specify url, username, and password to access JIRA."
            )

        base_url = ensure_trailing_slash(url.strip())
        api_url = normalize_api_url(base_url)
        if not api_url.startswith(("http://", "https://")):
            raise JiraConfigError(
                "URL for JIRA must be absolute, including 'http://' or 'https://'."
            )
        return cls(url=base_url, api_url=api_url, username=username, password=password)

    def browse_url(self, key: str) -> str:
        return f"{self.url}browse/{key}"
