import re
from collections.abc import Callable
from logging import Logger
from typing import Any
from urllib.parse import quote

from fastmcp.utilities.logging import get_logger
from githubkit import GitHub as GitHubKit
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse

from github_comics.errors import UpstreamError, ValidationError
from github_comics.models import GITHUB_TOKEN_ENV, RepositorySummary

USER_AGENT = "github-comics-cli"

NOT_FOUND_ERROR = 404
FORBIDDEN_ERROR = 403

REPOS_SORT = "updated"
REPOS_PER_PAGE = 30

INVALID_RESPONSE_MESSAGE = "Invalid response from GitHub API"

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")


def validate_username(username: str) -> str:
    """Check that `username` is a valid GitHub login."""

    if not isinstance(username, str) or not USERNAME_PATTERN.fullmatch(username):
        msg = f"Invalid GitHub username: {username}"
        raise ValidationError(message=msg)

    return username


def describe_status(status_code: int, reason_phrase: str) -> str:
    if status_code == NOT_FOUND_ERROR:
        return "User not found"

    if status_code == FORBIDDEN_ERROR:
        return f"API rate limit exceeded. Use {GITHUB_TOKEN_ENV} for higher limits."

    return reason_phrase


def get_githubkit_client() -> GitHubKit[Any]:
    # No retries and no HTTP cache, every call goes straight to the API.
    return GitHubKit(user_agent=USER_AGENT, auto_retry=False, http_cache=False)


class GitHubReposClient:
    githubkit_client: GitHubKit[Any]
    logger: Logger

    def __init__(self, githubkit_client: GitHubKit[Any] | None = None, logger: Logger | None = None):
        self.githubkit_client = githubkit_client or get_githubkit_client()
        self.logger = logger or get_logger(name=__name__)

    def _get_loggers(self, log_request: bool = True) -> tuple[Callable[[str], Any], Callable[[str], Any]]:
        request_logger = self.logger.info if log_request else self.logger.debug
        return request_logger, self.logger.error

    async def fetch_repositories(self, username: str, token: str | None = None) -> list[RepositorySummary]:
        """Fetch the most recently updated public repositories of a GitHub user.

        Args:
            username: The GitHub login of the user.
            token: An optional GitHub token, sent as a bearer credential.

        Raises:
            ValidationError: If the username is not a valid GitHub login. No request is made.
            UpstreamError: If the request fails, the response is not a list, or the user has no public repositories.
        """

        _ = validate_username(username)

        request_logger, error_logger = self._get_loggers()

        headers: dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        request_logger(f"Fetching repositories for {username} (authenticated: {bool(token)})")

        try:
            response: GitHubKitResponse[Any] = await self.githubkit_client.rest.repos.async_list_for_user(
                username=quote(username, safe=""),
                sort=REPOS_SORT,
                per_page=REPOS_PER_PAGE,
                headers=headers,
            )
        except GitHubKitRequestFailed as e:
            status_code: int = e.response.status_code
            detail = describe_status(status_code=status_code, reason_phrase=e.response.raw_response.reason_phrase)

            error_logger(f"GitHub returned {status_code} fetching repositories for {username}")

            msg = f"Failed to fetch repos for {username}: {status_code} {detail}"
            raise UpstreamError(message=msg) from e
        except GitHubKitGitHubException as e:
            error_logger(f"Error fetching repositories for {username}: {e}")

            msg = f"Failed to fetch repos for {username}: {e}"
            raise UpstreamError(message=msg) from e

        # Read the raw body, the typed githubkit models would reject entries we want to pass through.
        try:
            data: Any = response.raw_response.json()
        except ValueError as e:
            error_logger(f"GitHub returned a body that is not JSON fetching repositories for {username}")

            msg = INVALID_RESPONSE_MESSAGE
            raise UpstreamError(message=msg) from e

        if not isinstance(data, list):
            msg = INVALID_RESPONSE_MESSAGE
            raise UpstreamError(message=msg)

        if len(data) == 0:
            msg = f"User '{username}' has no public repositories"
            raise UpstreamError(message=msg)

        self.logger.debug(f"Fetched {len(data)} repositories for {username}")

        return [RepositorySummary.from_api(repository) for repository in data]


async def fetch_repositories(username: str, token: str | None = None) -> list[RepositorySummary]:
    """Fetch a user's repositories with a default client."""

    return await GitHubReposClient().fetch_repositories(username=username, token=token)
