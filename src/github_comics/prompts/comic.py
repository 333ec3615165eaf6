import math
from collections.abc import Mapping, Sequence
from typing import Any

from github_comics.errors import ValidationError
from github_comics.models import RepositorySummary

DEFAULT_REPO_COUNT = 3

NO_DESCRIPTION = "No description"

COMIC_PROMPT_TEMPLATE = """\
Create a humorous 4-panel comic strip about GitHub user "{user}" and their coding projects.

Their top repositories:
{repo_details}

Style: Comic book style, colorful, fun and playful. Each panel should tell part of the story about their coding journey. \
Make it lighthearted and encouraging."""

RepositoryLike = RepositorySummary | Mapping[str, Any]


def _get_field(repository: Any, field: str, api_field: str | None = None) -> Any:
    if isinstance(repository, RepositorySummary):
        return getattr(repository, field)

    if isinstance(repository, Mapping):
        return repository.get(api_field or field)

    return getattr(repository, field, None)


def _is_positive_number(count: Any) -> bool:
    if isinstance(count, bool) or not isinstance(count, int | float):
        return False

    return math.isfinite(count) and count >= 1


def render_repository_line(repository: RepositoryLike, index: int) -> str:
    """Render a single repository as a numbered line. `index` is 0-based."""

    name = _get_field(repository, "name")
    if not name or not isinstance(name, str):
        msg = f"Repository at index {index} is missing required field: name"
        raise ValidationError(message=msg)

    star_count = _get_field(repository, "star_count", "stargazers_count")
    language = _get_field(repository, "language")
    description = _get_field(repository, "description")

    # A star count of 0 is rendered the same as a missing star count.
    stars = f" (⭐ {star_count})" if star_count else ""
    lang = f" [{language}]" if language else ""

    return f"{index + 1}. {name}{lang}{stars}: {description if description is not None else NO_DESCRIPTION}"


def create_comic_prompt(repos: Sequence[RepositoryLike], user: str, count: int = DEFAULT_REPO_COUNT) -> str:
    """Create the image generation prompt for a user's repositories.

    Only the first `count` repositories are included, in the order provided.

    Raises:
        ValidationError: If `repos` is not a sequence, `user` is blank, `count` is not a positive number,
            or one of the selected repositories has no name.
    """

    if not isinstance(repos, Sequence) or isinstance(repos, str | bytes):
        msg = "repos must be an array"
        raise ValidationError(message=msg)

    if not isinstance(user, str) or not user.strip():
        msg = "user must be a non-empty string"
        raise ValidationError(message=msg)

    if not _is_positive_number(count):
        msg = "count must be a positive number"
        raise ValidationError(message=msg)

    top_repos = repos[: int(count)]

    repo_details = "\n".join(render_repository_line(repository, index) for index, repository in enumerate(top_repos))

    return COMIC_PROMPT_TEMPLATE.format(user=user, repo_details=repo_details)
