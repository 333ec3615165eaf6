from logging import Logger

from fastmcp.utilities.logging import get_logger

from github_comics.clients.github import GitHubReposClient
from github_comics.clients.images import DEFAULT_OUTPUT_DIR, ComicImageClient
from github_comics.models import ComicsConfig, ImageResult
from github_comics.prompts.comic import DEFAULT_REPO_COUNT, create_comic_prompt

logger: Logger = get_logger(name=__name__)


def comic_quip(user: str) -> str:
    return f"Wow {user}, your code is... something else. Keep it up!"


async def generate_github_comic(
    user: str,
    config: ComicsConfig,
    repo_count: int = DEFAULT_REPO_COUNT,
    output_dir: str = DEFAULT_OUTPUT_DIR,
    repos_client: GitHubReposClient | None = None,
    image_client: ComicImageClient | None = None,
) -> ImageResult:
    """Generate a comic strip about a GitHub user's repositories.

    Fetches the user's repositories, builds the prompt and writes the generated image to `output_dir`.
    The first error from any step is raised unchanged.
    """

    repos_client = repos_client or GitHubReposClient()
    image_client = image_client or ComicImageClient(api_key=config.ai_gateway_api_key)

    repos = await repos_client.fetch_repositories(username=user, token=config.github_token)

    logger.info(f"Building comic prompt for {user} from {len(repos)} repositories")

    prompt = create_comic_prompt(repos=repos, user=user, count=repo_count)

    return await image_client.generate(prompt=prompt, output_dir=output_dir)
