from collections.abc import Callable
from logging import Logger
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field

from github_comics.clients.github import GitHubReposClient
from github_comics.clients.images import DEFAULT_OUTPUT_DIR, ComicImageClient
from github_comics.comics import comic_quip, generate_github_comic
from github_comics.models import ComicsConfig, get_github_token
from github_comics.prompts.comic import DEFAULT_REPO_COUNT, create_comic_prompt

USERNAME = Annotated[str, Field(description="The GitHub username to make a comic about.")]
REPO_COUNT = Annotated[int, Field(ge=1, le=10, description="The number of most recently updated repositories to include.")]
OUTPUT_DIR = Annotated[str, Field(description="The directory to write the comic image to.")]


class ComicResponse(BaseModel):
    quip: str = Field(description="A short remark about the user's code.")
    file_path: str = Field(description="The path the comic image was written to.")
    file_name: str = Field(description="The file name of the comic image.")


class ComicsServer:
    config_loader: Callable[[], ComicsConfig]
    repos_client: GitHubReposClient
    image_client_factory: Callable[..., ComicImageClient]
    logger: Logger

    def __init__(
        self,
        config_loader: Callable[[], ComicsConfig] | None = None,
        repos_client: GitHubReposClient | None = None,
        image_client_factory: Callable[..., ComicImageClient] | None = None,
        logger: Logger | None = None,
    ):
        self.config_loader = config_loader or ComicsConfig.from_env
        self.repos_client = repos_client or GitHubReposClient()
        self.image_client_factory = image_client_factory or ComicImageClient
        self.logger = logger or get_logger(name=__name__)

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.create_comic_prompt))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.generate_github_comic))

        return fastmcp

    async def create_comic_prompt(self, username: USERNAME, count: REPO_COUNT = DEFAULT_REPO_COUNT) -> str:
        """Build the comic strip prompt for a GitHub user's most recently updated repositories."""

        repos = await self.repos_client.fetch_repositories(username=username, token=get_github_token())

        return create_comic_prompt(repos=repos, user=username, count=count)

    async def generate_github_comic(
        self, username: USERNAME, repo_count: REPO_COUNT = DEFAULT_REPO_COUNT, output_dir: OUTPUT_DIR = DEFAULT_OUTPUT_DIR
    ) -> ComicResponse:
        """Generate a comic strip image about a GitHub user's repositories."""

        config = self.config_loader()

        image_result = await generate_github_comic(
            user=username,
            config=config,
            repo_count=repo_count,
            output_dir=output_dir,
            repos_client=self.repos_client,
            image_client=self.image_client_factory(api_key=config.ai_gateway_api_key),
        )

        self.logger.info(f"Generated comic for {username} at {image_result.file_path}")

        return ComicResponse(quip=comic_quip(username), file_path=image_result.file_path, file_name=image_result.file_name)


def get_mcp_server(comics_server: ComicsServer | None = None) -> FastMCP[None]:
    logger: Logger = get_logger(name=__name__)

    mcp: FastMCP[None] = FastMCP[None](name="GitHub Comics MCP")

    mcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

    _ = (comics_server or ComicsServer(logger=logger)).register_tools(fastmcp=mcp)

    return mcp
