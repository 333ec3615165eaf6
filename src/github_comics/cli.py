import asyncio
import os
from logging import Logger
from typing import Literal

import click
from dotenv import find_dotenv, load_dotenv
from fastmcp.utilities.logging import get_logger

from github_comics.clients.images import DEFAULT_OUTPUT_DIR
from github_comics.comics import generate_github_comic
from github_comics.errors import ComicsError
from github_comics.models import AI_GATEWAY_API_KEY_ENV, GITHUB_TOKEN_ENV, ComicsConfig
from github_comics.prompts.comic import DEFAULT_REPO_COUNT
from github_comics.server import get_mcp_server

logger: Logger = get_logger(name=__name__)

MIN_REPO_COUNT = 1
MAX_REPO_COUNT = 10

RULE = "━" * 40

SETUP_INSTRUCTIONS = f"""
🔧 GitHub Comics CLI Setup
{RULE}

1️⃣  Get Vercel AI Gateway API Token:
   Visit: https://vercel.com/dashboard
   Navigate to: Settings → AI Gateway
   Create a new API token

2️⃣  (Optional) Get GitHub Personal Access Token:
   Visit: https://github.com/settings/tokens
   Generate a new token with "repo" scope
   This is only needed for higher rate limits

3️⃣  Set Environment Variables:
   Create a .env file in your project:

   {AI_GATEWAY_API_KEY_ENV}=your_vercel_token_here
   {GITHUB_TOKEN_ENV}=your_github_token_here  # optional

4️⃣  Run the tool:
   github-comics generate <username>

{RULE}
"""


def load_environment() -> None:
    if load_dotenv(dotenv_path=find_dotenv(usecwd=True)):
        return

    log = logger.info if os.getenv("DEBUG") else logger.debug
    log("No .env file found. You can create one or use the --api-key flag.")


@click.group(invoke_without_command=True)
@click.version_option(package_name="github-comics")
@click.pass_context
def cli(ctx: click.Context):
    """Generate comic strips from GitHub repositories using Gemini Flash 2.5 via an AI gateway."""

    load_environment()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


@cli.command()
@click.argument("username")
@click.option("-t", "--token", help=f"GitHub personal access token (or set {GITHUB_TOKEN_ENV} env var)")
@click.option("-a", "--api-key", help=f"AI gateway API token (or set {AI_GATEWAY_API_KEY_ENV} env var)")
@click.option(
    "-c",
    "--count",
    type=click.IntRange(min=MIN_REPO_COUNT, max=MAX_REPO_COUNT),
    default=DEFAULT_REPO_COUNT,
    show_default=True,
    help="Number of top repositories to include",
)
@click.option("-o", "--output", default=DEFAULT_OUTPUT_DIR, show_default=True, help="Output directory for generated images")
def generate(username: str, token: str | None, api_key: str | None, count: int, output: str):
    """Generate a comic from a GitHub user's repositories."""

    if not (api_key := api_key or os.getenv(AI_GATEWAY_API_KEY_ENV)):
        click.echo("Error: AI gateway API token is required", err=True)
        click.echo(f"   Provide it via --api-key flag or {AI_GATEWAY_API_KEY_ENV} environment variable", err=True)
        click.echo("   Get your API key at: https://vercel.com/dashboard", err=True)
        raise SystemExit(1)

    config = ComicsConfig.from_env(ai_gateway_api_key=api_key, github_token=token)

    click.echo()
    click.echo("🎨 GitHub Comics Generator")
    click.echo(RULE)
    click.echo(f"👤 User: {username}")
    click.echo(f"📊 Repositories: Top {count}")
    click.echo(f"📁 Output: {output}")
    click.echo(RULE)
    click.echo()
    click.echo(f"🔍 Fetching repositories for {username}...")

    try:
        result = asyncio.run(generate_github_comic(user=username, config=config, repo_count=count, output_dir=output))
    except ComicsError as e:
        click.echo(f"\nError: {e.message}\n", err=True)
        raise SystemExit(1) from e

    click.echo()
    click.echo(RULE)
    click.echo("🎉 Success!")
    click.echo(f"📄 File: {result.file_name}")
    click.echo(f"📂 Path: {result.file_path}")
    click.echo(RULE)
    click.echo()


@cli.command()
def setup():
    """Show setup instructions."""

    click.echo(SETUP_INSTRUCTIONS)


@cli.command()
@click.option(
    "--mcp-transport",
    type=click.Choice(["stdio", "streamable-http"]),
    default="stdio",
    help="The transport to run the MCP server on",
)
def serve(mcp_transport: Literal["stdio", "streamable-http"]):
    """Run the comic generator as an MCP server."""

    get_mcp_server().run(transport=mcp_transport)


if __name__ == "__main__":
    cli()
