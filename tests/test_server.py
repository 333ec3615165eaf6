import re
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
from dirty_equals import IsStr
from fastmcp import FastMCP
from fastmcp.client import Client
from fastmcp.client.transports import FastMCPTransport
from fastmcp.exceptions import ToolError
from inline_snapshot import snapshot

from github_comics.clients.github import GitHubReposClient
from github_comics.clients.images import ComicImageClient
from github_comics.models import ComicsConfig
from github_comics.server import ComicsServer, get_mcp_server
from tests.conftest import GitHubApiStub, GoogleGenaiClientStub, get_text_from_call_tool_result


@pytest.fixture
def comics_server(repos_client: GitHubReposClient, genai_client: GoogleGenaiClientStub) -> ComicsServer:
    def image_client_factory(api_key: str) -> ComicImageClient:
        return ComicImageClient(api_key=api_key, client=genai_client)  # pyright: ignore[reportArgumentType]

    return ComicsServer(
        config_loader=lambda: ComicsConfig(ai_gateway_api_key="test-key"),
        repos_client=repos_client,
        image_client_factory=image_client_factory,
    )


@pytest.fixture
def mcp(comics_server: ComicsServer) -> FastMCP[None]:
    return get_mcp_server(comics_server=comics_server)


@pytest.fixture
async def mcp_client(mcp: FastMCP[None]) -> AsyncGenerator[Client[FastMCPTransport], Any]:
    async with Client[FastMCPTransport](transport=mcp) as client:
        yield client


def test_get_mcp_server():
    assert get_mcp_server() is not None


async def test_list_tools(mcp_client: Client[FastMCPTransport]):
    tools = await mcp_client.list_tools()

    assert [(tool.name, tool.description) for tool in tools] == snapshot(
        [
            ("create_comic_prompt", "Build the comic strip prompt for a GitHub user's most recently updated repositories."),
            ("generate_github_comic", "Generate a comic strip image about a GitHub user's repositories."),
        ]
    )


async def test_create_comic_prompt(mcp_client: Client[FastMCPTransport], monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)

    call_tool_result = await mcp_client.call_tool("create_comic_prompt", {"username": "octocat", "count": 2})

    prompt = get_text_from_call_tool_result(call_tool_result)

    assert 'GitHub user "octocat"' in prompt
    assert "1. repo1 [TypeScript] (⭐ 100): desc1" in prompt
    assert "2. repo2 [JavaScript] (⭐ 50): desc2" in prompt
    assert "repo3" not in prompt


async def test_create_comic_prompt_no_repositories(mcp_client: Client[FastMCPTransport], github_api: GitHubApiStub):
    github_api.body = []

    with pytest.raises(ToolError, match="no public repositories"):
        _ = await mcp_client.call_tool("create_comic_prompt", {"username": "octocat"})


async def test_generate_github_comic(mcp_client: Client[FastMCPTransport], genai_client: GoogleGenaiClientStub, tmp_path: Path):
    call_tool_result = await mcp_client.call_tool(
        "generate_github_comic", {"username": "octocat", "repo_count": 1, "output_dir": str(tmp_path)}
    )

    assert call_tool_result.structured_content == {
        "quip": "Wow octocat, your code is... something else. Keep it up!",
        "file_path": IsStr(regex=re.escape(str(tmp_path)) + r"/github-comic-\d+\.png"),
        "file_name": IsStr(regex=r"github-comic-\d+\.png"),
    }

    assert len(genai_client.models.calls) == 1
    assert "repo2" not in genai_client.models.calls[0]["contents"]
