from collections.abc import Sequence
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

import httpx
import pytest
from fastmcp.client.client import CallToolResult
from githubkit.github import GitHub
from google.genai.types import Blob, Candidate, Content, FinishReason, GenerateContentResponse, Part

from github_comics.clients.github import USER_AGENT, GitHubReposClient

PNG_BYTES = b"\x89PNG\r\n\x1a\nnot-really-a-comic"

E2E_REPOSITORIES: list[dict[str, Any]] = [
    {"name": "repo1", "description": "desc1", "stargazers_count": 100, "language": "TypeScript", "fork": False},
    {"name": "repo2", "description": "desc2", "stargazers_count": 50, "language": "JavaScript", "fork": False},
    {"name": "repo3", "description": None, "stargazers_count": 0, "language": None, "fork": True},
    {"name": "repo4", "description": "desc4", "stargazers_count": 7, "language": "Python", "fork": False},
]


@dataclass
class GitHubApiStub:
    """Serves canned responses for the GitHub REST API and records the requests it received."""

    status_code: int = 200
    body: Any = field(default_factory=lambda: E2E_REPOSITORIES)
    content: bytes | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.status_code >= 400:
            return httpx.Response(status_code=self.status_code, json={"message": "error"})

        if self.content is not None:
            return httpx.Response(status_code=self.status_code, content=self.content)

        return httpx.Response(status_code=self.status_code, json=self.body)

    def githubkit_client(self) -> GitHub[Any]:
        return GitHub(
            user_agent=USER_AGENT,
            auto_retry=False,
            http_cache=False,
            async_transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def github_api() -> GitHubApiStub:
    return GitHubApiStub()


@pytest.fixture
def repos_client(github_api: GitHubApiStub) -> GitHubReposClient:
    return GitHubReposClient(githubkit_client=github_api.githubkit_client())


def image_response(mime_type: str | None = "image/png", data: bytes = PNG_BYTES) -> GenerateContentResponse:
    return GenerateContentResponse(
        candidates=[
            Candidate(
                content=Content(
                    role="model",
                    parts=[Part(text="Here is your comic!"), Part(inline_data=Blob(mime_type=mime_type, data=data))],
                ),
                finish_reason=FinishReason.STOP,
            )
        ]
    )


def text_only_response(finish_reason: FinishReason = FinishReason.STOP) -> GenerateContentResponse:
    return GenerateContentResponse(
        candidates=[
            Candidate(content=Content(role="model", parts=[Part(text="I can only describe the comic.")]), finish_reason=finish_reason)
        ]
    )


class GoogleGenaiModelsStub:
    response: GenerateContentResponse | None
    error: BaseException | None
    calls: list[dict[str, Any]]

    def __init__(self, response: GenerateContentResponse | None = None, error: BaseException | None = None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, **kwargs: Any) -> GenerateContentResponse:
        self.calls.append(kwargs)

        if self.error is not None:
            raise self.error

        return self.response or image_response()


class GoogleGenaiClientStub:
    """Stands in for `google.genai.Client`, only `client.aio.models.generate_content` is provided."""

    def __init__(self, response: GenerateContentResponse | None = None, error: BaseException | None = None):
        self.models = GoogleGenaiModelsStub(response=response, error=error)
        self.aio = SimpleNamespace(models=self.models)


@pytest.fixture
def genai_client() -> GoogleGenaiClientStub:
    return GoogleGenaiClientStub()


def get_text_from_call_tool_result(call_tool_result: CallToolResult) -> str:
    texts: Sequence[str] = [item.text for item in call_tool_result.content if hasattr(item, "text")]
    return "".join(texts)

