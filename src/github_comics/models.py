import os
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

AI_GATEWAY_API_KEY_ENV = "AI_GATEWAY_API_KEY"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"


def get_github_token() -> str | None:
    return os.getenv(GITHUB_TOKEN_ENV) or None


class RepositorySummary(BaseModel):
    """A repository belonging to a GitHub user."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="The name of the repository.")
    description: str | None = Field(default=None, description="The description of the repository.")
    star_count: int | None = Field(default=None, description="The number of stars the repository has.")
    language: str | None = Field(default=None, description="The primary language of the repository.")

    @classmethod
    def from_api(cls, repository: Any) -> Self:
        """Copy the fields we display from a raw GitHub API repository object.

        Values are passed through as-is. Malformed entries are rejected when the prompt is built."""

        fields: Mapping[str, Any] = repository if isinstance(repository, Mapping) else {}

        return cls.model_construct(
            name=fields.get("name"),
            description=fields.get("description"),
            star_count=fields.get("stargazers_count"),
            language=fields.get("language"),
        )


class ImageResult(BaseModel):
    """A comic image written to disk."""

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(description="The path the image was written to.")
    file_name: str = Field(description="The file name of the image.")


class ComicsConfig(BaseModel):
    """Credentials used to generate a comic."""

    ai_gateway_api_key: str = Field(min_length=1, description="The API key for the image generation gateway.")
    github_token: str | None = Field(default=None, description="An optional GitHub token for higher rate limits.")

    @classmethod
    def from_env(cls, ai_gateway_api_key: str | None = None, github_token: str | None = None) -> Self:
        """Build a config, preferring explicit values over the environment."""

        return cls(
            ai_gateway_api_key=ai_gateway_api_key or os.getenv(AI_GATEWAY_API_KEY_ENV) or "",
            github_token=github_token or get_github_token(),
        )
