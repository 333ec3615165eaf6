import os
import time
from logging import Logger
from pathlib import Path

from fastmcp.utilities.logging import get_logger
from google.genai import Client as GoogleGenaiClient
from google.genai.types import (
    Blob,
    Candidate,
    GenerateContentConfig,
    GenerateContentResponse,
    HttpOptions,
)

from github_comics.errors import GenerationError
from github_comics.models import ImageResult

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_OUTPUT_DIR = "./output"
DEFAULT_EXTENSION = "png"

FILE_NAME_PREFIX = "github-comic-"

AI_GATEWAY_BASE_URL_ENV = "AI_GATEWAY_BASE_URL"
IMAGE_MODEL_ENV = "GITHUB_COMICS_MODEL"

UNKNOWN_FINISH_REASON = "unknown"


def get_image_model() -> str:
    return os.getenv(IMAGE_MODEL_ENV) or DEFAULT_IMAGE_MODEL


def get_google_genai_client(api_key: str, base_url: str | None = None) -> GoogleGenaiClient:
    base_url = base_url or os.getenv(AI_GATEWAY_BASE_URL_ENV)
    http_options = HttpOptions(base_url=base_url) if base_url else None

    return GoogleGenaiClient(api_key=api_key, http_options=http_options)


def get_candidate_from_response(response: GenerateContentResponse) -> Candidate | None:
    if response.candidates and response.candidates[0]:
        return response.candidates[0]

    return None


def get_finish_reason(candidate: Candidate | None) -> str:
    if candidate is None or candidate.finish_reason is None:
        return UNKNOWN_FINISH_REASON

    return candidate.finish_reason.value


def get_files_from_response(response: GenerateContentResponse) -> list[Blob]:
    """Collect the inline file payloads of the first candidate."""

    candidate = get_candidate_from_response(response)

    if candidate is None or candidate.content is None or not candidate.content.parts:
        return []

    return [part.inline_data for part in candidate.content.parts if part.inline_data is not None]


def extension_from_media_type(media_type: str) -> str:
    _, _, subtype = media_type.partition("/")
    return subtype or DEFAULT_EXTENSION


def comic_file_name(extension: str) -> str:
    return f"{FILE_NAME_PREFIX}{int(time.time() * 1000)}.{extension}"


class ComicImageClient:
    """Generates comic images with a Gemini image model."""

    client: GoogleGenaiClient
    model: str
    logger: Logger

    def __init__(self, api_key: str, client: GoogleGenaiClient | None = None, model: str | None = None, logger: Logger | None = None):
        self.client = client or get_google_genai_client(api_key=api_key)
        self.model = model or get_image_model()
        self.logger = logger or get_logger(name=__name__)

    async def generate(self, prompt: str, output_dir: str = DEFAULT_OUTPUT_DIR) -> ImageResult:
        """Generate an image for `prompt` and write it to `output_dir`.

        Raises:
            GenerationError: If the request fails or the response does not contain an image.
        """

        try:
            return await self._generate(prompt=prompt, output_dir=output_dir)
        except Exception as e:
            self.logger.exception(f"Failed to generate comic with model {self.model}")
            raise GenerationError.wrap(e) from e

    async def _generate(self, prompt: str, output_dir: str) -> ImageResult:
        self.logger.info(f"Generating comic with model {self.model} from a prompt of {len(prompt)} characters")

        response: GenerateContentResponse = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
        )

        files: list[Blob] = get_files_from_response(response)

        if not files:
            finish_reason = get_finish_reason(get_candidate_from_response(response))
            msg = (
                f"No images were generated. Finish reason: {finish_reason}. "
                + "Make sure you have credits and the model supports image generation."
            )
            raise GenerationError(message=msg)

        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        file = files[0]
        media_type: str = file.mime_type or ""

        if not media_type.startswith("image/"):
            msg = f"Invalid file type: {media_type}"
            raise GenerationError(message=msg)

        file_name = comic_file_name(extension=extension_from_media_type(media_type))
        file_path = output_path / file_name

        _ = file_path.write_bytes(file.data or b"")

        self.logger.info(f"Wrote comic to {file_path}")

        return ImageResult(file_path=str(file_path), file_name=file_name)


async def generate_comic_image(prompt: str, api_key: str, output_dir: str = DEFAULT_OUTPUT_DIR) -> ImageResult:
    """Generate a comic image with a default client for `api_key`."""

    return await ComicImageClient(api_key=api_key).generate(prompt=prompt, output_dir=output_dir)
