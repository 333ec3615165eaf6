class ComicsError(Exception):
    """An error from the GitHub Comics generator."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ComicsError):
    """The caller provided malformed input. Raised before any network call is made."""


class UpstreamError(ComicsError):
    """The GitHub API returned an error status or an unusable response."""


class GenerationError(ComicsError):
    """The image provider did not produce a usable image."""

    @classmethod
    def wrap(cls, error: Exception) -> "GenerationError":
        return cls(message=f"Failed to generate comic: {error}")
