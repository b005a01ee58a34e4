class ImageGenerationError(Exception):
    def __init__(self, message: str, *, provider_id: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.provider_id = provider_id

    def __str__(self) -> str:
        if self.provider_id:
            return f"{self.provider_id}: {self.message}"
        return self.message


class TransportError(ImageGenerationError):
    """Network failure or timeout talking to a provider."""


class ProviderRejected(ImageGenerationError):
    """The provider answered with an explicit failed or error status."""


class MissingJobMetadata(ImageGenerationError):
    """A processing response without the identifiers needed to poll it."""


class PollTimeout(ImageGenerationError):
    """The job was still processing when the poll budget ran out."""


class RecipeParseError(ValueError):
    def __init__(self, message: str, *, raw: str = "", summary: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.raw = raw
        self.summary = summary
