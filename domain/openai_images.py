import logging

import openai

from domain.aopenai import openai_client_factory
from domain.errors import ProviderRejected, TransportError


logger = logging.getLogger(__name__)


class OpenAIImageProvider:
    """Single synchronous image call, used when the primary provider gives up."""

    id = "openai"

    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        model: str = "dall-e-2",
        size: str = "512x512",
    ) -> None:
        self.openai_client = (
            openai_client_factory() if openai_client is None else openai_client
        )
        self.model = model
        self.size = size

    async def generate(self, prompt: str) -> str:
        logger.info("Generating image with %s %s", self.id, self.model)
        try:
            resp = await self.openai_client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size=self.size,  # pyright: ignore[reportArgumentType]
            )
        except openai.APIConnectionError as e:
            raise TransportError(repr(e), provider_id=self.id) from e
        except openai.OpenAIError as e:
            raise ProviderRejected(str(e), provider_id=self.id) from e

        url = resp.data[0].url if resp.data else None
        if not url:
            raise ProviderRejected("response carried no image url", provider_id=self.id)
        return url
