"""Image generation with a polled primary provider and a one-shot fallback.

The primary provider may answer a submit with a finished image or with a job
to poll. Polling is bounded; once the primary path is exhausted the fallback
provider gets exactly one call with the same prompt. Nothing here raises for a
provider failure: callers always receive a ``GenerationResult``.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Protocol

from domain.errors import (
    ImageGenerationError,
    PollTimeout,
    ProviderRejected,
    TransportError,
)
from domain.models import (
    GenerationResult,
    ImageGenerated,
    ImageGenerationFailed,
    ImageRequest,
    ImmediateResult,
    JobStatus,
    PollUpdate,
    ProviderJob,
)
from domain.prompts import image_prompt


logger = logging.getLogger(__name__)


MAX_POLL_ATTEMPTS = 120
MIN_POLL_INTERVAL = 0.1
MAX_POLL_INTERVAL = 0.25


class PrimaryImageProvider(Protocol):
    id: str

    async def submit(self, prompt: str) -> ImmediateResult | ProviderJob:
        ...

    async def fetch(self, job: ProviderJob) -> PollUpdate:
        ...


class FallbackImageProvider(Protocol):
    id: str

    async def generate(self, prompt: str) -> str:
        ...


def poll_interval(
    eta_seconds: float,
    *,
    lower: float = MIN_POLL_INTERVAL,
    upper: float = MAX_POLL_INTERVAL,
) -> float:
    return min(max(eta_seconds, lower), upper)


class ImageJobController:
    def __init__(
        self,
        primary: PrimaryImageProvider,
        fallback: FallbackImageProvider,
        *,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        min_interval: float = MIN_POLL_INTERVAL,
        max_interval: float = MAX_POLL_INTERVAL,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.primary = primary
        self.fallback = fallback
        self.max_attempts = max_attempts
        self.min_interval = min_interval
        self.max_interval = max_interval
        self.sleep = sleep

    async def generate_image(self, subject_text: str) -> GenerationResult:
        request = ImageRequest(subject_text=subject_text)
        prompt = image_prompt(request.subject_text)

        try:
            url = await self.from_primary(prompt)
        except ImageGenerationError as primary_error:
            logger.warning("Primary image provider failed: %s", primary_error)
            return await self.from_fallback(prompt, primary_error)

        return ImageGenerated(image_url=url, provider_id=self.primary.id)

    async def from_primary(self, prompt: str) -> str:
        match await self.primary.submit(prompt):
            case ImmediateResult(url=url):
                logger.info("Image ready on submit from %s", self.primary.id)
                return url
            case ProviderJob() as job:
                logger.info(
                    "Polling %s job %s (eta %ss)",
                    job.provider_id,
                    job.job_id,
                    job.eta_seconds,
                )
                return await self.poll(job)
            case other:
                raise ProviderRejected(
                    f"unexpected submit outcome: {other!r}", provider_id=self.primary.id
                )

    async def poll(self, job: ProviderJob) -> str:
        interval = poll_interval(
            job.eta_seconds, lower=self.min_interval, upper=self.max_interval
        )

        for attempt in range(1, self.max_attempts + 1):
            await self.sleep(interval)
            try:
                update = await self.primary.fetch(job)
            except TransportError as e:
                if attempt == self.max_attempts:
                    raise
                logger.debug("Poll %d of job %s failed: %s", attempt, job.job_id, e)
                continue

            job.apply(update)
            logger.debug("Poll %d of job %s: %s", attempt, job.job_id, update.status)

            if job.status is JobStatus.succeeded and job.result_url:
                logger.info("Job %s finished after %d polls", job.job_id, attempt)
                return job.result_url
            if job.status is JobStatus.failed:
                raise ProviderRejected(job.message, provider_id=job.provider_id)

        raise PollTimeout(
            f"job {job.job_id} still processing after {self.max_attempts} polls",
            provider_id=job.provider_id,
        )

    async def from_fallback(
        self, prompt: str, primary_error: ImageGenerationError
    ) -> GenerationResult:
        logger.info("Falling back to %s", self.fallback.id)
        try:
            url = await self.fallback.generate(prompt)
        except ImageGenerationError as fallback_error:
            logger.error(
                "Image generation failed. primary: %s, fallback: %s",
                primary_error,
                fallback_error,
            )
            return ImageGenerationFailed(
                primary_error=str(primary_error),
                fallback_error=str(fallback_error),
            )
        return ImageGenerated(image_url=url, provider_id=self.fallback.id)
