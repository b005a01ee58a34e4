"""ModelsLab text2img, the primary image provider.

Submitting returns one of three shapes: a finished result, a ``processing``
descriptor to poll, or an error. Finished results are not always in the same
place, so ``extract_result_url`` checks the known locations in order.
"""

import logging
from typing import Any, Callable

import httpx

from domain.errors import MissingJobMetadata, ProviderRejected, TransportError
from domain.models import ImmediateResult, PollUpdate, ProviderJob
from domain.prompts import NEGATIVE_IMAGE_PROMPT


logger = logging.getLogger(__name__)


PROVIDER_ID = "modelslab"
SUBMIT_URL = "https://modelslab.com/api/v6/images/text2img"
FETCH_URL = "https://modelslab.com/api/v6/images/fetch"
DEFAULT_ETA = 1.0


def _first_url(value: Any) -> str | None:
    if isinstance(value, list) and value and isinstance(value[0], str) and value[0]:
        return value[0]
    return None


def _output(data: dict[str, Any]) -> str | None:
    return _first_url(data.get("output"))


def _nested_output(data: dict[str, Any]) -> str | None:
    nested = data.get("data")
    return _first_url(nested.get("output")) if isinstance(nested, dict) else None


def _future_links(data: dict[str, Any]) -> str | None:
    return _first_url(data.get("future_links"))


RESULT_LOCATIONS: tuple[Callable[[dict[str, Any]], str | None], ...] = (
    _output,
    _nested_output,
    _future_links,
)


def extract_result_url(data: dict[str, Any]) -> str | None:
    for locate in RESULT_LOCATIONS:
        if url := locate(data):
            return url
    return None


def interpret_submit_response(
    data: dict[str, Any],
    *,
    fetch_url: str = FETCH_URL,
    default_eta: float = DEFAULT_ETA,
) -> ImmediateResult | ProviderJob:
    """Classify a submit response.

    Raises:
        ProviderRejected: Error status, or a status with nothing to act on.
        MissingJobMetadata: ``processing`` without a job id.
    """
    status = str(data.get("status", "")).lower()
    message = str(data.get("message") or "")

    if status in ("error", "failed"):
        raise ProviderRejected(message or f"status {status}", provider_id=PROVIDER_ID)

    if url := extract_result_url(data):
        return ImmediateResult(provider_id=PROVIDER_ID, url=url)

    if status != "processing":
        raise ProviderRejected(
            message or f"unexpected response: {data}", provider_id=PROVIDER_ID
        )

    job_id = data.get("id")
    if job_id in (None, ""):
        raise MissingJobMetadata(
            "processing response without a job id", provider_id=PROVIDER_ID
        )

    eta = data.get("eta")
    return ProviderJob(
        provider_id=PROVIDER_ID,
        job_id=str(job_id),
        fetch_endpoint=data.get("fetch_result") or f"{fetch_url.rstrip('/')}/{job_id}",
        eta_seconds=float(eta) if isinstance(eta, (int, float)) else default_eta,
    )


def modelslab_client_factory(timeout: float = 60) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )


class ModelsLabProvider:
    id = PROVIDER_ID

    def __init__(
        self,
        *,
        token: str | None,
        submit_url: str = SUBMIT_URL,
        fetch_url: str = FETCH_URL,
        model_id: str = "albedobase-xl-v0-2",
        lora_model: str | None = None,
        width: int = 512,
        height: int = 512,
        negative_prompt: str = NEGATIVE_IMAGE_PROMPT,
        num_inference_steps: int = 20,
        scheduler: str = "DPMSolverMultistepScheduler",
        guidance_scale: float = 7.5,
        default_eta: float = DEFAULT_ETA,
        poll_timeout: float = 3,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.token = token
        self.submit_url = submit_url
        self.fetch_url = fetch_url
        self.model_id = model_id
        self.lora_model = lora_model
        self.width = width
        self.height = height
        self.negative_prompt = negative_prompt
        self.num_inference_steps = num_inference_steps
        self.scheduler = scheduler
        self.guidance_scale = guidance_scale
        self.default_eta = default_eta
        self.poll_timeout = poll_timeout
        self.client = modelslab_client_factory() if client is None else client

    @property
    def headers(self) -> dict[str, str]:
        return {"key": self.token or ""}

    def payload(self, prompt: str) -> dict[str, Any]:
        # The API expects the numeric parameters as strings.
        return {
            "key": self.token,
            "prompt": prompt,
            "model_id": self.model_id,
            "lora_model": self.lora_model,
            "width": str(self.width),
            "height": str(self.height),
            "negative_prompt": self.negative_prompt,
            "num_inference_steps": str(self.num_inference_steps),
            "scheduler": self.scheduler,
            "guidance_scale": str(self.guidance_scale),
            "enhance_prompt": None,
        }

    async def _post(
        self, url: str, body: dict[str, Any], *, timeout: float | None = None
    ) -> dict[str, Any]:
        try:
            resp = await self.client.post(
                url,
                json=body,
                headers=self.headers,
                timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise TransportError(repr(e), provider_id=self.id) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise TransportError(f"invalid JSON: {e}", provider_id=self.id) from e
        if not isinstance(data, dict):
            raise TransportError(f"unexpected body: {data!r}", provider_id=self.id)
        return data

    async def submit(self, prompt: str) -> ImmediateResult | ProviderJob:
        logger.info("Submitting %s job with model %s", self.id, self.model_id)
        data = await self._post(self.submit_url, self.payload(prompt))
        logger.debug("Submit response: %s", data)
        return interpret_submit_response(
            data, fetch_url=self.fetch_url, default_eta=self.default_eta
        )

    async def fetch(self, job: ProviderJob) -> PollUpdate:
        data = await self._post(
            job.fetch_endpoint, {"key": self.token}, timeout=self.poll_timeout
        )
        return PollUpdate.from_response(data)
