from types import SimpleNamespace
from typing import Any

import httpx

from domain.errors import ProviderRejected
from domain.models import ImmediateResult, PollUpdate, ProviderJob


class Sleeper:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakePrimary:
    id = "primary"

    def __init__(
        self,
        submit: ImmediateResult | ProviderJob | Exception,
        polls: list[PollUpdate | Exception] | None = None,
    ) -> None:
        self.submit_result = submit
        self.polls = [] if polls is None else list(polls)
        self.prompts: list[str] = []
        self.fetches = 0

    async def submit(self, prompt: str) -> ImmediateResult | ProviderJob:
        self.prompts.append(prompt)
        if isinstance(self.submit_result, Exception):
            raise self.submit_result
        return self.submit_result

    async def fetch(self, job: ProviderJob) -> PollUpdate:
        self.fetches += 1
        poll = self.polls.pop(0) if self.polls else PollUpdate(status="processing")
        if isinstance(poll, Exception):
            raise poll
        return poll


class FakeFallback:
    id = "fallback"

    def __init__(self, url: str | None = None, *, error: str = "fallback down") -> None:
        self.url = url
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.url is None:
            raise ProviderRejected(self.error, provider_id=self.id)
        return self.url


def job(eta: float = 0.2) -> ProviderJob:
    return ProviderJob(
        provider_id="primary",
        job_id="42",
        fetch_endpoint="http://provider/fetch/42",
        eta_seconds=eta,
    )


def completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


class FakeCompletions:
    def __init__(self, replies: list[str | None]) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        return completion(self.replies.pop(0))


class FakeImages:
    def __init__(self, url: str | None = None, error: Exception | None = None) -> None:
        self.url = url
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def generate(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=[SimpleNamespace(url=self.url)])


class FakeOpenAI:
    """Just enough of ``openai.AsyncClient`` for the services."""

    def __init__(
        self,
        replies: list[str | None] | None = None,
        *,
        image_url: str | None = None,
        image_error: Exception | None = None,
    ) -> None:
        self.completions = FakeCompletions([] if replies is None else replies)
        self.chat = SimpleNamespace(completions=self.completions)
        self.images = FakeImages(image_url, image_error)


def respond(body: dict[str, Any] | bytes) -> httpx.Response:
    if isinstance(body, bytes):
        return httpx.Response(200, content=body)
    return httpx.Response(200, json=body)


class ModelsLabServer:
    """Routes ModelsLab calls to canned bodies for ``httpx.MockTransport``.

    Dicts are sent as JSON, bytes are sent as they are.
    """

    def __init__(
        self,
        submit: dict[str, Any] | bytes,
        polls: list[dict[str, Any] | bytes | Exception] | None = None,
    ) -> None:
        self.submit = submit
        self.polls = [] if polls is None else list(polls)
        self.requests: list[httpx.Request] = []

    @property
    def poll_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "text2img" not in str(r.url)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if "text2img" in str(request.url):
            return respond(self.submit)
        body = self.polls.pop(0) if self.polls else {"status": "processing"}
        if isinstance(body, Exception):
            raise body
        return respond(body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))
