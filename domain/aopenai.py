import openai
from openai.types.chat import ChatCompletionMessageParam


DEFAULT_MODEL = "gpt-3.5-turbo"
TIMEOUT = 60 * 2


def openai_client_factory(api_key: str | None = None) -> openai.AsyncClient:
    return openai.AsyncClient(api_key=api_key, timeout=TIMEOUT)


async def quick_chat(
    msg: str | list[ChatCompletionMessageParam],
    *,
    openai_client: openai.AsyncClient,
    model: str = DEFAULT_MODEL,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> str:
    messages: list[ChatCompletionMessageParam] = (
        [{"role": "user", "content": msg}] if isinstance(msg, str) else msg
    )
    resp = await openai_client.chat.completions.create(
        model=model,
        messages=messages,
        max_tokens=openai.NOT_GIVEN if max_tokens is None else max_tokens,
        temperature=openai.NOT_GIVEN if temperature is None else temperature,
    )
    ans = resp.choices[0].message.content or ""
    return ans.strip()
