import json
from types import SimpleNamespace
from typing import Any

import httpx
import openai
import pytest
from starlette.testclient import TestClient

from app.app import create_app
from app.config import Config, Env
from domain.errors import ProviderRejected
from domain.images import ImageJobController
from domain.llm_service import LLMService
from domain.models import ImmediateResult
from tests.fakes import FakeFallback, FakeOpenAI, FakePrimary, Sleeper


RECIPE = {
    "title": "Lemon Garlic Shrimp Soup",
    "ingredients": ["1 lb shrimp"],
    "instructions": ["Simmer."],
    "nutrition": {"calories": 280},
}


def client_for(
    *replies: str,
    primary: FakePrimary | None = None,
    fallback: FakeFallback | None = None,
) -> tuple[TestClient, FakeOpenAI]:
    openai_client = FakeOpenAI(list(replies))
    images = ImageJobController(
        primary or FakePrimary(ImmediateResult(provider_id="primary", url="http://x/a.png")),
        fallback or FakeFallback(),
        sleep=Sleeper(),
    )
    app = create_app(
        Config(env=Env.dev),
        llm=LLMService(openai_client),  # pyright: ignore[reportArgumentType]
        images=images,
    )
    return TestClient(app), openai_client


def test_health() -> None:
    client, _ = client_for()

    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json()["status"] == "OK"
    assert "timestamp" in resp.json()


def test_chat() -> None:
    client, openai_client = client_for("Add more ginger.")

    resp = client.post(
        "/chat",
        json={
            "messages": [{"role": "user", "content": "More zing?"}],
            "currentDish": {"title": "Pho", "description": "Beef noodle soup."},
        },
    )

    assert resp.status_code == 200
    assert resp.json() == {"reply": "Add more ginger."}
    system = openai_client.completions.calls[0]["messages"][0]["content"]
    assert "Current dish context: Pho - Beef noodle soup." in system


def test_generate_dish() -> None:
    client, openai_client = client_for("Dish Name: Katsu Bowl")

    resp = client.post(
        "/generate-dish", json={"preferences": {"cuisines": ["Japanese"]}}
    )

    assert resp.json() == {"dish": "Dish Name: Katsu Bowl"}
    prompt = openai_client.completions.calls[0]["messages"][0]["content"]
    assert "inspired by Japanese cuisine" in prompt


def test_chat_dish_suggestion() -> None:
    client, _ = client_for(
        "DISH_NAME: Katsu Bowl\nDESCRIPTION: Crispy pork.\nINGREDIENTS:\n- 1 pork loin",
        "How about a katsu bowl?",
    )

    resp = client.post(
        "/chat-dish-suggestion",
        json={"userMessage": "something crispy", "preferences": {"random": False}},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["chatSummary"] == "How about a katsu bowl?"
    assert body["completeDish"]["title"] == "Katsu Bowl"
    assert body["completeDish"]["ingredients"] == ["1 pork loin"]
    assert body["completeDish"]["nutrition"] == {}


@pytest.mark.parametrize(
    "path,body",
    (
        ("/chat-dish-suggestion", {}),
        ("/chat-dish-suggestion", {"userMessage": "  "}),
        ("/recipe-info", {"dishName": 42}),
        ("/modify-recipe", {"modification": "add cheese"}),
        ("/modify-recipe", {"dish": {"title": "Pho"}}),
        ("/generate-image", {}),
        ("/fuse-dish", {"modification": "add tacos"}),
        ("/generate-dish", {"preferences": "vegan"}),
        ("/generate-dish", {"preferences": {"dietaryRestrictions": "Vegan"}}),
        ("/chat", {"messages": "hello"}),
    ),
)
def test_bad_requests(path: str, body: dict[str, Any]) -> None:
    client, _ = client_for()

    resp = client.post(path, json=body)

    assert resp.status_code == 400
    assert "error" in resp.json()


def test_invalid_json_body() -> None:
    client, _ = client_for()

    resp = client.post(
        "/chat", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert resp.status_code == 400


def test_undecodable_json_body() -> None:
    client, _ = client_for()

    resp = client.post(
        "/generate-image",
        content=b'{"dish": "\xff"}',
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert "error" in resp.json()


def test_recipe_info_only_returns_set_fields() -> None:
    client, _ = client_for(json.dumps(RECIPE))

    resp = client.post("/recipe-info", json={"dishName": "Shrimp Soup"})

    assert resp.status_code == 200
    assert resp.json() == {"recipe": RECIPE}


@pytest.mark.parametrize(
    "modification,transformative,summary_key",
    (
        ("make it a soup", True, "transformationSummary"),
        ("add more garlic", False, "modificationSummary"),
    ),
)
def test_modify_recipe(
    modification: str, transformative: bool, summary_key: str
) -> None:
    client, _ = client_for(json.dumps(RECIPE))

    resp = client.post(
        "/modify-recipe",
        json={"dish": {"title": "Shrimp Pasta"}, "modification": modification},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["isTransformative"] is transformative
    assert body["recipe"] == RECIPE
    assert summary_key in body


def test_modify_recipe_unparseable_output() -> None:
    client, _ = client_for("Sorry, no JSON today.")

    resp = client.post(
        "/modify-recipe",
        json={"dish": {"title": "Pho"}, "modification": "add basil"},
    )

    assert resp.status_code == 500
    assert resp.json()["raw"] == "Sorry, no JSON today."


def test_generate_image() -> None:
    client, _ = client_for()

    resp = client.post("/generate-image", json={"dish": "Shrimp Soup"})

    assert resp.status_code == 200
    assert resp.json() == {"imageUrl": "http://x/a.png"}


def test_generate_image_both_providers_fail() -> None:
    client, _ = client_for(
        primary=FakePrimary(ProviderRejected("no credits", provider_id="primary")),
        fallback=FakeFallback(error="billing limit"),
    )

    resp = client.post("/generate-image", json={"dish": "Shrimp Soup"})

    assert resp.status_code == 500
    body = resp.json()
    assert "imageUrl" not in body
    assert body["details"] == {
        "primaryError": "primary: no credits",
        "fallbackError": "fallback: billing limit",
    }


def test_remix_requires_current_dish() -> None:
    client, openai_client = client_for()

    resp = client.post("/remix-dish", json={"userRequest": "make it vegan"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "No current dish provided for remixing"}
    assert openai_client.completions.calls == []


def test_remix_dish() -> None:
    client, _ = client_for(f"REMIX_SUMMARY: Now vegan.\nRECIPE:\n{json.dumps(RECIPE)}")

    resp = client.post(
        "/remix-dish",
        json={"currentDish": {"title": "Beef Pho"}, "userRequest": "make it vegan"},
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "remixSummary": "Now vegan.",
        "recipe": RECIPE,
        "originalDish": "Beef Pho",
    }


def test_fuse_dish() -> None:
    client, _ = client_for(f"SUMMARY: Taco ramen.\nRECIPE: {json.dumps(RECIPE)}")

    resp = client.post(
        "/fuse-dish",
        json={"currentDish": {"title": "Ramen"}, "modification": "add tacos"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"summary": "Taco ramen.", "recipe": RECIPE}


def test_fuse_dish_bad_recipe_keeps_summary() -> None:
    client, _ = client_for("SUMMARY: Taco ramen.\nRECIPE: {oops}")

    resp = client.post(
        "/fuse-dish",
        json={"currentDish": {"title": "Ramen"}, "modification": "add tacos"},
    )

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Failed to parse recipe JSON.",
        "raw": "{oops}",
        "summary": "Taco ramen.",
    }


def test_openai_failure_is_a_server_error() -> None:
    class FailingCompletions:
        async def create(self, **kwargs: Any) -> None:
            raise openai.APIConnectionError(
                request=httpx.Request("POST", "https://api.openai.com/v1/chat")
            )

    client, openai_client = client_for()
    openai_client.chat = SimpleNamespace(completions=FailingCompletions())

    resp = client.post("/chat", json={"messages": []})

    assert resp.status_code == 500
    assert "error" in resp.json()
