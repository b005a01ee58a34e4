import json
import logging
from typing import Any, NamedTuple

import openai
from openai.types.chat import ChatCompletionMessageParam

from domain.aopenai import DEFAULT_MODEL, openai_client_factory, quick_chat
from domain.errors import RecipeParseError
from domain.models import DishPreferences, Recipe
from domain.modifications import is_transformative
from domain.parsers import (
    extract_json_object,
    parse_complete_dish,
    parse_recipe_json,
    parse_summary_and_recipe,
)
from domain import prompts


logger = logging.getLogger(__name__)


class DishSuggestion(NamedTuple):
    chat_summary: str
    dish: Recipe


class RecipeModification(NamedTuple):
    recipe: Recipe
    is_transformative: bool
    summary: str


def fallback_recipe(dish_name: str) -> Recipe:
    return Recipe(
        ingredients=["ingredient 1", "ingredient 2", "ingredient 3"],
        instructions=[
            "Step 1: Prepare ingredients",
            "Step 2: Cook according to taste",
            "Step 3: Serve hot",
        ],
        nutrition={
            "calories": 300,
            "protein": 25,
            "carbs": 30,
            "fat": 12,
            "fiber": 5,
            "sugar": 8,
            "sodium": 400,
        },
        estimated_time="30 minutes",
        description=f"A delicious {dish_name} recipe",
    )


def _is_complete_recipe(data: dict[str, Any] | None) -> bool:
    return (
        data is not None
        and isinstance(data.get("ingredients"), list)
        and isinstance(data.get("instructions"), list)
        and isinstance(data.get("nutrition"), dict)
    )


class LLMService:
    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        model: str = DEFAULT_MODEL,
        chat_max_tokens: int = 300,
    ) -> None:
        self.openai_client = (
            openai_client_factory() if openai_client is None else openai_client
        )
        self.model = model
        self.chat_max_tokens = chat_max_tokens

    async def qa(
        self,
        q: str | list[ChatCompletionMessageParam],
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        return await quick_chat(
            q,
            openai_client=self.openai_client,
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def chat(
        self,
        messages: list[ChatCompletionMessageParam],
        *,
        current_dish: dict[str, Any] | None = None,
    ) -> str:
        system_message: ChatCompletionMessageParam = {
            "role": "system",
            "content": prompts.chat_system_prompt(current_dish),
        }
        return await self.qa(
            [system_message, *messages], max_tokens=self.chat_max_tokens
        )

    async def generate_dish(self, preferences: DishPreferences | None = None) -> str:
        if preferences is None or preferences.random:
            return await self.qa(prompts.RANDOM_DISH_PROMPT)
        prompt = prompts.dish_prompt(preferences)
        logger.debug("Dish prompt: %s", prompt)
        return await self.qa(prompt)

    async def suggest_dish(
        self,
        user_message: str,
        preferences: DishPreferences | None = None,
    ) -> DishSuggestion:
        preferences = DishPreferences() if preferences is None else preferences
        text = await self.qa(prompts.complete_dish_prompt(user_message, preferences))
        dish = parse_complete_dish(text)
        summary = await self.qa(
            prompts.suggestion_summary_prompt(dish.title, dish.description)
        )
        return DishSuggestion(chat_summary=summary, dish=dish)

    async def recipe_info(self, dish_name: str) -> Recipe:
        text = await self.qa(prompts.recipe_info_prompt(dish_name), temperature=0.7)
        data = extract_json_object(text)
        if not _is_complete_recipe(data):
            logger.warning("Unusable recipe for %s, using fallback: %s", dish_name, text)
            return fallback_recipe(dish_name)
        try:
            return parse_recipe_json(text)
        except RecipeParseError:
            logger.warning("Invalid recipe for %s, using fallback: %s", dish_name, text)
            return fallback_recipe(dish_name)

    async def modify_recipe(
        self,
        dish: dict[str, Any],
        modification: str,
    ) -> RecipeModification:
        transformative = is_transformative(modification)
        logger.info(
            "Modifying %s (transformative=%s): %s",
            prompts.dish_name(dish),
            transformative,
            modification,
        )
        text = await self.qa(
            prompts.modification_prompt(
                dish, modification, transformative=transformative
            )
        )
        recipe = parse_recipe_json(text)
        data = extract_json_object(text) or {}
        name = prompts.dish_name(dish)
        if transformative:
            summary = (
                data.get("transformation_summary")
                or f"Transformed {name} into {recipe.title}"
            )
        else:
            summary = (
                data.get("modification_summary")
                or f"Modified {name} based on your request"
            )
        return RecipeModification(
            recipe=recipe, is_transformative=transformative, summary=str(summary)
        )

    async def remix_dish(
        self,
        current_dish: dict[str, Any],
        user_request: str,
        preferences: DishPreferences | None = None,
    ) -> tuple[str, Recipe]:
        text = await self.qa(
            prompts.remix_prompt(current_dish, user_request, preferences),
            temperature=0.8,
        )
        return parse_summary_and_recipe(text, tag="REMIX_SUMMARY")

    async def fuse_dish(
        self,
        current_dish: dict[str, Any],
        modification: str,
    ) -> tuple[str, Recipe]:
        text = await self.qa(
            prompts.fuse_prompt(json.dumps(current_dish, indent=2), modification)
        )
        return parse_summary_and_recipe(text, tag="SUMMARY")
