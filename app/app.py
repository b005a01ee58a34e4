import contextlib
from datetime import datetime, timezone
import functools
import logging
from typing import Any, Awaitable, Callable

import httpx
import openai
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from app import config
from app.logs import configure_logging
from domain.aopenai import openai_client_factory
from domain.errors import RecipeParseError
from domain.images import ImageJobController
from domain.llm_service import LLMService
from domain.models import DishPreferences, ImageGenerationFailed
from domain.modelslab import ModelsLabProvider, modelslab_client_factory
from domain.openai_images import OpenAIImageProvider


logger = logging.getLogger(__name__)


class BadRequest(Exception):
    pass


def aJSONResponse(route: Callable[..., Awaitable[dict[str, Any] | tuple[dict[str, Any], int]]]):
    @functools.wraps(route)
    async def wrapper(request: Request) -> JSONResponse:
        try:
            resp = await route(request)
        except (BadRequest, ValidationError) as e:
            return JSONResponse({"error": str(e)}, status_code=400)
        except RecipeParseError as e:
            body = {"error": e.message, "raw": e.raw}
            if e.summary:
                body["summary"] = e.summary
            return JSONResponse(body, status_code=500)
        except openai.OpenAIError as e:
            logger.error("%s failed: %r", request.url.path, e)
            return JSONResponse({"error": str(e)}, status_code=500)

        if not isinstance(resp, tuple):
            data, code = resp, 200
        else:
            data, code = resp
        return JSONResponse(data, status_code=code)

    return wrapper


async def read_json(request: Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except ValueError as e:
        raise BadRequest(f"Invalid JSON body: {e}") from e
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object.")
    return data


def required_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BadRequest(f"'{key}' is required.")
    return value


def optional_dict(data: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = data.get(key)
    if value is not None and not isinstance(value, dict):
        raise BadRequest(f"'{key}' must be an object.")
    return value


def preferences_from(data: dict[str, Any]) -> DishPreferences | None:
    preferences = optional_dict(data, "preferences")
    return None if preferences is None else DishPreferences.model_validate(preferences)


def llm_service(request: Request) -> LLMService:
    return request.app.state.llm


def image_controller(request: Request) -> ImageJobController:
    return request.app.state.images


@aJSONResponse
async def health(request: Request) -> dict[str, Any]:
    return {
        "status": "OK",
        "message": "Miso backend is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@aJSONResponse
async def chat(request: Request) -> dict[str, Any]:
    data = await read_json(request)
    messages = data.get("messages") or []
    if not isinstance(messages, list):
        raise BadRequest("'messages' must be a list.")
    reply = await llm_service(request).chat(
        messages, current_dish=optional_dict(data, "currentDish")
    )
    return {"reply": reply}


@aJSONResponse
async def generate_dish(request: Request) -> dict[str, Any]:
    data = await read_json(request)
    dish = await llm_service(request).generate_dish(preferences_from(data))
    return {"dish": dish}


@aJSONResponse
async def chat_dish_suggestion(request: Request) -> dict[str, Any]:
    data = await read_json(request)
    suggestion = await llm_service(request).suggest_dish(
        required_str(data, "userMessage"), preferences_from(data)
    )
    return {
        "chatSummary": suggestion.chat_summary,
        "completeDish": suggestion.dish.to_dict(),
    }


@aJSONResponse
async def recipe_info(request: Request) -> dict[str, Any]:
    data = await read_json(request)
    recipe = await llm_service(request).recipe_info(required_str(data, "dishName"))
    return {"recipe": recipe.to_dict(only_set=True)}


@aJSONResponse
async def modify_recipe(request: Request) -> dict[str, Any]:
    data = await read_json(request)
    dish = optional_dict(data, "dish")
    if not dish:
        raise BadRequest("'dish' is required.")
    modification = await llm_service(request).modify_recipe(
        dish, required_str(data, "modification")
    )
    summary_key = (
        "transformationSummary"
        if modification.is_transformative
        else "modificationSummary"
    )
    return {
        "recipe": modification.recipe.to_dict(only_set=True),
        "isTransformative": modification.is_transformative,
        summary_key: modification.summary,
    }


@aJSONResponse
async def generate_image(request: Request) -> tuple[dict[str, Any], int]:
    data = await read_json(request)
    result = await image_controller(request).generate_image(required_str(data, "dish"))
    if isinstance(result, ImageGenerationFailed):
        return result.to_dict(), 500
    return result.to_dict(), 200


@aJSONResponse
async def remix_dish(request: Request) -> dict[str, Any] | tuple[dict[str, Any], int]:
    data = await read_json(request)
    current_dish = optional_dict(data, "currentDish")
    if not current_dish:
        return {"error": "No current dish provided for remixing"}, 400
    summary, recipe = await llm_service(request).remix_dish(
        current_dish, str(data.get("userRequest") or ""), preferences_from(data)
    )
    return {
        "remixSummary": summary,
        "recipe": recipe.to_dict(only_set=True),
        "originalDish": current_dish.get("title"),
    }


@aJSONResponse
async def fuse_dish(request: Request) -> dict[str, Any]:
    data = await read_json(request)
    current_dish = optional_dict(data, "currentDish")
    if not current_dish:
        raise BadRequest("'currentDish' is required.")
    summary, recipe = await llm_service(request).fuse_dish(
        current_dish, required_str(data, "modification")
    )
    return {"summary": summary, "recipe": recipe.to_dict(only_set=True)}


def build_image_controller(
    cfg: config.Config,
    *,
    openai_client: openai.AsyncClient,
    http_client: httpx.AsyncClient,
) -> ImageJobController:
    primary = ModelsLabProvider(
        token=cfg.modelslab_api_token,
        submit_url=cfg.modelslab_submit_url,
        fetch_url=cfg.modelslab_fetch_url,
        model_id=cfg.modelslab_model_id,
        lora_model=cfg.modelslab_lora_model,
        width=cfg.image_width,
        height=cfg.image_height,
        num_inference_steps=cfg.inference_steps,
        scheduler=cfg.scheduler,
        guidance_scale=cfg.guidance_scale,
        default_eta=cfg.default_eta,
        poll_timeout=cfg.poll_timeout,
        client=http_client,
    )
    fallback = OpenAIImageProvider(
        openai_client,
        model=cfg.fallback_image_model,
        size=cfg.fallback_image_size,
    )
    return ImageJobController(
        primary,
        fallback,
        max_attempts=cfg.poll_max_attempts,
        min_interval=cfg.poll_min_interval,
        max_interval=cfg.poll_max_interval,
    )


@contextlib.asynccontextmanager
async def lifespan(app: Starlette):
    cfg: config.Config = app.state.config
    if not cfg.modelslab_api_token:
        logger.warning("MODELSLAB_API_TOKEN is not set, images will use the fallback.")

    async with contextlib.AsyncExitStack() as stack:
        if getattr(app.state, "llm", None) is None or getattr(app.state, "images", None) is None:
            openai_client = openai_client_factory(cfg.openai_api_key)
            stack.push_async_callback(openai_client.close)
            if getattr(app.state, "llm", None) is None:
                app.state.llm = LLMService(
                    openai_client,
                    model=cfg.chat_model,
                    chat_max_tokens=cfg.chat_max_tokens,
                )
            if getattr(app.state, "images", None) is None:
                http_client = modelslab_client_factory(cfg.submit_timeout)
                stack.push_async_callback(http_client.aclose)
                app.state.images = build_image_controller(
                    cfg, openai_client=openai_client, http_client=http_client
                )
        yield


def create_app(
    cfg: config.Config | None = None,
    *,
    llm: LLMService | None = None,
    images: ImageJobController | None = None,
) -> Starlette:
    cfg = config.Config() if cfg is None else cfg
    configure_logging(cfg.log_level)

    app = Starlette(
        debug=True if cfg.env == config.Env.local else False,
        routes=[
            Route("/", health, methods=["GET"]),
            Route("/chat", chat, methods=["POST"]),
            Route("/generate-dish", generate_dish, methods=["POST"]),
            Route("/chat-dish-suggestion", chat_dish_suggestion, methods=["POST"]),
            Route("/recipe-info", recipe_info, methods=["POST"]),
            Route("/modify-recipe", modify_recipe, methods=["POST"]),
            Route("/generate-image", generate_image, methods=["POST"]),
            Route("/remix-dish", remix_dish, methods=["POST"]),
            Route("/fuse-dish", fuse_dish, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.config = cfg
    app.state.llm = llm
    app.state.images = images
    return app


app = create_app()
