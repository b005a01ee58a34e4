from enum import Enum

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: Env = Env.local
    log_level: str = "INFO"

    openai_api_key: str | None = None
    chat_model: str = "gpt-3.5-turbo"
    chat_max_tokens: int = 300

    modelslab_api_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("modelslab_api_token", "modellab_api_token"),
    )
    modelslab_submit_url: str = "https://modelslab.com/api/v6/images/text2img"
    modelslab_fetch_url: str = "https://modelslab.com/api/v6/images/fetch"
    modelslab_model_id: str = "albedobase-xl-v0-2"
    modelslab_lora_model: str | None = None
    image_width: int = 512
    image_height: int = 512
    inference_steps: int = 20
    scheduler: str = "DPMSolverMultistepScheduler"
    guidance_scale: float = 7.5
    submit_timeout: float = 60
    poll_timeout: float = 3

    # 120 polls at no more than 0.25s apart keeps the budget near 30 seconds.
    poll_max_attempts: int = 120
    poll_min_interval: float = 0.1
    poll_max_interval: float = 0.25
    default_eta: float = 1.0

    fallback_image_model: str = "dall-e-2"
    fallback_image_size: str = "512x512"
