from dataclasses import dataclass, field
from enum import Enum
import re
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


LEADING_INT = re.compile(r"\s*([-+]?\d+)")


def parse_nutrition(values: Any) -> dict[str, int | float]:
    """Numbers are kept, strings keep their leading integer ("25g" -> 25) and
    anything else is dropped."""
    if not isinstance(values, dict):
        return {}
    nutrition: dict[str, int | float] = {}
    for key, value in values.items():
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            nutrition[str(key)] = value
        elif isinstance(value, str) and (match := LEADING_INT.match(value)):
            nutrition[str(key)] = int(match.group(1))
    return nutrition


class Recipe(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    title: str = ""
    description: str = ""
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    nutrition: dict[str, int | float] = Field(default_factory=dict)
    estimated_time: str = ""
    notes: str = ""

    @field_validator("nutrition", mode="before")
    @classmethod
    def numeric_nutrition(cls, value: Any) -> dict[str, int | float]:
        return parse_nutrition(value)

    def __str__(self) -> str:
        return self.title

    def to_dict(self, *, only_set: bool = False) -> dict[str, Any]:
        return self.model_dump(exclude_unset=only_set)


class DishPreferences(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    random: bool = False
    dietary_restrictions: list[str] = Field(default_factory=list)
    cuisines: list[str] = Field(default_factory=list)
    classic_dishes: list[str] = Field(default_factory=list)
    plate_styles: list[str] = Field(default_factory=list)
    ingredient_preferences: list[str] = Field(default_factory=list)
    specific_dish: str | None = None
    chat_context: str | None = None
    wanted_ingredients: list[str] = Field(default_factory=list)
    wanted_styles: list[str] = Field(default_factory=list)
    wanted_dish_types: list[str] = Field(default_factory=list)
    wanted_classic_dishes: list[str] = Field(default_factory=list)
    wanted_dietary: list[str] = Field(default_factory=list)


class JobStatus(Enum):
    queued = "queued"
    processing = "processing"
    succeeded = "succeeded"
    failed = "failed"


@dataclass(frozen=True)
class ImageRequest:
    subject_text: str


@dataclass(frozen=True)
class ImmediateResult:
    provider_id: str
    url: str


@dataclass(frozen=True)
class PollUpdate:
    status: str
    output: list[str] = field(default_factory=list)
    message: str = ""

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "PollUpdate":
        output = data.get("output")
        return cls(
            status=str(data.get("status", "")).lower(),
            output=[o for o in output if isinstance(o, str) and o]
            if isinstance(output, list)
            else [],
            message=str(data.get("message") or ""),
        )


@dataclass
class ProviderJob:
    provider_id: str
    job_id: str
    fetch_endpoint: str
    eta_seconds: float
    status: JobStatus = JobStatus.processing
    result_url: str | None = None
    message: str = ""

    @property
    def terminal(self) -> bool:
        return self.status in (JobStatus.succeeded, JobStatus.failed)

    def apply(self, update: PollUpdate) -> None:
        if self.terminal:
            raise RuntimeError(f"Job {self.job_id} is already {self.status.value}.")
        match update.status:
            case "success" if update.output:
                self.status = JobStatus.succeeded
                self.result_url = update.output[0]
            case "failed" | "error":
                self.status = JobStatus.failed
                self.message = update.message or f"job {update.status}"
            case _:
                self.status = JobStatus.processing


@dataclass(frozen=True)
class ImageGenerated:
    image_url: str
    provider_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"imageUrl": self.image_url}


@dataclass(frozen=True)
class ImageGenerationFailed:
    primary_error: str
    fallback_error: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "Image generation failed with both the primary and fallback providers",
            "details": {
                "primaryError": self.primary_error,
                "fallbackError": self.fallback_error,
            },
        }


GenerationResult: TypeAlias = ImageGenerated | ImageGenerationFailed
