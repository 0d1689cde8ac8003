from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class ExtractIngredientsRequest(BaseModel):
    url: str = Field(min_length=1)
    description: Optional[str] = None


class ExtractIngredientsResponse(BaseModel):
    ingredients: list[str] = Field(default_factory=list)
    source: Literal[
        "caption",
        "pinned_comment",
        "platform_description",
        "transcript",
        "user_provided",
        "generic_prompt",
    ]
    usedModel: bool


class RecipeTextRequest(BaseModel):
    text: str = Field(min_length=1)


class RecipeTextResponse(BaseModel):
    ingredients: list[str] = Field(default_factory=list)


class ThumbnailResponse(BaseModel):
    url: str
    thumbnailUrl: str
