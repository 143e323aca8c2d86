# app/schemas/catalog.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Cosmic object type slugs
PROMPTS = "prompts"
CATEGORIES = "categories"
SUBSCRIPTION_PLANS = "subscription-plans"


class CosmicObject(BaseModel):
    """
    Shared shape of every object returned by the content API.

    Extra fields are ignored: the API may add properties at any time.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    slug: str
    title: str
    content: str | None = None
    type: str | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None


class SelectOption(BaseModel):
    key: str
    value: str


class PreviewImage(BaseModel):
    url: str
    imgix_url: str | None = None


class CategoryMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: str | None = None
    icon_emoji: str | None = None
    display_order: int | None = None


class Category(CosmicObject):
    metadata: CategoryMetadata | None = None


class PromptMetadata(BaseModel):
    """
    Prompt metadata as stored in the content API.

    `category` is an expanded Category when fetched with depth=1,
    otherwise the raw category id.
    """

    model_config = ConfigDict(extra="ignore")

    description: str = ""
    category: Category | str | None = None
    ai_tool: SelectOption | None = None
    difficulty_level: SelectOption | None = None
    price: float = Field(ge=0)
    preview_image: PreviewImage | None = None
    example_output: str | None = None
    tags: str | None = None
    is_featured: bool | None = None
    prompt_content: str = ""


class Prompt(CosmicObject):
    metadata: PromptMetadata


class SubscriptionPlanMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    duration_months: int = Field(ge=0)
    price: float = Field(ge=0)
    discount_percentage: float | None = None
    features: str = ""
    is_popular: bool | None = None


class SubscriptionPlan(CosmicObject):
    metadata: SubscriptionPlanMetadata
