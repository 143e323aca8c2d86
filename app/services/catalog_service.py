# app/services/catalog_service.py
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.cosmic_client import ContentNotFoundError, ContentStoreError, CosmicClient
from app.schemas.catalog import (
    CATEGORIES,
    PROMPTS,
    SUBSCRIPTION_PLANS,
    Category,
    Prompt,
    SubscriptionPlan,
)

logger = logging.getLogger(__name__)

LIST_PROPS = ["id", "title", "slug", "metadata"]
DETAIL_PROPS = ["id", "title", "slug", "metadata", "content"]

# Categories without an explicit display order sort last
MISSING_DISPLAY_ORDER = 999

RecordT = TypeVar("RecordT", bound=BaseModel)


class CatalogFetchError(Exception):
    """
    A catalog read failed for a reason other than "not found".

    `resource` names what was being fetched (e.g. "prompts").
    """

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"Failed to fetch {resource}")


class CatalogService:
    """
    Read-only accessor over the content store.

    Rules:
      - list reads return [] when the store reports not found
      - single reads return None when the store reports not found
      - anything else raises CatalogFetchError tagged with the resource
    """

    def __init__(self, store: CosmicClient):
        self.store = store

    # ---- internal helpers ----

    def _find(
        self,
        resource: str,
        model: type[RecordT],
        object_type: str,
        filters: dict[str, Any] | None = None,
        depth: int | None = None,
    ) -> list[RecordT]:
        try:
            objects = self.store.find(object_type, filters, props=LIST_PROPS, depth=depth)
            return [model.model_validate(obj) for obj in objects]
        except ContentNotFoundError:
            return []
        except (ContentStoreError, ValidationError) as exc:
            logger.warning("Catalog fetch of %s failed: %s", resource, exc)
            raise CatalogFetchError(resource) from exc

    # ---- public operations ----

    def get_prompts(self) -> list[Prompt]:
        return self._find("prompts", Prompt, PROMPTS, depth=1)

    def get_prompts_by_category(self, category_id: str) -> list[Prompt]:
        return self._find(
            "prompts by category",
            Prompt,
            PROMPTS,
            {"metadata.category": category_id},
            depth=1,
        )

    def get_featured_prompts(self) -> list[Prompt]:
        return self._find(
            "featured prompts",
            Prompt,
            PROMPTS,
            {"metadata.is_featured": True},
            depth=1,
        )

    def get_prompt(self, slug: str) -> Prompt | None:
        """Single prompt including its full content, or None if absent."""
        try:
            obj = self.store.find_one(PROMPTS, {"slug": slug}, props=DETAIL_PROPS, depth=1)
            return Prompt.model_validate(obj)
        except ContentNotFoundError:
            return None
        except (ContentStoreError, ValidationError) as exc:
            logger.warning("Catalog fetch of prompt %r failed: %s", slug, exc)
            raise CatalogFetchError("prompt") from exc

    def get_categories(self) -> list[Category]:
        categories = self._find("categories", Category, CATEGORIES)

        def display_order(category: Category) -> int:
            if category.metadata and category.metadata.display_order:
                return category.metadata.display_order
            return MISSING_DISPLAY_ORDER

        return sorted(categories, key=display_order)

    def get_subscription_plans(self) -> list[SubscriptionPlan]:
        plans = self._find("subscription plans", SubscriptionPlan, SUBSCRIPTION_PLANS)
        return sorted(plans, key=lambda plan: plan.metadata.duration_months)
