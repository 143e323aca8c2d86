# app/routers/catalog.py
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.cosmic_client import cosmic_client
from app.schemas.catalog import Category, Prompt, SubscriptionPlan
from app.services.catalog_service import CatalogFetchError, CatalogService

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@lru_cache
def get_catalog_service() -> CatalogService:
    return CatalogService(cosmic_client())


def _bad_gateway(exc: CatalogFetchError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"message": str(exc), "resource": exc.resource},
    )


@router.get("/prompts", response_model=list[Prompt])
def list_prompts(
    category_id: str | None = None,
    featured: bool = False,
    service: CatalogService = Depends(get_catalog_service),
):
    """
    List prompts.

    Filters:
      - category_id: only prompts in that category
      - featured=true: only featured prompts (takes precedence)
    """
    try:
        if featured:
            return service.get_featured_prompts()
        if category_id:
            return service.get_prompts_by_category(category_id)
        return service.get_prompts()
    except CatalogFetchError as exc:
        raise _bad_gateway(exc)


@router.get("/prompts/{slug}", response_model=Prompt)
def get_prompt(
    slug: str,
    service: CatalogService = Depends(get_catalog_service),
):
    """Prompt detail including full content."""
    try:
        prompt = service.get_prompt(slug)
    except CatalogFetchError as exc:
        raise _bad_gateway(exc)

    if prompt is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        )
    return prompt


@router.get("/categories", response_model=list[Category])
def list_categories(service: CatalogService = Depends(get_catalog_service)):
    """Categories in display order."""
    try:
        return service.get_categories()
    except CatalogFetchError as exc:
        raise _bad_gateway(exc)


@router.get("/subscription-plans", response_model=list[SubscriptionPlan])
def list_subscription_plans(service: CatalogService = Depends(get_catalog_service)):
    """Subscription plans, shortest duration first."""
    try:
        return service.get_subscription_plans()
    except CatalogFetchError as exc:
        raise _bad_gateway(exc)
