"""Shared fixtures: in-memory storage, a fixed clock, catalog records."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Point local storage at a throwaway file before app modules read settings
_tmpdir = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_tmpdir}/storefront.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.cosmic_client import ContentNotFoundError
from app.models import storage as _storage_models  # noqa: F401
from app.repositories.ledger_repo import LedgerRepository
from app.schemas.catalog import Prompt, SubscriptionPlan
from app.services.catalog_service import CatalogService
from app.services.ledger_service import LedgerService

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeContentStore:
    """
    Stands in for CosmicClient. `objects` maps object type -> raw dicts;
    set `error` to make every call raise it.
    """

    def __init__(self, objects: dict[str, list[dict]] | None = None):
        self.objects = objects or {}
        self.error: Exception | None = None
        self.calls: list[tuple] = []

    def find(self, object_type, filters=None, *, props, depth=None, limit=None):
        self.calls.append((object_type, filters, tuple(props), depth))
        if self.error is not None:
            raise self.error
        matched = [
            obj
            for obj in self.objects.get(object_type, [])
            if _matches(obj, filters or {})
        ]
        if not matched:
            raise ContentNotFoundError("No objects found", status_code=404)
        return matched[:limit] if limit else matched

    def find_one(self, object_type, filters, *, props, depth=None):
        return self.find(object_type, filters, props=props, depth=depth, limit=1)[0]


def _matches(obj: dict, filters: dict) -> bool:
    for key, expected in filters.items():
        value = obj
        for part in key.split("."):
            value = value.get(part) if isinstance(value, dict) else None
        if isinstance(value, dict):
            value = value.get("id")
        if value != expected:
            return False
    return True


def prompt_data(
    id: str = "p1",
    price: float = 50000,
    featured: bool = False,
    category: dict | str | None = None,
) -> dict:
    return {
        "id": id,
        "slug": f"prompt-{id}",
        "title": f"Prompt {id}",
        "type": "prompts",
        "metadata": {
            "description": "A prompt",
            "price": price,
            "is_featured": featured,
            "category": category,
            "prompt_content": "You are a helpful assistant.",
        },
    }


def plan_data(id: str = "plan-1m", months: int = 1, price: float = 120000) -> dict:
    return {
        "id": id,
        "slug": id,
        "title": f"{months} month(s)",
        "type": "subscription-plans",
        "metadata": {"duration_months": months, "price": price, "features": "All prompts"},
    }


def make_prompt(**kwargs) -> Prompt:
    return Prompt.model_validate(prompt_data(**kwargs))


def make_plan(**kwargs) -> SubscriptionPlan:
    return SubscriptionPlan.model_validate(plan_data(**kwargs))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo():
    return LedgerRepository(starting_balance=500000, currency="VND")


@pytest.fixture
def ledger_factory(engine, repo, clock):
    def factory() -> LedgerService:
        ledger = LedgerService(repo, lambda: Session(engine), clock=clock)
        ledger.load()
        return ledger

    return factory


@pytest.fixture
def ledger(ledger_factory):
    return ledger_factory()


@pytest.fixture
def logged_in_ledger(ledger):
    assert ledger.login("buyer@example.com", "secret")
    return ledger


@pytest.fixture
def content_store():
    return FakeContentStore()


@pytest.fixture
def client(ledger, content_store):
    from app.main import app
    from app.routers.catalog import get_catalog_service

    app.state.ledger = ledger
    app.dependency_overrides[get_catalog_service] = lambda: CatalogService(content_store)
    yield TestClient(app)
    app.dependency_overrides.clear()
