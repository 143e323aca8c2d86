# app/schemas/ledger.py
import math
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.catalog import Prompt, SubscriptionPlan

TransactionType = Literal["topup", "purchase", "refund"]
TransactionStatus = Literal["pending", "completed", "failed"]
ProductType = Literal["one-time", "subscription"]
ProductStatus = Literal["active", "expired"]
PaymentMethod = Literal["wallet", "card", "bank_transfer"]


class User(SQLModel):
    """
    The single live identity of this storefront session.

    Login is mocked: there is no credential store behind this record.
    """

    id: str
    email: str
    name: str
    created_at: datetime


class CartItem(SQLModel):
    """
    One cart line. Prompt and plan are read-only snapshots of catalog data.

    Uniqueness key: (prompt.id, subscription_plan.id or no plan).
    """

    id: str
    prompt: Prompt
    subscription_plan: SubscriptionPlan | None = None
    added_at: datetime

    @property
    def cart_key(self) -> tuple[str, str | None]:
        plan_id = self.subscription_plan.id if self.subscription_plan else None
        return (self.prompt.id, plan_id)

    @property
    def price(self) -> float:
        if self.subscription_plan is not None:
            return self.subscription_plan.metadata.price
        return self.prompt.metadata.price


class WalletTransaction(SQLModel):
    """
    Wallet history entry. Never edited after it is appended.

    amount is signed: purchases negative, top-ups positive.
    """

    id: str
    type: TransactionType
    amount: float
    description: str
    date: datetime
    status: TransactionStatus = "completed"


class Wallet(SQLModel):
    balance: float
    currency: str
    transactions: list[WalletTransaction] = Field(default_factory=list)


class PurchasedProduct(SQLModel):
    """
    Self-describing purchase record.

    Prompt/plan titles are copied at checkout so the record survives
    catalog edits or deletions. Only renewal mutates it.
    """

    id: str
    prompt_id: str
    prompt_title: str
    prompt_slug: str
    subscription_plan_id: str | None = None
    subscription_plan_title: str | None = None
    purchase_date: datetime
    expiry_date: datetime | None = None
    access_key: str
    access_url: str
    price: float
    type: ProductType
    status: ProductStatus = "active"


class LedgerState(SQLModel):
    """
    Everything the ledger persists, loaded and written as one unit.
    """

    current_user: User | None = None
    cart_items: list[CartItem] = Field(default_factory=list)
    purchased_products: list[PurchasedProduct] = Field(default_factory=list)
    wallet: Wallet


# ---- Request / response payloads ----


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: str = ""
    password: str = ""


class RegisterRequest(LoginRequest):
    name: str = ""


class PaymentMethodData(SQLModel):
    """
    Checkout payment choice. Only `wallet` debits the local wallet;
    other methods are accepted as-is (no gateway integration).
    """

    model_config = ConfigDict(extra="forbid")

    method: PaymentMethod
    reference: str | None = None


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart: the catalog records the UI is showing.
    """

    model_config = ConfigDict(extra="forbid")

    prompt: Prompt
    subscription_plan: SubscriptionPlan | None = None


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartItem]
    total_count: int
    total_price: float


class TopUpRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    amount: float

    @field_validator("amount")
    @classmethod
    def finite_amount(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("amount must be a finite number")
        return v


class RenewRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    price: float

    @field_validator("price")
    @classmethod
    def finite_price(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v


class OwnershipRead(SQLModel):
    prompt_id: str
    purchased: bool
