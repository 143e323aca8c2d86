# app/models/storage.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class StorageRecord(SQLModel, table=True):
    """
    One named record of persisted ledger state.

    Keys used by the ledger:
      - currentUser, cartItems, purchasedProducts, wallet

    The value is the JSON document for that record. A missing row means
    "not yet initialized" and the ledger falls back to its default.
    """

    __tablename__ = "storage_records"

    key: str = Field(
        primary_key=True,
        max_length=64,
    )

    value: str = Field(
        description="JSON-encoded record",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write timestamp (UTC)",
    )
