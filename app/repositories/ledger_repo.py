# app/repositories/ledger_repo.py
from datetime import datetime, timezone

from pydantic import TypeAdapter
from sqlmodel import Session

from app.models.storage import StorageRecord
from app.schemas.ledger import CartItem, LedgerState, PurchasedProduct, User, Wallet

CURRENT_USER_KEY = "currentUser"
CART_ITEMS_KEY = "cartItems"
PURCHASED_PRODUCTS_KEY = "purchasedProducts"
WALLET_KEY = "wallet"

_cart_adapter = TypeAdapter(list[CartItem])
_purchases_adapter = TypeAdapter(list[PurchasedProduct])


class LedgerRepository:
    """
    Data access layer for the persisted ledger state.

    - Four independent records, each optional (absent => default).
    - load() reads all of them; save() overwrites all of them and
      commits once, so a write is never partial.
    """

    def __init__(self, starting_balance: float, currency: str):
        self.starting_balance = starting_balance
        self.currency = currency

    def default_wallet(self) -> Wallet:
        return Wallet(balance=self.starting_balance, currency=self.currency)

    def default_state(self) -> LedgerState:
        return LedgerState(wallet=self.default_wallet())

    # ---- raw records ----

    def get_record(self, session: Session, key: str) -> str | None:
        record = session.get(StorageRecord, key)
        return record.value if record else None

    def put_record(self, session: Session, key: str, value: str) -> None:
        """
        Upsert without committing; the caller owns the transaction.
        """
        record = session.get(StorageRecord, key)
        if record is None:
            record = StorageRecord(key=key, value=value)
        else:
            record.value = value
            record.updated_at = datetime.now(timezone.utc)
        session.add(record)

    def remove_record(self, session: Session, key: str) -> None:
        record = session.get(StorageRecord, key)
        if record is not None:
            session.delete(record)

    # ---- whole state ----

    def load(self, session: Session) -> LedgerState:
        state = self.default_state()

        raw_user = self.get_record(session, CURRENT_USER_KEY)
        if raw_user:
            state.current_user = User.model_validate_json(raw_user)

        raw_cart = self.get_record(session, CART_ITEMS_KEY)
        if raw_cart:
            state.cart_items = _cart_adapter.validate_json(raw_cart)

        raw_purchases = self.get_record(session, PURCHASED_PRODUCTS_KEY)
        if raw_purchases:
            state.purchased_products = _purchases_adapter.validate_json(raw_purchases)

        raw_wallet = self.get_record(session, WALLET_KEY)
        if raw_wallet:
            state.wallet = Wallet.model_validate_json(raw_wallet)

        return state

    def save(self, session: Session, state: LedgerState) -> None:
        if state.current_user is not None:
            self.put_record(session, CURRENT_USER_KEY, state.current_user.model_dump_json())
        else:
            self.remove_record(session, CURRENT_USER_KEY)

        self.put_record(
            session, CART_ITEMS_KEY, _cart_adapter.dump_json(state.cart_items).decode()
        )
        self.put_record(
            session,
            PURCHASED_PRODUCTS_KEY,
            _purchases_adapter.dump_json(state.purchased_products).decode(),
        )
        self.put_record(session, WALLET_KEY, state.wallet.model_dump_json())

        session.commit()
