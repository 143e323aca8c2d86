# app/services/ledger_service.py
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlmodel import Session

from app.core.ids import new_access_key, new_id
from app.repositories.ledger_repo import LedgerRepository
from app.schemas.catalog import Prompt, SubscriptionPlan
from app.schemas.ledger import (
    CartItem,
    LedgerState,
    PaymentMethodData,
    PurchasedProduct,
    User,
    Wallet,
    WalletTransaction,
)

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_DAYS = 30
DEFAULT_ACCESS_URL_BASE = "https://api.promptos.com/access"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerService:
    """
    Client-side commerce ledger: identity, cart, wallet and purchases.

    Responsibilities:
      - own the single in-memory LedgerState for this session
      - enforce cart uniqueness, wallet sufficiency and expiry rules
      - write the whole state through to storage after every mutation

    Validation rejections (empty credentials, duplicate cart key,
    insufficient balance, unknown product...) return False and leave
    state untouched. Mutations are applied to a copy, persisted, then
    swapped in, so a storage failure also leaves state untouched.

    Login is a mock: any non-empty email/password is accepted and no
    credential is ever checked. Real authentication must live outside
    this component.
    """

    def __init__(
        self,
        repo: LedgerRepository,
        session_factory: Callable[[], Session],
        *,
        subscription_block_days: int = DEFAULT_BLOCK_DAYS,
        access_url_base: str = DEFAULT_ACCESS_URL_BASE,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = new_id,
    ):
        self.repo = repo
        self.session_factory = session_factory
        self.block = timedelta(days=subscription_block_days)
        self.access_url_base = access_url_base.rstrip("/")
        self.clock = clock
        self.new_id = id_factory
        self.state: LedgerState = repo.default_state()

    # ---- lifecycle ----

    def load(self) -> LedgerState:
        """Read all persisted records into memory (once, at startup)."""
        with self.session_factory() as session:
            self.state = self.repo.load(session)
        logger.info(
            "Ledger loaded: user=%s cart=%d purchases=%d balance=%s",
            self.state.current_user.id if self.state.current_user else None,
            len(self.state.cart_items),
            len(self.state.purchased_products),
            self.state.wallet.balance,
        )
        return self.state

    def reset(self) -> None:
        """Drop everything back to defaults (fresh wallet, no user) and persist."""
        self._commit(self.repo.default_state())

    # ---- internal helpers ----

    def _draft(self) -> LedgerState:
        return self.state.model_copy(deep=True)

    def _commit(self, draft: LedgerState) -> None:
        with self.session_factory() as session:
            self.repo.save(session, draft)
        self.state = draft

    def _transaction(self, kind: str, amount: float, description: str) -> WalletTransaction:
        return WalletTransaction(
            id=self.new_id(),
            type=kind,
            amount=amount,
            description=description,
            date=self.clock(),
            status="completed",
        )

    def _is_lapsed(self, product: PurchasedProduct, now: datetime) -> bool:
        """
        Subscription status evaluated at read time: a stored "active"
        subscription whose expiry has passed counts as expired.
        """
        if product.type != "subscription":
            return False
        if product.status == "expired":
            return True
        return product.expiry_date is not None and product.expiry_date <= now

    # ---- derived state ----

    @property
    def current_user(self) -> User | None:
        return self.state.current_user

    @property
    def cart_items(self) -> list[CartItem]:
        return self.state.cart_items

    @property
    def wallet(self) -> Wallet:
        return self.state.wallet

    @property
    def is_logged_in(self) -> bool:
        return self.state.current_user is not None

    @property
    def cart_count(self) -> int:
        return len(self.state.cart_items)

    @property
    def cart_total(self) -> float:
        return sum(item.price for item in self.state.cart_items)

    # ---- auth ----

    def login(self, email: str, password: str) -> bool:
        if not email or not password:
            return False

        draft = self._draft()
        draft.current_user = User(
            id=self.new_id(),
            email=email,
            name=email.split("@", 1)[0],
            created_at=self.clock(),
        )
        self._commit(draft)
        logger.info("User %s logged in", draft.current_user.id)
        return True

    def register(self, email: str, password: str, name: str) -> bool:
        if not email or not password or not name:
            return False

        draft = self._draft()
        draft.current_user = User(
            id=self.new_id(),
            email=email,
            name=name,
            created_at=self.clock(),
        )
        self._commit(draft)
        logger.info("User %s registered", draft.current_user.id)
        return True

    def logout(self) -> None:
        """Clear identity and cart. Wallet and purchases survive."""
        draft = self._draft()
        draft.current_user = None
        draft.cart_items = []
        self._commit(draft)

    # ---- cart ----

    def build_cart_item(
        self,
        prompt: Prompt,
        subscription_plan: SubscriptionPlan | None = None,
    ) -> CartItem:
        return CartItem(
            id=self.new_id(),
            prompt=prompt,
            subscription_plan=subscription_plan,
            added_at=self.clock(),
        )

    def add_to_cart(self, item: CartItem) -> bool:
        if any(existing.cart_key == item.cart_key for existing in self.state.cart_items):
            logger.info("Rejected duplicate cart entry %s", item.cart_key)
            return False

        draft = self._draft()
        draft.cart_items.append(item.model_copy(deep=True))
        self._commit(draft)
        return True

    def remove_from_cart(self, item_id: str) -> None:
        draft = self._draft()
        draft.cart_items = [it for it in draft.cart_items if it.id != item_id]
        self._commit(draft)

    def clear_cart(self) -> None:
        draft = self._draft()
        draft.cart_items = []
        self._commit(draft)

    # ---- purchases ----

    def complete_purchase(self, payment: PaymentMethodData) -> bool:
        """
        Turn the cart into purchased products, all or nothing.

        Steps:
          1. Require a logged-in user and a non-empty cart.
          2. For wallet payments, require balance >= cart total.
          3. Debit the wallet once (wallet payments only).
          4. Create one PurchasedProduct per cart line; subscriptions
             expire after duration_months fixed 30-day blocks.
          5. Clear the cart and persist once.
        """
        if not self.is_logged_in:
            logger.info("Checkout rejected: not logged in")
            return False

        if not self.state.cart_items:
            logger.info("Checkout rejected: cart is empty")
            return False

        total = self.cart_total
        use_wallet = payment.method == "wallet"

        if use_wallet and self.state.wallet.balance < total:
            logger.info(
                "Checkout rejected: balance %s < total %s",
                self.state.wallet.balance,
                total,
            )
            return False

        now = self.clock()
        draft = self._draft()

        if use_wallet:
            draft.wallet.balance -= total
            draft.wallet.transactions.append(
                self._transaction("purchase", -total, "Prompt purchase")
            )

        for item in draft.cart_items:
            plan = item.subscription_plan
            expiry_date = None
            if plan is not None:
                expiry_date = now + self.block * plan.metadata.duration_months

            draft.purchased_products.append(
                PurchasedProduct(
                    id=self.new_id(),
                    prompt_id=item.prompt.id,
                    prompt_title=item.prompt.title,
                    prompt_slug=item.prompt.slug,
                    subscription_plan_id=plan.id if plan else None,
                    subscription_plan_title=plan.title if plan else None,
                    purchase_date=now,
                    expiry_date=expiry_date,
                    access_key=new_access_key(),
                    access_url=f"{self.access_url_base}/{self.new_id()}",
                    price=item.price,
                    type="subscription" if plan else "one-time",
                    status="active",
                )
            )

        line_count = len(draft.cart_items)
        draft.cart_items = []
        self._commit(draft)

        logger.info(
            "Checkout completed: %d item(s), total=%s, method=%s",
            line_count,
            total,
            payment.method,
        )
        return True

    def renew_subscription(self, product_id: str, price: float) -> bool:
        """
        Pay `price` from the wallet and extend the product by one 30-day
        block from its current expiry (or from now if it has none).
        Status becomes active regardless of what it was.
        """
        if not self.is_logged_in or not math.isfinite(price) or price < 0:
            return False
        if self.state.wallet.balance < price:
            return False

        draft = self._draft()
        product = next((p for p in draft.purchased_products if p.id == product_id), None)
        if product is None:
            return False

        draft.wallet.balance -= price
        draft.wallet.transactions.append(
            self._transaction("purchase", -price, f"Renewal: {product.prompt_title}")
        )

        base = product.expiry_date or self.clock()
        product.expiry_date = base + self.block
        product.status = "active"

        self._commit(draft)
        logger.info("Renewed %s until %s", product_id, product.expiry_date.isoformat())
        return True

    def get_purchase(self, product_id: str) -> PurchasedProduct | None:
        for product in self.list_purchases():
            if product.id == product_id:
                return product
        return None

    def list_purchases(self) -> list[PurchasedProduct]:
        """
        Purchases with subscription status evaluated against the clock.
        The stored records are not modified.
        """
        now = self.clock()
        result: list[PurchasedProduct] = []
        for product in self.state.purchased_products:
            if product.status == "active" and self._is_lapsed(product, now):
                product = product.model_copy(update={"status": "expired"})
            result.append(product)
        return result

    def has_purchased(self, prompt_id: str) -> bool:
        now = self.clock()
        return any(
            p.prompt_id == prompt_id and (p.type == "one-time" or not self._is_lapsed(p, now))
            for p in self.state.purchased_products
        )

    def expire_overdue(self) -> int:
        """
        Persist the active -> expired transition for every subscription
        past its expiry. Returns how many products changed.
        """
        now = self.clock()
        draft = self._draft()
        changed = 0
        for product in draft.purchased_products:
            if product.status == "active" and self._is_lapsed(product, now):
                product.status = "expired"
                changed += 1

        if changed:
            self._commit(draft)
            logger.info("Marked %d subscription(s) as expired", changed)
        return changed

    # ---- wallet ----

    def top_up_wallet(self, amount: float) -> bool:
        if not math.isfinite(amount) or amount <= 0:
            return False

        draft = self._draft()
        draft.wallet.balance += amount
        draft.wallet.transactions.append(
            self._transaction("topup", amount, "Wallet top-up")
        )
        self._commit(draft)
        logger.info("Wallet topped up by %s", amount)
        return True
