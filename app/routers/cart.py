# app/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import get_ledger, require_auth
from app.schemas.ledger import (
    CartItem,
    CartItemCreate,
    CartSummary,
    PaymentMethodData,
    PurchasedProduct,
    User,
)
from app.services.ledger_service import LedgerService

router = APIRouter(prefix="/cart", tags=["Cart"])


def _summary(ledger: LedgerService) -> CartSummary:
    return CartSummary(
        items=ledger.cart_items,
        total_count=ledger.cart_count,
        total_price=ledger.cart_total,
    )


@router.get("", response_model=CartSummary)
def get_my_cart(ledger: LedgerService = Depends(get_ledger)):
    """
    Get the cart summary (guests may browse with a cart too).
    """
    return _summary(ledger)


@router.post("", response_model=CartItem, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    payload: CartItemCreate,
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Add a prompt (optionally with a subscription plan) to the cart.

    The same prompt/plan pair can only be in the cart once => 409.
    """
    item = ledger.build_cart_item(payload.prompt, payload.subscription_plan)
    if not ledger.add_to_cart(item):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Item already in cart",
        )
    return item


@router.delete("/{item_id}", response_model=CartSummary)
def remove_cart_item(
    item_id: str,
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Remove a cart line by id. Unknown ids are ignored.
    """
    ledger.remove_from_cart(item_id)
    return _summary(ledger)


@router.delete("", response_model=CartSummary)
def clear_cart(ledger: LedgerService = Depends(get_ledger)):
    """
    Clear the entire cart.
    """
    ledger.clear_cart()
    return _summary(ledger)


@router.post("/checkout", response_model=list[PurchasedProduct])
def checkout(
    payload: PaymentMethodData,
    ledger: LedgerService = Depends(get_ledger),
    current_user: User = Depends(require_auth),
):
    """
    Purchase everything in the cart.

    Returns the products created by this checkout.

    Errors:
      - 400 if the cart is empty
      - 402 if paying by wallet and the balance does not cover the total
    """
    before = len(ledger.state.purchased_products)
    if not ledger.complete_purchase(payload):
        if not ledger.cart_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Insufficient wallet balance",
        )
    return ledger.list_purchases()[before:]
