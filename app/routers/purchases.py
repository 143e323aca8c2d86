# app/routers/purchases.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import get_ledger, require_auth
from app.schemas.ledger import OwnershipRead, PurchasedProduct, RenewRequest, User
from app.services.ledger_service import LedgerService

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.get("", response_model=list[PurchasedProduct])
def list_purchases(ledger: LedgerService = Depends(get_ledger)):
    """
    All purchased products, subscription status evaluated as of now.
    """
    return ledger.list_purchases()


@router.get("/owned/{prompt_id}", response_model=OwnershipRead)
def is_owned(
    prompt_id: str,
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Whether the prompt is owned outright or via an unexpired subscription.
    """
    return OwnershipRead(prompt_id=prompt_id, purchased=ledger.has_purchased(prompt_id))


@router.post("/{product_id}/renew", response_model=PurchasedProduct)
def renew(
    product_id: str,
    payload: RenewRequest,
    ledger: LedgerService = Depends(get_ledger),
    current_user: User = Depends(require_auth),
):
    """
    Renew a subscription for one more 30-day block, paid from the wallet.

    Errors:
      - 404 if the product is unknown
      - 402 if the wallet cannot cover the price
      - 400 for a negative price
    """
    if ledger.get_purchase(product_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Purchased product not found",
        )
    if payload.price < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Price cannot be negative",
        )
    if not ledger.renew_subscription(product_id, payload.price):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Insufficient wallet balance",
        )
    return ledger.get_purchase(product_id)
