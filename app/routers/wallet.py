# app/routers/wallet.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import get_ledger
from app.schemas.ledger import TopUpRequest, Wallet
from app.services.ledger_service import LedgerService

router = APIRouter(prefix="/wallet", tags=["Wallet"])


@router.get("", response_model=Wallet)
def get_wallet(ledger: LedgerService = Depends(get_ledger)):
    """
    Current balance and full transaction history.
    """
    return ledger.wallet


@router.post("/topup", response_model=Wallet)
def top_up(
    payload: TopUpRequest,
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Credit the wallet. Amount must be positive.
    """
    if not ledger.top_up_wallet(payload.amount):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Top-up amount must be positive",
        )
    return ledger.wallet
