# app/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import get_ledger, require_auth
from app.schemas.ledger import LoginRequest, RegisterRequest, User
from app.services.ledger_service import LedgerService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=User)
def login(
    payload: LoginRequest,
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Mock login: any non-empty email + password starts a session.
    """
    if not ledger.login(payload.email, payload.password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )
    return ledger.current_user


@router.post("/register", response_model=User)
def register(
    payload: RegisterRequest,
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Mock registration: email, password and name must be non-empty.
    """
    if not ledger.register(payload.email, payload.password, payload.name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email, password and name are required",
        )
    return ledger.current_user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(ledger: LedgerService = Depends(get_ledger)):
    """
    End the session. The cart is cleared; wallet and purchases are kept.
    """
    ledger.logout()


@router.get("/me", response_model=User)
def get_me(current_user: User = Depends(require_auth)):
    """Return the current logged-in user."""
    return current_user
