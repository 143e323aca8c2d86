# app/core/auth.py
from fastapi import Depends, HTTPException, Request, status

from app.core.config import Settings, get_settings
from app.database import new_session
from app.repositories.ledger_repo import LedgerRepository
from app.schemas.ledger import User
from app.services.ledger_service import LedgerService


def build_ledger(settings: Settings | None = None) -> LedgerService:
    """
    Construct the ledger for one storefront session, wired to local storage.

    The caller is responsible for calling `load()` before use.
    """
    settings = settings or get_settings()
    repo = LedgerRepository(
        starting_balance=settings.WALLET_STARTING_BALANCE,
        currency=settings.WALLET_CURRENCY,
    )
    return LedgerService(
        repo,
        new_session,
        subscription_block_days=settings.SUBSCRIPTION_BLOCK_DAYS,
        access_url_base=settings.ACCESS_URL_BASE,
    )


def get_ledger(request: Request) -> LedgerService:
    """
    FastAPI dependency returning the ledger created at startup.
    """
    return request.app.state.ledger


def get_current_user(ledger: LedgerService = Depends(get_ledger)) -> User | None:
    """
    Resolve the mocked session identity.

    There is no token and no credential check: whoever holds this
    storage location is the user. Returns None for guests.
    """
    return ledger.current_user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce a logged-in session.

    Raises:
        HTTPException(401): if nobody is logged in.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user
