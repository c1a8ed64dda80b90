from datetime import date, datetime

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from spendwise.core.config import Settings
from spendwise.core.security import decode_access_token
from spendwise.db.interface import ExpenseStore
from spendwise.services.ai import InsightClient

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ExpenseStore:
    return request.app.state.store


def get_ai_client(request: Request) -> InsightClient:
    return request.app.state.ai_client


def get_current_user_id(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    """Extract user_id from JWT token"""
    payload = decode_access_token(token, settings)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user_id


def get_today() -> date:
    """Reference date for days-remaining calculations."""
    return datetime.utcnow().date()
