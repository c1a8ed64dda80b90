import logging

from fastapi import APIRouter, Depends, HTTPException, status

from spendwise.core.config import Settings
from spendwise.core.security import create_access_token, get_password_hash, verify_password
from spendwise.db.interface import ExpenseStore
from spendwise.models.user import UserCreate, UserInDB, UserLogin, UserPublic
from spendwise.routers.deps import get_current_user_id, get_settings, get_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, store: ExpenseStore = Depends(get_store)):
    # Stores match emails exactly, so they are kept lowercased
    email = user.email.lower()
    existing = store.get_user_by_email(email)
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user_db = UserInDB(
        email=email,
        password_hash=get_password_hash(user.password),
        display_name=user.display_name,
    )
    store.put_user(user_db)
    logger.info(f"Registered user {user_db.user_id}")

    return UserPublic(**user_db.model_dump())


@router.post("/login")
def login(
    login_data: UserLogin,
    store: ExpenseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    logger.info(f"Login attempt for email: {login_data.email}")
    user = store.get_user_by_email(login_data.email.lower())

    if not user:
        logger.warning(f"User not found: {login_data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not verify_password(login_data.password, user.password_hash):
        logger.warning(f"Invalid password for user: {login_data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": user.user_id}, settings=settings)
    logger.info(f"Login successful for user: {login_data.email}")

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UserPublic(**user.model_dump()).model_dump(),
    }


@router.get("/me", response_model=UserPublic)
def get_current_user(user_id: str = Depends(get_current_user_id), store: ExpenseStore = Depends(get_store)):
    """Get current user profile"""
    user = store.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserPublic(**user.model_dump())
