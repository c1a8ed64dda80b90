import logging
from typing import Optional

import boto3
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from spendwise.core.config import Settings, settings as default_settings
from spendwise.core.exceptions import AIServiceError, InvalidAmountError, StoreError
from spendwise.db.dynamo import DynamoStore
from spendwise.db.interface import ExpenseStore
from spendwise.db.memory import MemoryStore
from spendwise.routers import auth, expenses, goals, health
from spendwise.services.ai import InsightClient

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> ExpenseStore:
    """Create the store selected by STORE_BACKEND."""
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        logger.warning("Using in-memory store; data is lost on restart")
        return MemoryStore()
    if backend == "dynamodb":
        dynamodb = boto3.resource(
            "dynamodb",
            region_name=settings.DYNAMO_REGION,
            endpoint_url=settings.DYNAMO_ENDPOINT_URL,
        )
        return DynamoStore(
            dynamodb,
            users_table=settings.DYNAMO_USERS_TABLE,
            expenses_table=settings.DYNAMO_EXPENSES_TABLE,
            goals_table=settings.DYNAMO_GOALS_TABLE,
        )
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")


async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


async def ai_error_handler(request: Request, exc: AIServiceError):
    return JSONResponse(status_code=502, content={"detail": "AI service unavailable"})


async def invalid_amount_handler(request: Request, exc: InvalidAmountError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ExpenseStore] = None,
    ai_client: Optional[InsightClient] = None,
) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG)

    # Settings and collaborators live on app.state and reach routes through dependencies
    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)
    app.state.ai_client = ai_client if ai_client is not None else InsightClient.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        max_age=3600,
    )

    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(AIServiceError, ai_error_handler)
    app.add_exception_handler(InvalidAmountError, invalid_amount_handler)

    @app.get("/")
    def root():
        return {"message": f"Welcome to {settings.PROJECT_NAME} API"}

    app.include_router(health.router, prefix=f"{settings.API_PREFIX}", tags=["Health"])  # /api/health
    app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])
    app.include_router(expenses.router, prefix=f"{settings.API_PREFIX}/expenses", tags=["Expenses"])
    app.include_router(goals.router, prefix=f"{settings.API_PREFIX}/goals", tags=["Saving Goals"])

    logger.info(f"{settings.PROJECT_NAME} started with {type(app.state.store).__name__}")
    return app
