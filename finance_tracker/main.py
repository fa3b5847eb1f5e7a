"""
FastAPI application entry point for the Finance Tracker assistant.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .agent.finance_agent import FinanceAgent
from .agent.llm_client import OpenRouterClient
from .agent.tools import ToolRegistry, create_finance_tools
from .api.analytics import router as analytics_router
from .api.chat import router as chat_router
from .api.health import router as health_router
from .core.clock import SystemClock
from .core.config import get_settings
from .core.exceptions import AppError
from .database.mongodb import MongoDB
from .database.repositories import (
    BudgetRepository,
    CategoryRepository,
    GoalRepository,
    MessageRepository,
    TransactionRepository,
)

logging.basicConfig(level=logging.INFO)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: database connection, repositories and the agent."""
    settings = get_settings()

    logger.info("Starting Finance Tracker", environment=settings.environment)

    mongodb = MongoDB()
    llm_client: OpenRouterClient | None = None

    try:
        await mongodb.connect(settings.mongodb_url)

        clock = SystemClock()

        message_repo = MessageRepository(mongodb.get_collection("messages"), clock=clock)
        category_repo = CategoryRepository(mongodb.get_collection("categories"), clock=clock)
        transaction_repo = TransactionRepository(
            mongodb.get_collection("transactions"), clock=clock
        )
        budget_repo = BudgetRepository(mongodb.get_collection("budgets"), clock=clock)
        goal_repo = GoalRepository(mongodb.get_collection("goals"), clock=clock)

        for repo in (message_repo, category_repo, transaction_repo, budget_repo, goal_repo):
            await repo.ensure_indexes()
        logger.info("Repository indexes created")

        registry = ToolRegistry(
            create_finance_tools(category_repo, transaction_repo, budget_repo, goal_repo, clock)
        )
        llm_client = OpenRouterClient(settings)
        agent = FinanceAgent(message_repo, registry, llm_client, settings, clock=clock)

        app.state.mongodb = mongodb
        app.state.clock = clock
        app.state.message_repo = message_repo
        app.state.category_repo = category_repo
        app.state.transaction_repo = transaction_repo
        app.state.budget_repo = budget_repo
        app.state.goal_repo = goal_repo
        app.state.agent = agent

        logger.info("Finance assistant initialized", tools=registry.names())

        yield

    finally:
        if llm_client is not None:
            await llm_client.close()
        await mongodb.disconnect()
        logger.info("Database connections stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Finance Tracker API",
        description="Personal finance tracker with a tool-calling assistant",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Map AppError subclasses to their HTTP status codes."""
        logger.error(
            "Application error occurred",
            path=request.url.path,
            method=request.method,
            **exc.to_dict(),
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_type": exc.error_type},
        )

    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(chat_router)
    app.include_router(analytics_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint for basic connectivity check."""
        return {
            "message": "Finance Tracker API",
            "version": __version__,
            "environment": settings.environment,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "finance_tracker.main:app",
        host="0.0.0.0",  # nosec B104 - Required for Docker container
        port=8000,
        reload=settings.is_development,
        log_config=None,  # Use structlog configuration
    )
