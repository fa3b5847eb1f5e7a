"""
Dependencies for chat and analytics API endpoints.

Everything here is built once in the application lifespan and stored on
app.state; providers only hand it out.
"""

from fastapi import Request

from ...agent.finance_agent import FinanceAgent
from ...core.clock import Clock
from ...database.mongodb import MongoDB
from ...database.repositories.budget_repository import BudgetRepository
from ...database.repositories.category_repository import CategoryRepository
from ...database.repositories.message_repository import MessageRepository
from ...database.repositories.transaction_repository import TransactionRepository

# ===== MongoDB and Repository Dependencies =====


def get_mongodb(request: Request) -> MongoDB:
    """Get MongoDB instance from app state."""
    mongodb: MongoDB = request.app.state.mongodb
    return mongodb


def get_message_repository(request: Request) -> MessageRepository:
    """Get message repository instance."""
    message_repo: MessageRepository = request.app.state.message_repo
    return message_repo


def get_category_repository(request: Request) -> CategoryRepository:
    """Get category repository instance."""
    category_repo: CategoryRepository = request.app.state.category_repo
    return category_repo


def get_transaction_repository(request: Request) -> TransactionRepository:
    """Get transaction repository instance."""
    transaction_repo: TransactionRepository = request.app.state.transaction_repo
    return transaction_repo


def get_budget_repository(request: Request) -> BudgetRepository:
    """Get budget repository instance."""
    budget_repo: BudgetRepository = request.app.state.budget_repo
    return budget_repo


# ===== Agent Dependencies =====


def get_clock(request: Request) -> Clock:
    """Get the process-wide time source."""
    clock: Clock = request.app.state.clock
    return clock


def get_finance_agent(request: Request) -> FinanceAgent:
    """Get the financial assistant built at startup."""
    agent: FinanceAgent = request.app.state.agent
    return agent
