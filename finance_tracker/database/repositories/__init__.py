"""
Repository layer for MongoDB data access.
Provides clean abstraction over database operations.
"""

from .budget_repository import BudgetRepository
from .category_repository import CategoryRepository
from .goal_repository import GoalRepository
from .message_repository import MessageRepository
from .transaction_repository import TransactionRepository

__all__ = [
    "BudgetRepository",
    "CategoryRepository",
    "GoalRepository",
    "MessageRepository",
    "TransactionRepository",
]
