"""
Pydantic models for MongoDB collections.
Provides type safety and validation for database operations.
"""

from .budget import Budget, BudgetUpsert
from .category import Category, CategoryCreate, TransactionType
from .goal import Goal, GoalCreate
from .message import ConversationMessage, MessageRole
from .transaction import Transaction, TransactionCreate

__all__ = [
    "Budget",
    "BudgetUpsert",
    "Category",
    "CategoryCreate",
    "TransactionType",
    "Goal",
    "GoalCreate",
    "ConversationMessage",
    "MessageRole",
    "Transaction",
    "TransactionCreate",
]
