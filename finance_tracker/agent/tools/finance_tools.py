"""
Financial tools for the assistant.

Eight deterministic tools the model can call: currency conversion,
recording transactions, spending by category, budgets, budget status,
anomaly detection, savings context and goal creation. Read-only tools
delegate the math to the analytics engine; only add_transaction,
create_or_update_budget and create_goal write to the database.

All tools that need "today" or "this month" read it from the injected clock.
"""

import datetime as dt
from typing import Literal

import structlog
from pydantic import BaseModel, Field

from ...core.clock import Clock, current_month, today
from ...database.repositories.budget_repository import BudgetRepository
from ...database.repositories.category_repository import CategoryRepository
from ...database.repositories.goal_repository import GoalRepository
from ...database.repositories.transaction_repository import TransactionRepository
from ...models.budget import MONTH_PATTERN, BudgetUpsert
from ...models.goal import GoalCreate
from ...models.transaction import TransactionCreate
from ...services import analytics
from .registry import NoArguments, ToolSpec

logger = structlog.get_logger()

CATEGORY_HINT = (
    "Category name that best matches the transaction. Choose from common "
    "categories: Food & Dining, Groceries, Transport, Shopping, Entertainment, "
    "Healthcare, Utilities, Education, Travel, Personal Care, Subscriptions, "
    "Salary, Freelance, Investment, or create a new appropriate category."
)


# ===== Argument Models =====


class CurrencyArgs(BaseModel):
    amount: float = Field(..., description="The amount in the source currency")
    from_currency: str = Field(
        ...,
        min_length=1,
        description="Source currency code (e.g., USD, EUR, GBP, JPY, RUB)",
    )


class AddTransactionArgs(BaseModel):
    amount: float = Field(..., gt=0, description="Amount in Indian Rupees (INR)")
    type: Literal["income", "expense"]
    merchant: str | None = Field(
        default=None,
        description=(
            "Merchant or service provider name. If the user mentions a "
            "product/service without a merchant, infer a representative name "
            "(e.g., 'Pizza Place', 'Coffee Shop')."
        ),
    )
    description: str | None = Field(
        default=None,
        description="Details of the transaction, including the product/service mentioned.",
    )
    category_name: str | None = Field(default=None, description=CATEGORY_HINT)
    date: dt.date | None = Field(
        default=None, description="ISO date (YYYY-MM-DD), defaults to today"
    )


class MonthArgs(BaseModel):
    month: str | None = Field(
        default=None,
        pattern=MONTH_PATTERN,
        description="YYYY-MM, defaults to current month",
    )


class BudgetArgs(BaseModel):
    category_name: str = Field(..., min_length=1)
    monthly_limit: float = Field(..., gt=0)
    month: str | None = Field(
        default=None,
        pattern=MONTH_PATTERN,
        description="YYYY-MM, defaults to current month",
    )


class SavingsArgs(BaseModel):
    target_amount: float | None = Field(
        default=None,
        description="Target amount the user wants to save (optional, used for goals)",
    )
    target_date: str | None = Field(
        default=None,
        description="Target date to reach savings goal (YYYY-MM-DD, optional)",
    )


class GoalArgs(BaseModel):
    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Name of the savings goal (e.g., 'Vacation', 'New Laptop')",
    )
    target_amount: float = Field(..., gt=0, description="Target amount to save in Rupees")
    target_date: dt.date = Field(
        ..., description="Target date to achieve the goal (YYYY-MM-DD)"
    )
    current_amount: float | None = Field(
        default=None,
        ge=0,
        description="Current saved amount (optional, defaults to 0)",
    )


# ===== Tool Factory =====


def create_finance_tools(
    category_repo: CategoryRepository,
    transaction_repo: TransactionRepository,
    budget_repo: BudgetRepository,
    goal_repo: GoalRepository,
    clock: Clock,
) -> list[ToolSpec]:
    """
    Create the financial tool catalog bound to repositories and a clock.

    Args:
        category_repo: Category get-or-create and name lookups
        transaction_repo: Transaction inserts and per-category aggregation
        budget_repo: Budget upserts and monthly listing
        goal_repo: Goal inserts
        clock: Time source for default dates and months

    Returns:
        List of ToolSpec in the order they are offered to the model
    """

    async def _expense_totals(user_id: str, month: str) -> list[dict]:
        rows = await transaction_repo.aggregate_by_category(user_id, month=month)
        names = await category_repo.get_names(
            [r["category_id"] for r in rows if r["category_id"]]
        )
        return analytics.category_totals(rows, names)

    async def currency_to_base(user_id: str, args: CurrencyArgs) -> dict:
        return analytics.convert_to_base(args.amount, args.from_currency)

    async def add_transaction(user_id: str, args: AddTransactionArgs) -> dict:
        category_id = None
        if args.category_name:
            category = await category_repo.get_or_create(
                user_id,
                args.category_name,
                type=args.type,
                case_insensitive=True,
            )
            category_id = category.category_id

        transaction = await transaction_repo.create(
            TransactionCreate(
                user_id=user_id,
                amount=args.amount,
                type=args.type,
                category_id=category_id,
                merchant=args.merchant,
                description=args.description,
                date=args.date or today(clock),
            )
        )
        return {"transaction": transaction.model_dump(mode="json")}

    async def spending_by_category(user_id: str, args: MonthArgs) -> dict:
        month = args.month or current_month(clock)
        return {"month": month, "categories": await _expense_totals(user_id, month)}

    async def create_or_update_budget(user_id: str, args: BudgetArgs) -> dict:
        month = args.month or current_month(clock)
        category = await category_repo.get_or_create(
            user_id, args.category_name, create_type="expense"
        )
        budget = await budget_repo.upsert(
            BudgetUpsert(
                user_id=user_id,
                category_id=category.category_id,
                monthly_limit=args.monthly_limit,
                month=month,
            )
        )
        return {"budget": {**budget.model_dump(mode="json"), "category_name": category.name}}

    async def budget_status(user_id: str, args: NoArguments) -> dict:
        month = current_month(clock)
        budgets = await budget_repo.list_by_month(user_id, month)
        rows = await transaction_repo.aggregate_by_category(user_id, month=month)
        names = await category_repo.get_names(
            [b.category_id for b in budgets if b.category_id]
        )
        spent = analytics.spent_by_category(rows)
        return {
            "month": month,
            "items": analytics.budget_status_items(budgets, spent, names),
        }

    async def detect_anomalies(user_id: str, args: NoArguments) -> dict:
        rows = await transaction_repo.aggregate_by_category(user_id)
        averages = {r["category_id"]: r["average"] for r in rows}
        candidates = await transaction_repo.list_expenses_at_or_above(
            user_id, analytics.anomaly_thresholds(averages)
        )
        names = await category_repo.get_names(
            [t.category_id for t in candidates if t.category_id]
        )
        return {"items": analytics.detect_anomalies(candidates, averages, names)}

    async def suggest_savings(user_id: str, args: SavingsArgs) -> dict:
        month = current_month(clock)
        return {
            "month": month,
            "target_amount": args.target_amount,
            "target_date": args.target_date,
            "top_categories": await _expense_totals(user_id, month),
        }

    async def create_goal(user_id: str, args: GoalArgs) -> dict:
        goal = await goal_repo.create(
            GoalCreate(
                user_id=user_id,
                name=args.name,
                target_amount=args.target_amount,
                current_amount=args.current_amount or 0,
                target_date=args.target_date,
            )
        )
        return {"goal": goal.model_dump(mode="json")}

    tools = [
        ToolSpec(
            name="currency_to_base",
            description=(
                "Convert any foreign currency amount to Indian Rupees (INR). Use "
                "this when the user specifies an amount in a foreign currency like "
                "USD, EUR, GBP, etc."
            ),
            args_model=CurrencyArgs,
            handler=currency_to_base,
        ),
        ToolSpec(
            name="add_transaction",
            description=(
                "Add a new income or expense transaction for the current user. When "
                "the user mentions a product, service, or activity (e.g., 'pizza', "
                "'coffee', 'movie'), determine the merchant name and category."
            ),
            args_model=AddTransactionArgs,
            handler=add_transaction,
        ),
        ToolSpec(
            name="spending_by_category",
            description="Get total spending by category for a given month",
            args_model=MonthArgs,
            handler=spending_by_category,
        ),
        ToolSpec(
            name="create_or_update_budget",
            description="Create or update a monthly budget for a category",
            args_model=BudgetArgs,
            handler=create_or_update_budget,
        ),
        ToolSpec(
            name="budget_status",
            description="Get current utilization and color status for all budgets",
            args_model=NoArguments,
            handler=budget_status,
        ),
        ToolSpec(
            name="detect_anomalies",
            description="Detect unusual spending patterns for the user",
            args_model=NoArguments,
            handler=detect_anomalies,
        ),
        ToolSpec(
            name="suggest_savings",
            description=(
                "Suggest ways the user can save money based on recent spending "
                "and goals"
            ),
            args_model=SavingsArgs,
            handler=suggest_savings,
        ),
        ToolSpec(
            name="create_goal",
            description=(
                "Create a savings goal for the user. Use when the user wants to "
                "save a specific amount by a target date."
            ),
            args_model=GoalArgs,
            handler=create_goal,
        ),
    ]

    logger.info("Finance tools created", tool_count=len(tools))
    return tools
