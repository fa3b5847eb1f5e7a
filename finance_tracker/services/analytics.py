"""
Financial analytics engine.

Pure classification over transaction records and the per-category rows the
transaction repository aggregates in MongoDB: category totals, budget
utilization, anomaly detection, currency conversion and the monthly summary.
Nothing here touches the database; callers load rows through the
repositories and pass them in. All monetary results are rounded to 2
decimal places.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from ..core.exceptions import ToolExecutionError
from ..models.budget import Budget
from ..models.transaction import Transaction

BudgetHealth = Literal["green", "yellow", "red"]

# Average conversion rates to the base currency (INR)
EXCHANGE_RATES: dict[str, float] = {
    "USD": 83.50,
    "EUR": 91.00,
    "GBP": 106.00,
    "JPY": 0.57,
    "RUB": 0.92,
    "INR": 1.00,
}

UNCATEGORIZED = "Uncategorized"

# Utilization thresholds (inclusive lower bounds)
RED_THRESHOLD = 0.90
YELLOW_THRESHOLD = 0.70

# A transaction is anomalous at or above this multiple of its category mean
ANOMALY_MULTIPLIER = 2


def _money(value: float) -> float:
    return round(value, 2)


def convert_to_base(amount: float, from_currency: str) -> dict[str, Any]:
    """
    Convert an amount to the base currency with the fixed rate table.

    Args:
        amount: Amount in the source currency
        from_currency: ISO code, any case (e.g., "usd")

    Returns:
        Dict with original amount/currency, converted amount and rate

    Raises:
        ToolExecutionError: If the currency is not in the rate table
    """
    currency = from_currency.strip().upper()
    rate = EXCHANGE_RATES.get(currency)

    if rate is None:
        supported = ", ".join(EXCHANGE_RATES)
        raise ToolExecutionError(
            f"Currency {currency} not supported. Supported currencies: {supported}",
            tool_name="currency_to_base",
        )

    converted = _money(amount * rate)
    return {
        "original_amount": amount,
        "original_currency": currency,
        "inr_amount": converted,
        "exchange_rate": rate,
        "message": (
            f"{amount} {currency} = ₹{converted:.2f} "
            f"(Rate: 1 {currency} = ₹{rate:.2f})"
        ),
    }


def category_totals(
    category_rows: Iterable[Mapping[str, Any]],
    category_names: Mapping[str, str],
) -> list[dict[str, Any]]:
    """
    Per-category totals keyed by display name.

    Rows come from the repository's per-category aggregation. A row without
    a category (or whose category no longer resolves) lands in the
    "Uncategorized" bucket. Grouping is by display name, so duplicate
    categories with the same name are merged.

    Returns:
        [{"category": name, "total": amount}] sorted by total descending
    """
    totals: dict[str, float] = defaultdict(float)
    for row in category_rows:
        name = UNCATEGORIZED
        if row["category_id"]:
            name = category_names.get(row["category_id"], UNCATEGORIZED)
        totals[name] += row["total"]

    rows = [
        {"category": name, "total": _money(total)} for name, total in totals.items()
    ]
    rows.sort(key=lambda row: row["total"], reverse=True)
    return rows


def classify_utilization(utilization: float) -> BudgetHealth:
    """Map a spent/limit ratio to a traffic-light status."""
    if utilization >= RED_THRESHOLD:
        return "red"
    if utilization >= YELLOW_THRESHOLD:
        return "yellow"
    return "green"


def utilization_ratio(spent: float, monthly_limit: float) -> float:
    """spent/limit, or 0 when the limit is not positive."""
    if monthly_limit <= 0:
        return 0.0
    return spent / monthly_limit


def spent_by_category(
    category_rows: Iterable[Mapping[str, Any]],
) -> dict[str | None, float]:
    """category_id -> total from aggregated rows."""
    return {row["category_id"]: row["total"] for row in category_rows}


def budget_status_items(
    budgets: Iterable[Budget],
    spent: Mapping[str | None, float],
    category_names: Mapping[str, str],
) -> list[dict[str, Any]]:
    """
    Utilization and status for each budget.

    Args:
        budgets: Budgets for one month
        spent: category_id -> expense total for the same month
        category_names: category_id -> name

    Returns:
        One item per budget with spent, utilization and status added
    """
    items = []
    for budget in budgets:
        amount = _money(spent.get(budget.category_id, 0.0))
        utilization = utilization_ratio(amount, budget.monthly_limit)
        items.append(
            {
                **budget.model_dump(mode="json"),
                "category_name": category_names.get(budget.category_id)
                if budget.category_id
                else None,
                "spent": amount,
                "utilization": utilization,
                "status": classify_utilization(utilization),
            }
        )
    return items


def anomaly_thresholds(
    category_averages: Mapping[str | None, float],
) -> dict[str | None, float]:
    """
    Minimum anomalous amount per category.

    Categories whose mean is zero never produce a flag and are left out.
    """
    return {
        category_id: ANOMALY_MULTIPLIER * mean
        for category_id, mean in category_averages.items()
        if mean > 0
    }


def detect_anomalies(
    expenses: Iterable[Transaction],
    category_averages: Mapping[str | None, float],
    category_names: Mapping[str, str],
) -> list[dict[str, Any]]:
    """
    Flag expenses at or above twice the mean of their category.

    Uncategorized expenses form their own bucket (key None). Expenses are
    usually the candidates the repository pre-filtered with
    anomaly_thresholds(); the comparison is repeated here so any expense
    list gives the same answer.

    Returns:
        [{"transaction", "category_name", "category_average"}] in input order
    """
    thresholds = anomaly_thresholds(category_averages)

    anomalies = []
    for txn in expenses:
        threshold = thresholds.get(txn.category_id)
        if threshold is None or txn.amount < threshold:
            continue
        anomalies.append(
            {
                "transaction": txn.model_dump(mode="json"),
                "category_name": category_names.get(txn.category_id)
                if txn.category_id
                else None,
                "category_average": _money(category_averages[txn.category_id]),
            }
        )
    return anomalies


def monthly_summary(
    transactions: Iterable[Transaction],
    expense_rows: Iterable[Mapping[str, Any]],
    category_names: Mapping[str, str],
) -> dict[str, Any]:
    """
    Income/expense totals, expense split by category and a per-day trend.

    Args:
        transactions: All transactions in the period (income and expense)
        expense_rows: Per-category expense aggregation for the same period
        category_names: category_id -> name

    Returns:
        Dict with total_income, total_expense, categories and trends
    """
    transactions = list(transactions)

    total_income = sum(t.amount for t in transactions if t.type == "income")
    total_expense = sum(t.amount for t in transactions if t.type == "expense")

    by_day: dict[str, dict[str, float]] = defaultdict(
        lambda: {"income": 0.0, "expense": 0.0}
    )
    for txn in transactions:
        by_day[txn.date][txn.type] += txn.amount

    trends = [
        {
            "date": day,
            "income": _money(values["income"]),
            "expense": _money(values["expense"]),
        }
        for day, values in sorted(by_day.items())
    ]

    return {
        "total_income": _money(total_income),
        "total_expense": _money(total_expense),
        "categories": category_totals(expense_rows, category_names),
        "trends": trends,
    }
