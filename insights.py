from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from metrics import BudgetComparison, DashboardStats
from models import BudgetStatus, InsightType

MAX_INSIGHTS = 4
CONCENTRATION_THRESHOLD = 40


@dataclass(frozen=True)
class SpendingInsight:
    type: InsightType
    title: str
    description: str
    action: Optional[str] = None


def _dollars(cents: int) -> str:
    dollars = Decimal(abs(cents)).scaleb(-2).quantize(Decimal("1"), ROUND_HALF_UP)
    return f"${dollars}"


def _budget_insights(comparisons: Sequence[BudgetComparison]) -> list[SpendingInsight]:
    out: list[SpendingInsight] = []
    over = [c.category for c in comparisons if c.status == BudgetStatus.over]
    near = [c.category for c in comparisons if c.status == BudgetStatus.near]
    if over:
        noun = "category" if len(over) == 1 else "categories"
        out.append(
            SpendingInsight(
                type=InsightType.warning,
                title="Budget Exceeded",
                description=(
                    f"You've exceeded your budget in {len(over)} {noun}: "
                    f"{', '.join(over)}."
                ),
                action="Review spending in these categories",
            )
        )
    if near:
        out.append(
            SpendingInsight(
                type=InsightType.tip,
                title="Approaching Budget Limit",
                description=f"You're near your budget limit in {', '.join(near)}.",
                action="Monitor these categories closely",
            )
        )
    return out


def _concentration_insight(stats: DashboardStats) -> Optional[SpendingInsight]:
    if not stats.category_breakdown:
        return None
    top = stats.category_breakdown[0]
    if top.percentage <= CONCENTRATION_THRESHOLD:
        return None
    return SpendingInsight(
        type=InsightType.tip,
        title="High Concentration in One Category",
        description=f"{top.category} accounts for {top.percentage:.1f}% of your expenses.",
        action="Consider diversifying your spending or reviewing this category",
    )


def _balance_insight(stats: DashboardStats) -> Optional[SpendingInsight]:
    net = stats.net_cents
    if net < 0:
        return SpendingInsight(
            type=InsightType.warning,
            title="Spending Exceeds Income",
            description=f"Your total expenses exceed income by {_dollars(net)}.",
            action="Consider reducing expenses or increasing income",
        )
    if net > 0:
        return SpendingInsight(
            type=InsightType.success,
            title="Positive Balance",
            description=f"Great job! You have a positive balance of {_dollars(net)}.",
            action="Consider saving or investing this surplus",
        )
    return None


def _trend_insight(stats: DashboardStats) -> Optional[SpendingInsight]:
    if len(stats.monthly_data) < 2:
        return None
    previous, last = stats.monthly_data[-2], stats.monthly_data[-1]
    # last > previous * 1.2, kept in integers
    if last.expense_cents * 5 <= previous.expense_cents * 6:
        return None
    if previous.expense_cents:
        increase = (
            (last.expense_cents - previous.expense_cents)
            / previous.expense_cents
            * 100
        )
        description = f"Your expenses increased by {increase:.1f}% last month."
    else:
        description = "Your expenses increased last month after a month without any."
    return SpendingInsight(
        type=InsightType.warning,
        title="Increased Spending",
        description=description,
        action="Review recent transactions for unusual spending",
    )


def generate_insights(
    stats: DashboardStats, comparisons: Sequence[BudgetComparison]
) -> list[SpendingInsight]:
    """Build advisory messages in a fixed order and keep the first four.

    Order: over budget, near budget, category concentration, overall balance,
    month-over-month spending jump. When none apply a single "Stay on Track"
    tip is returned. Output is not re-sorted by severity.
    """
    insights = _budget_insights(comparisons)
    for rule in (_concentration_insight, _balance_insight, _trend_insight):
        insight = rule(stats)
        if insight is not None:
            insights.append(insight)

    if not insights:
        insights.append(
            SpendingInsight(
                type=InsightType.tip,
                title="Stay on Track",
                description=(
                    "Your finances look healthy! Keep tracking your expenses "
                    "and reviewing your budgets regularly."
                ),
                action="Consider setting new financial goals",
            )
        )
    return insights[:MAX_INSIGHTS]
