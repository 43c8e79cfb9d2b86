from insights import generate_insights
from metrics import (
    BudgetComparison,
    CategoryBreakdown,
    DashboardStats,
    MonthlyData,
    dashboard_stats,
)
from models import BudgetStatus, InsightType


def _stats(
    expense: int = 0,
    income: int = 0,
    breakdown: list[CategoryBreakdown] | None = None,
    months: list[MonthlyData] | None = None,
) -> DashboardStats:
    return DashboardStats(
        total_expense_cents=expense,
        total_income_cents=income,
        transaction_count=0,
        category_breakdown=breakdown or [],
        monthly_data=months or [],
    )


def _comparison(category: str, status: BudgetStatus) -> BudgetComparison:
    return BudgetComparison(
        category=category,
        budgeted_cents=10_000,
        spent_cents=0,
        percentage=0,
        status=status,
    )


def test_empty_inputs_yield_only_fallback_tip():
    insights = generate_insights(dashboard_stats([]), [])
    assert len(insights) == 1
    assert insights[0].type == InsightType.tip
    assert insights[0].title == "Stay on Track"


def test_budget_insights_name_categories():
    comparisons = [
        _comparison("Food & Dining", BudgetStatus.over),
        _comparison("Travel", BudgetStatus.over),
        _comparison("Housing", BudgetStatus.near),
        _comparison("Clothing", BudgetStatus.under),
    ]
    insights = generate_insights(_stats(), comparisons)
    assert [i.title for i in insights] == [
        "Budget Exceeded",
        "Approaching Budget Limit",
    ]
    assert insights[0].type == InsightType.warning
    assert insights[0].description == (
        "You've exceeded your budget in 2 categories: Food & Dining, Travel."
    )
    assert insights[1].description == "You're near your budget limit in Housing."


def test_single_over_budget_uses_singular():
    insights = generate_insights(
        _stats(), [_comparison("Travel", BudgetStatus.over)]
    )
    assert "1 category: Travel" in insights[0].description


def test_negative_balance_warning_and_positive_success():
    negative = generate_insights(_stats(expense=50_000, income=10_000), [])
    assert negative[0].type == InsightType.warning
    assert negative[0].description == "Your total expenses exceed income by $400."

    positive = generate_insights(_stats(expense=10_000, income=35_000), [])
    assert positive[0].type == InsightType.success
    assert positive[0].description.endswith("positive balance of $250.")


def test_balance_amount_rounds_half_up():
    negative = generate_insights(_stats(expense=1_250, income=1_000), [])
    assert negative[0].description == "Your total expenses exceed income by $3."


def test_zero_net_produces_no_balance_insight():
    insights = generate_insights(_stats(expense=10_000, income=10_000), [])
    assert [i.title for i in insights] == ["Stay on Track"]


def test_concentration_requires_more_than_forty_percent():
    at_limit = [CategoryBreakdown("Housing", 4_000, 40.0, "#34495e")]
    above = [CategoryBreakdown("Housing", 4_100, 41.0, "#34495e")]
    assert generate_insights(_stats(breakdown=at_limit), [])[0].title == "Stay on Track"
    insight = generate_insights(_stats(breakdown=above), [])[0]
    assert insight.title == "High Concentration in One Category"
    assert insight.description == "Housing accounts for 41.0% of your expenses."


def test_spending_increase_over_twenty_percent():
    exactly = [MonthlyData("2024-01", 10_000, 0), MonthlyData("2024-02", 12_000, 0)]
    assert generate_insights(_stats(months=exactly), [])[0].title == "Stay on Track"

    jump = [MonthlyData("2024-01", 10_000, 0), MonthlyData("2024-02", 12_500, 0)]
    insight = generate_insights(_stats(months=jump), [])[0]
    assert insight.title == "Increased Spending"
    assert insight.description == "Your expenses increased by 25.0% last month."


def test_single_month_series_has_no_trend():
    months = [MonthlyData("2024-02", 99_000, 0)]
    assert generate_insights(_stats(months=months), [])[0].title == "Stay on Track"


def test_truncates_to_first_four_in_generation_order():
    stats = _stats(
        expense=60_000,
        income=10_000,
        breakdown=[CategoryBreakdown("Housing", 60_000, 100.0, "#34495e")],
        months=[MonthlyData("2024-01", 1_000, 0), MonthlyData("2024-02", 59_000, 0)],
    )
    comparisons = [
        _comparison("Housing", BudgetStatus.over),
        _comparison("Travel", BudgetStatus.near),
    ]
    insights = generate_insights(stats, comparisons)
    assert [i.title for i in insights] == [
        "Budget Exceeded",
        "Approaching Budget Limit",
        "High Concentration in One Category",
        "Spending Exceeds Income",
    ]
