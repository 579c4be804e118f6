"""
Savings progress math.

Pure functions over a transaction snapshot and the settings row. Nothing here
touches the database; the summary endpoint and the quote service pass in
whatever they loaded.
"""
from datetime import datetime
from typing import Dict, Iterable, Optional

from tinigom.core.timeutils import add_months
from tinigom.models.finance import Person, TransactionType
from tinigom.schemas import MonthlyPrediction

DAYS_PER_MONTH = 30
RECENT_MONTHS = 3

# Success likelihood constants (display heuristic, not a probability model)
LIKELIHOOD_BASE = 50
LIKELIHOOD_CEILING = 95
LIKELIHOOD_BEHIND_FLOOR = 15
LIKELIHOOD_ON_PACE_BONUS = 15
LIKELIHOOD_OFF_PACE_PENALTY = 20
LIKELIHOOD_MIN = 10


class InvalidGoalError(ValueError):
    pass


def signed_amount(transaction) -> float:
    if transaction.type == TransactionType.WITHDRAWAL:
        return -transaction.amount
    return transaction.amount


def compute_user_totals(transactions: Iterable) -> Dict[Person, float]:
    totals = {person: 0.0 for person in Person}
    for t in transactions:
        totals[Person(t.user)] += signed_amount(t)
    return totals


def compute_grand_total(user_totals: Dict[Person, float]) -> float:
    return sum(user_totals.values())


def _check_goal(goal: float):
    if goal is None or goal <= 0:
        raise InvalidGoalError(f"Savings goal must be positive, got {goal}")


def compute_progress_percentage(grand_total: float, goal: float) -> float:
    """Share of the goal reached, clamped to [0, 100]."""
    _check_goal(goal)
    return max(0.0, min(grand_total / goal * 100, 100.0))


def compute_contribution_percentage(user_total: float, goal: float) -> float:
    # Unclamped on purpose: a person can be above 100% or below zero
    _check_goal(goal)
    return user_total / goal * 100


def compute_kind_totals(transactions: Iterable) -> Dict[str, float]:
    total_income = 0.0
    total_withdrawals = 0.0
    for t in transactions:
        if t.type == TransactionType.INCOME:
            total_income += t.amount
        elif t.type == TransactionType.WITHDRAWAL:
            total_withdrawals += t.amount
    return {"total_income": total_income, "total_withdrawals": total_withdrawals}


def _months_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 86400 / DAYS_PER_MONTH


def compute_current_monthly_saving(transactions: Iterable, now: datetime) -> float:
    """Income logged over the last three calendar months, averaged per month."""
    window_start = add_months(now, -RECENT_MONTHS)
    recent = sum(
        t.amount for t in transactions
        if t.type == TransactionType.INCOME and t.date is not None and window_start <= t.date <= now
    )
    return recent / RECENT_MONTHS


def compute_monthly_prediction(
    transactions: Iterable,
    goal: float,
    grand_total: float,
    target_months: Optional[int],
    target_start_date: Optional[datetime],
    now: datetime,
) -> Optional[MonthlyPrediction]:
    if not target_months:
        return None

    transactions = list(transactions)
    start = target_start_date or now
    target_date = add_months(start, target_months)
    remaining_amount = max(0.0, goal - grand_total)

    target_passed = target_date <= now
    if target_passed:
        remaining_months = 0.0
    else:
        remaining_months = round(max(0.0, _months_between(now, target_date)), 1)

    if remaining_months == 0:
        required = 0.0
        target_reached = remaining_amount <= 0 if target_passed else True
    else:
        required = remaining_amount / remaining_months
        target_reached = remaining_amount <= 0

    current = compute_current_monthly_saving(transactions, now)

    return MonthlyPrediction(
        remaining_amount=remaining_amount,
        remaining_months=remaining_months,
        target_date=target_date,
        required_monthly_saving=required,
        current_monthly_saving=current,
        is_achievable=current >= required,
        shortfall=max(0.0, required - current),
        target_reached=target_reached,
    )


def compute_success_likelihood(
    prediction: Optional[MonthlyPrediction],
    grand_total: float,
    goal: float,
    target_months: Optional[int],
    target_start_date: Optional[datetime],
    now: datetime,
) -> int:
    """
    Heuristic 10-95 score shown next to the goal ring.

    Compares actual progress with the progress expected by now on a straight
    line from the start date, then nudges the result by whether the recent
    saving rate covers the required one.
    """
    if prediction is None or not target_months:
        return LIKELIHOOD_BASE

    actual = compute_progress_percentage(grand_total, goal)
    start = target_start_date or now
    months_elapsed = max(0.0, _months_between(start, now))
    expected = min(100.0, months_elapsed / target_months * 100)

    if expected <= 0:
        likelihood = float(LIKELIHOOD_BASE)
    else:
        ratio = actual / expected
        if actual >= expected:
            likelihood = min(float(LIKELIHOOD_CEILING), LIKELIHOOD_BASE * ratio)
        else:
            likelihood = max(float(LIKELIHOOD_BEHIND_FLOOR), LIKELIHOOD_BASE * ratio)

    if prediction.current_monthly_saving >= prediction.required_monthly_saving:
        likelihood += LIKELIHOOD_ON_PACE_BONUS
    else:
        likelihood -= LIKELIHOOD_OFF_PACE_PENALTY

    return int(round(max(LIKELIHOOD_MIN, min(LIKELIHOOD_CEILING, likelihood))))
