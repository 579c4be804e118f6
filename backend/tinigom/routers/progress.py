from fastapi import APIRouter, Depends, HTTPException

from tinigom.core.progress import (
    InvalidGoalError,
    compute_contribution_percentage,
    compute_grand_total,
    compute_kind_totals,
    compute_monthly_prediction,
    compute_progress_percentage,
    compute_success_likelihood,
    compute_user_totals,
)
from tinigom.core.timeutils import utcnow
from tinigom.deps import get_gateway
from tinigom.schemas import ProgressSummary
from tinigom.services.gateway import PersistenceGateway, StorageUnavailableError

router = APIRouter(tags=["progress"])


@router.get("/progress", response_model=ProgressSummary)
def get_progress_summary(gateway: PersistenceGateway = Depends(get_gateway)):
    """
    Everything the dashboard shows around the goal ring, computed server side.
    """
    try:
        app_settings = gateway.get_settings()
        transactions = gateway.transactions.list()
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    now = utcnow()
    goal = app_settings.savings_goal
    user_totals = compute_user_totals(transactions)
    grand_total = compute_grand_total(user_totals)

    try:
        progress = compute_progress_percentage(grand_total, goal)
        contributions = {
            person.value: compute_contribution_percentage(total, goal)
            for person, total in user_totals.items()
        }
    except InvalidGoalError as e:
        raise HTTPException(status_code=500, detail=str(e))

    prediction = compute_monthly_prediction(
        transactions, goal, grand_total,
        app_settings.target_months, app_settings.target_start_date, now,
    )
    likelihood = compute_success_likelihood(
        prediction, grand_total, goal,
        app_settings.target_months, app_settings.target_start_date, now,
    )

    return ProgressSummary(
        savings_goal=goal,
        user_totals={person.value: total for person, total in user_totals.items()},
        contributions=contributions,
        grand_total=grand_total,
        progress_percentage=progress,
        prediction=prediction,
        success_likelihood=likelihood,
        **compute_kind_totals(transactions),
    )
