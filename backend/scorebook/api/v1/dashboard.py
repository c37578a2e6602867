from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from scorebook.api.deps import get_current_user_id, get_db
from scorebook.scoring import ScoreDistribution
from scorebook.services import dashboard

router = APIRouter()


def _month_or_today(month: int | None, year: int | None) -> tuple[int, int]:
    today = date.today()
    return month or today.month, year or today.year


@router.get("/dashboard", response_model=dashboard.DashboardTrends)
def get_dashboard(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1900),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    month, year = _month_or_today(month, year)
    return dashboard.get_dashboard_trends(db, user_id, month, year)


@router.get("/dashboard/score-distribution", response_model=ScoreDistribution)
def get_score_distribution(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1900),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    month, year = _month_or_today(month, year)
    return dashboard.get_score_distribution(db, user_id, month, year)
