"""
Month-over-month dashboard widgets.

Trends read the cached Round totals (total_score, total_fairways, total_gir);
they never re-derive them from hole stats. Only completed rounds (total_score
set) count. Months are 1..12.
"""

import calendar
from datetime import date

from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from scorebook.core.errors import InvalidInput
from scorebook.models.course import Hole
from scorebook.models.round import HoleStat, Round
from scorebook.scoring import ScoreDistribution, score_distribution

DISTRIBUTION_ROUNDS = 5
RECENT_ROUNDS = 5


class PercentTrend(BaseModel):
    current_percent: float
    previous_percent: float
    diff: float


class RecentRound(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    tee_id: int
    date_played: date
    number_of_holes: int
    total_score: int | None
    total_putts: int | None
    total_fairways: int | None
    total_gir: int | None


class DashboardTrends(BaseModel):
    month: int
    year: int
    rounds_played_trend: int
    fairways_hit_trend: PercentTrend
    gir_trend: PercentTrend
    score_distribution: ScoreDistribution
    recent_rounds: list[RecentRound]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month, both inclusive."""
    if not 1 <= month <= 12:
        raise InvalidInput(f"month must be 1..12 (got {month})")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _completed_in(user_id: str, first_day: date, last_day: date):
    return (
        Round.user_id == user_id,
        Round.total_score.isnot(None),
        Round.date_played >= first_day,
        Round.date_played <= last_day,
    )


def _count_completed(db: Session, user_id: str, year: int, month: int) -> int:
    first_day, last_day = month_bounds(year, month)
    return db.execute(
        select(func.count(Round.id)).where(*_completed_in(user_id, first_day, last_day))
    ).scalar_one()


def get_rounds_played_trend(db: Session, user_id: str, month: int, year: int) -> int:
    """Completed rounds this month minus completed rounds last month."""
    prev_year, prev_month = previous_month(year, month)
    return _count_completed(db, user_id, year, month) - _count_completed(
        db, user_id, prev_year, prev_month
    )


def _percent(hits: int, possible: int) -> float:
    return hits / possible if possible > 0 else 0.0


def _fairways_percent(db: Session, user_id: str, year: int, month: int) -> float:
    first_day, last_day = month_bounds(year, month)
    possible_fairways = (
        select(func.count(Hole.id))
        .where(
            Hole.course_id == Round.course_id,
            Hole.par != 3,
        )
        .correlate(Round)
        .scalar_subquery()
    )
    rows = db.execute(
        select(Round.total_fairways, possible_fairways).where(
            *_completed_in(user_id, first_day, last_day)
        )
    ).all()

    total_fairways = sum(fairways or 0 for fairways, _ in rows)
    total_possible = sum(possible or 0 for _, possible in rows)
    return _percent(total_fairways, total_possible)


def _gir_percent(db: Session, user_id: str, year: int, month: int) -> float:
    first_day, last_day = month_bounds(year, month)
    rows = db.execute(
        select(Round.total_gir, Round.number_of_holes).where(
            *_completed_in(user_id, first_day, last_day)
        )
    ).all()

    total_gir = sum(gir or 0 for gir, _ in rows)
    total_holes = sum(holes for _, holes in rows)
    return _percent(total_gir, total_holes)


def _trend(percent_for, db: Session, user_id: str, month: int, year: int) -> PercentTrend:
    prev_year, prev_month = previous_month(year, month)
    current = percent_for(db, user_id, year, month)
    previous = percent_for(db, user_id, prev_year, prev_month)
    return PercentTrend(current_percent=current, previous_percent=previous, diff=current - previous)


def get_fairways_hit_trend(db: Session, user_id: str, month: int, year: int) -> PercentTrend:
    return _trend(_fairways_percent, db, user_id, month, year)


def get_gir_trend(db: Session, user_id: str, month: int, year: int) -> PercentTrend:
    return _trend(_gir_percent, db, user_id, month, year)


def get_score_distribution(db: Session, user_id: str, month: int, year: int) -> ScoreDistribution:
    """Bucket counts over every hole of the month's most recent completed rounds, combined."""
    first_day, last_day = month_bounds(year, month)
    round_ids = (
        select(Round.id)
        .where(*_completed_in(user_id, first_day, last_day))
        .order_by(Round.date_played.desc(), Round.id.desc())
        .limit(DISTRIBUTION_ROUNDS)
    ).subquery()

    rows = db.execute(
        select(HoleStat.score, Hole.par)
        .join(Hole, Hole.id == HoleStat.hole_id)
        .where(HoleStat.round_id.in_(select(round_ids.c.id)), HoleStat.score.isnot(None))
    ).all()

    return score_distribution((par, score) for score, par in rows)


def get_completed_rounds(db: Session, user_id: str, take: int | None = None) -> list[Round]:
    stmt = (
        select(Round)
        .options(selectinload(Round.course), selectinload(Round.tee))
        .where(Round.user_id == user_id, Round.total_score.isnot(None))
        .order_by(Round.date_played.desc(), Round.id.desc())
        .limit(take)
    )
    return list(db.execute(stmt).scalars().all())


def get_dashboard_trends(db: Session, user_id: str, month: int, year: int) -> DashboardTrends:
    return DashboardTrends(
        month=month,
        year=year,
        rounds_played_trend=get_rounds_played_trend(db, user_id, month, year),
        fairways_hit_trend=get_fairways_hit_trend(db, user_id, month, year),
        gir_trend=get_gir_trend(db, user_id, month, year),
        score_distribution=get_score_distribution(db, user_id, month, year),
        recent_rounds=[
            RecentRound.model_validate(r)
            for r in get_completed_rounds(db, user_id, take=RECENT_ROUNDS)
        ],
    )
