from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from scorebook.api.deps import get_current_user_id, get_db
from scorebook.services import rounds as round_service
from scorebook.services.hole_stats import parse_stat_update, update_hole_stat
from scorebook.services.round_view import HoleStatOut, RoundWithStats, get_round_with_stats
from scorebook.services.rounds import RoundCreate

router = APIRouter()


class RoundSummaryOut(BaseModel):
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
    is_complete: bool


class StatIn(BaseModel):
    hole_id: int
    field: str
    value: Any = None


@router.post("/rounds", response_model=RoundWithStats, status_code=201)
def create_round(
    payload: RoundCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    rnd = round_service.create_round(db, user_id, payload)
    return get_round_with_stats(db, rnd.id)


@router.get("/rounds", response_model=list[RoundSummaryOut])
def list_rounds(
    take: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return round_service.list_rounds(db, user_id, take=take)


@router.get("/rounds/{round_id}", response_model=RoundWithStats)
def get_round(round_id: int, db: Session = Depends(get_db)):
    return get_round_with_stats(db, round_id)


@router.patch("/rounds/{round_id}/holes/{hole_number}", response_model=HoleStatOut)
def update_stat(
    round_id: int,
    hole_number: int,
    payload: StatIn,
    db: Session = Depends(get_db),
):
    update = parse_stat_update(payload.field, payload.value)
    return update_hole_stat(db, round_id, hole_number, payload.hole_id, update)


@router.delete("/rounds/{round_id}")
def delete_round(round_id: int, db: Session = Depends(get_db)):
    round_service.delete_round(db, round_id)
    return {"ok": True}
