import logging
from datetime import date

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from scorebook.core.errors import ConstraintViolation, InvalidInput, NotFound
from scorebook.db.session import transaction
from scorebook.models.course import Course, Tee
from scorebook.models.round import Accuracy, HoleStat, Round
from scorebook.services.hole_stats import recompute_round_totals

logger = logging.getLogger(__name__)

# Baseline putts on a freshly started scorecard.
EXPECTED_PUTTS = 2


class RoundCreate(BaseModel):
    course_id: int
    tee_id: int
    date_played: date
    number_of_holes: int = 18
    # Seed each hole with the "expected" line (par, two putts, fairway and green hit).
    prefill: bool = True


def _seed_hole_stat(hole, prefill: bool) -> HoleStat:
    stat = HoleStat(hole_id=hole.id, hole_number=hole.number)
    if prefill:
        stat.score = hole.par
        stat.putts = EXPECTED_PUTTS
        stat.approach = Accuracy.HIT
        stat.drive = Accuracy.HIT if hole.par != 3 else None
    return stat


def create_round(db: Session, user_id: str, data: RoundCreate) -> Round:
    if data.number_of_holes not in (9, 18):
        raise InvalidInput("number_of_holes must be 9 or 18")

    with transaction(db):
        course = db.execute(
            select(Course).options(selectinload(Course.holes)).where(Course.id == data.course_id)
        ).scalars().one_or_none()
        if not course:
            raise NotFound(f"Course {data.course_id} not found")

        tee = db.get(Tee, data.tee_id)
        if not tee:
            raise NotFound(f"Tee {data.tee_id} not found")
        if tee.course_id != course.id:
            raise ConstraintViolation("tee_id does not belong to course")

        played = [h for h in course.holes if h.number <= data.number_of_holes]
        if len(played) != data.number_of_holes:
            raise ConstraintViolation(
                f"Course has {len(course.holes)} holes; cannot play {data.number_of_holes}"
            )

        rnd = Round(
            user_id=user_id,
            course_id=course.id,
            tee_id=tee.id,
            date_played=data.date_played,
            number_of_holes=data.number_of_holes,
        )
        rnd.hole_stats = [_seed_hole_stat(h, data.prefill) for h in played]
        db.add(rnd)
        recompute_round_totals(db, rnd)

    logger.info(
        "User %s started round %s on course %s (%s holes)",
        user_id,
        rnd.id,
        data.course_id,
        data.number_of_holes,
    )
    return rnd


def get_round(db: Session, round_id: int) -> Round:
    rnd = db.get(Round, round_id)
    if not rnd:
        raise NotFound(f"Round {round_id} not found")
    return rnd


def list_rounds(db: Session, user_id: str, take: int | None = None) -> list[Round]:
    stmt = (
        select(Round)
        .options(selectinload(Round.course), selectinload(Round.tee))
        .where(Round.user_id == user_id)
        .order_by(Round.date_played.desc(), Round.id.desc())
        .limit(take)
    )
    return list(db.execute(stmt).scalars().all())


def delete_round(db: Session, round_id: int) -> None:
    with transaction(db):
        rnd = db.get(Round, round_id)
        if not rnd:
            raise NotFound(f"Round {round_id} not found")
        db.delete(rnd)

    logger.info("Deleted round %s", round_id)
