"""
Per-field hole stat updates.

A single edit of one field of one hole is upserted and the round aggregate
that depends on that field is re-derived from a fresh read of every hole stat
of the round, all inside one transaction. Re-deriving (instead of applying a
delta to the cached total) makes replays idempotent and repairs any earlier
drift.
"""

import logging
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from scorebook.core.errors import ConstraintViolation, InvalidInput, NotFound
from scorebook.db.session import transaction
from scorebook.models.course import Hole
from scorebook.models.round import DRIVE_RESULTS, Accuracy, HoleStat, Round

logger = logging.getLogger(__name__)


class ScoreUpdate(BaseModel):
    field: Literal["score"] = "score"
    value: int | None = Field(default=None, ge=1, le=30)


class PuttsUpdate(BaseModel):
    field: Literal["putts"] = "putts"
    value: int | None = Field(default=None, ge=0, le=10)


class ChipShotsUpdate(BaseModel):
    field: Literal["chip_shots"] = "chip_shots"
    value: int | None = Field(default=None, ge=0, le=10)


class SandShotsUpdate(BaseModel):
    field: Literal["sand_shots"] = "sand_shots"
    value: int | None = Field(default=None, ge=0, le=10)


class DriveUpdate(BaseModel):
    field: Literal["drive"] = "drive"
    value: Accuracy | None = None


class ApproachUpdate(BaseModel):
    field: Literal["approach"] = "approach"
    value: Accuracy | None = None


class NoteUpdate(BaseModel):
    field: Literal["note"] = "note"
    value: str | None = Field(default=None, max_length=2000)


StatUpdate = Annotated[
    Union[
        ScoreUpdate,
        PuttsUpdate,
        ChipShotsUpdate,
        SandShotsUpdate,
        DriveUpdate,
        ApproachUpdate,
        NoteUpdate,
    ],
    Field(discriminator="field"),
]

STAT_FIELDS = ("score", "putts", "chip_shots", "sand_shots", "drive", "approach", "note")

_stat_update_adapter = TypeAdapter(StatUpdate)


def parse_stat_update(field: str, value) -> StatUpdate:
    """Build the typed update for a runtime field name (form/JSON input)."""
    if field not in STAT_FIELDS:
        raise InvalidInput(f"Unsupported stat field: {field!r}")
    try:
        return _stat_update_adapter.validate_python({"field": field, "value": value})
    except ValidationError as exc:
        raise InvalidInput(f"Invalid value for {field}: {exc.errors()[0]['msg']}") from exc


# ------------------------------------------------------------------
# Aggregate recomputation
# ------------------------------------------------------------------


def _recompute_total_score(db: Session, rnd: Round) -> None:
    total, scored = db.execute(
        select(func.sum(HoleStat.score), func.count(HoleStat.score)).where(
            HoleStat.round_id == rnd.id
        )
    ).one()
    # Only a full scorecard gets a total; anything less is a round in progress.
    rnd.total_score = int(total) if scored == rnd.number_of_holes else None


def _recompute_total_putts(db: Session, rnd: Round) -> None:
    total = db.execute(
        select(func.sum(HoleStat.putts)).where(HoleStat.round_id == rnd.id)
    ).scalar_one()
    rnd.total_putts = int(total or 0)


def _recompute_total_fairways(db: Session, rnd: Round) -> None:
    rnd.total_fairways = db.execute(
        select(func.count(HoleStat.id)).where(
            HoleStat.round_id == rnd.id, HoleStat.drive == Accuracy.HIT
        )
    ).scalar_one()


def _recompute_total_gir(db: Session, rnd: Round) -> None:
    rnd.total_gir = db.execute(
        select(func.count(HoleStat.id)).where(
            HoleStat.round_id == rnd.id, HoleStat.approach == Accuracy.HIT
        )
    ).scalar_one()


def _recompute_for(db: Session, rnd: Round, update: StatUpdate) -> None:
    if isinstance(update, ScoreUpdate):
        _recompute_total_score(db, rnd)
    elif isinstance(update, PuttsUpdate):
        _recompute_total_putts(db, rnd)
    elif isinstance(update, DriveUpdate):
        _recompute_total_fairways(db, rnd)
    elif isinstance(update, ApproachUpdate):
        _recompute_total_gir(db, rnd)
    elif isinstance(update, (ChipShotsUpdate, SandShotsUpdate, NoteUpdate)):
        # No round aggregate depends on these.
        return
    else:
        raise InvalidInput(f"Unsupported stat update: {update!r}")
    logger.debug("Recomputed %s aggregate for round %s", update.field, rnd.id)


def recompute_round_totals(db: Session, rnd: Round) -> Round:
    """Re-derive every cached aggregate of a round. Caller owns the transaction."""
    db.flush()
    _recompute_total_score(db, rnd)
    _recompute_total_putts(db, rnd)
    _recompute_total_fairways(db, rnd)
    _recompute_total_gir(db, rnd)
    return rnd


# ------------------------------------------------------------------
# Update
# ------------------------------------------------------------------


def _lock_round(db: Session, round_id: int) -> Round:
    rnd = db.execute(
        select(Round).where(Round.id == round_id).with_for_update()
    ).scalars().one_or_none()
    if not rnd:
        raise NotFound(f"Round {round_id} not found")
    return rnd


def _resolve_hole(db: Session, rnd: Round, hole_number: int, hole_id: int) -> Hole:
    if not 1 <= hole_number <= rnd.number_of_holes:
        raise ConstraintViolation(
            f"hole_number {hole_number} outside 1..{rnd.number_of_holes} for this round"
        )

    hole = db.get(Hole, hole_id)
    if not hole:
        raise NotFound(f"Hole {hole_id} not found")
    if hole.course_id != rnd.course_id or hole.number != hole_number:
        raise ConstraintViolation(
            f"Hole {hole_id} is not hole {hole_number} of the round's course"
        )
    return hole


def update_hole_stat(
    db: Session,
    round_id: int,
    hole_number: int,
    hole_id: int,
    update: StatUpdate,
) -> HoleStat:
    """
    Set one field of one hole's stats and refresh the dependent round total.

    The upsert and the recompute commit together or not at all.
    """
    try:
        with transaction(db):
            rnd = _lock_round(db, round_id)
            hole = _resolve_hole(db, rnd, hole_number, hole_id)

            if isinstance(update, DriveUpdate) and update.value is not None:
                if hole.par == 3:
                    raise InvalidInput("drive is not recorded on par 3 holes")
                if update.value not in DRIVE_RESULTS:
                    raise InvalidInput(f"drive cannot be {update.value.value!r}")

            stat = db.execute(
                select(HoleStat).where(
                    HoleStat.round_id == round_id,
                    HoleStat.hole_number == hole_number,
                )
            ).scalars().one_or_none()

            if stat is None:
                stat = HoleStat(round_id=round_id, hole_number=hole_number, hole_id=hole_id)
                db.add(stat)
            setattr(stat, update.field, update.value)

            db.flush()
            _recompute_for(db, rnd, update)
    except (InvalidInput, NotFound, ConstraintViolation) as exc:
        logger.warning(
            "Rejected %s update for round %s hole %s: %s", update.field, round_id, hole_number, exc
        )
        raise

    logger.info(
        "Round %s hole %s: %s=%r", round_id, hole_number, update.field, update.value
    )
    return stat
