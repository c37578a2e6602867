"""
The "round with stats" read model.

Everything here is derived on every read from the course holes, the tee
yardages and the round's hole stats. Only the cached Round totals are taken
as stored.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from scorebook.core.errors import NotFound
from scorebook.models.course import Course, Tee
from scorebook.models.round import APPROACH_RESULTS, DRIVE_RESULTS, Accuracy, HoleStat, Round
from scorebook.scoring import (
    ScoreDistribution,
    calculate_score_differential,
    format_score_to_par,
    round_half_up,
    score_distribution,
)

SCORING_AVERAGE_PARS = (3, 4, 5)
FRONT_NINE = range(1, 10)
BACK_NINE = range(10, 19)


class HoleStatOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    hole_id: int
    hole_number: int
    score: int | None
    putts: int | None
    chip_shots: int | None
    sand_shots: int | None
    drive: Accuracy | None
    approach: Accuracy | None
    note: str | None
    up_and_down: bool
    sand_save: bool


class HoleByHole(BaseModel):
    hole_id: int
    number: int
    par: int
    stroke_index: int
    yardage: int
    stats: HoleStatOut | None = None

    @property
    def score(self) -> int | None:
        return self.stats.score if self.stats else None


class AccuracyStat(BaseModel):
    count: int
    percentage: float


class NineSummary(BaseModel):
    par: int
    score: int
    yardage: int
    complete_round: bool


class RunningScore(BaseModel):
    hole_number: int
    par_thru: int
    score_thru: int | None
    to_par: str | None


class RoundWithStats(BaseModel):
    id: int
    user_id: str
    course_id: int
    course_name: str
    course_par: int
    tee_id: int
    tee_name: str
    date_played: date
    number_of_holes: int
    total_score: int | None
    total_putts: int | None
    total_fairways: int | None
    total_gir: int | None
    to_par: str | None
    score_differential: str | None
    putts_per_hole: float | None
    possible_fairways: int
    hole_by_hole: list[HoleByHole]
    scoring_averages: dict[int, float | None]
    drive_accuracy: dict[str, AccuracyStat]
    approach_accuracy: dict[str, AccuracyStat]
    score_distribution: ScoreDistribution
    front_nine: NineSummary | None
    back_nine: NineSummary | None
    running_to_par: list[RunningScore]
    up_and_downs: list[int]
    sand_saves: list[int]
    three_putts: list[int]


def build_hole_by_hole(course: Course, tee: Tee, stats: list[HoleStat]) -> list[HoleByHole]:
    """Join every course hole with its tee yardage and the round's stat row for it."""
    yardage_by_hole = {t.hole_id: t.yardage for t in tee.tee_for_holes}
    stat_by_number = {s.hole_number: s for s in stats}

    composite = []
    for hole in sorted(course.holes, key=lambda h: h.number):
        stat = stat_by_number.get(hole.number)
        composite.append(
            HoleByHole(
                hole_id=hole.id,
                number=hole.number,
                par=hole.par,
                stroke_index=hole.stroke_index,
                yardage=yardage_by_hole.get(hole.id, 0),
                stats=HoleStatOut.model_validate(stat) if stat else None,
            )
        )
    return composite


def scoring_averages(holes: list[HoleByHole]) -> dict[int, float | None]:
    averages: dict[int, float | None] = {}
    for par in SCORING_AVERAGE_PARS:
        scores = [h.score for h in holes if h.par == par and h.score is not None]
        averages[par] = round_half_up(sum(scores) / len(scores)) if scores else None
    return averages


def accuracy_breakdown(
    holes: list[HoleByHole],
    stat: str,
    directions: tuple[Accuracy, ...],
    eligible: int,
) -> dict[str, AccuracyStat]:
    """Count and share of holes per direction; share is of `eligible` holes."""
    breakdown = {}
    for direction in directions:
        count = sum(1 for h in holes if h.stats and getattr(h.stats, stat) == direction)
        percentage = round_half_up(count / eligible * 100) if eligible else 0.0
        breakdown[direction.value] = AccuracyStat(count=count, percentage=percentage)
    return breakdown


def nine_summary(holes: list[HoleByHole]) -> NineSummary | None:
    if not holes:
        return None
    scored = [h.score for h in holes if h.score is not None]
    return NineSummary(
        par=sum(h.par for h in holes),
        score=sum(scored),
        yardage=sum(h.yardage for h in holes),
        complete_round=len(scored) == len(holes),
    )


def running_to_par(holes: list[HoleByHole]) -> list[RunningScore]:
    running = []
    par_thru = 0
    score_thru: int | None = 0
    for hole in holes:
        par_thru += hole.par
        if score_thru is not None and hole.score is not None:
            score_thru += hole.score
        else:
            # One unscored hole leaves every later hole undefined too.
            score_thru = None
        running.append(
            RunningScore(
                hole_number=hole.number,
                par_thru=par_thru,
                score_thru=score_thru,
                to_par=format_score_to_par(par_thru, score_thru) if score_thru is not None else None,
            )
        )
    return running


def _score_differential(rnd: Round, tee: Tee) -> str | None:
    if rnd.total_score is None or tee.rating is None or not tee.slope:
        return None
    return calculate_score_differential(rnd.total_score, tee.rating, tee.slope)


def get_round_with_stats(db: Session, round_id: int) -> RoundWithStats:
    rnd = db.execute(
        select(Round)
        .options(
            selectinload(Round.course).selectinload(Course.holes),
            selectinload(Round.tee).selectinload(Tee.tee_for_holes),
            selectinload(Round.hole_stats),
        )
        .where(Round.id == round_id)
    ).scalars().one_or_none()
    if not rnd:
        raise NotFound(f"Round {round_id} not found")

    course, tee = rnd.course, rnd.tee
    holes = build_hole_by_hole(course, tee, rnd.hole_stats)
    played = [h for h in holes if h.number <= rnd.number_of_holes]
    scored = [h for h in holes if h.score is not None]
    possible_fairways = sum(1 for h in holes if h.par != 3)
    played_par = sum(h.par for h in played)

    stats = rnd.hole_stats
    return RoundWithStats(
        id=rnd.id,
        user_id=rnd.user_id,
        course_id=course.id,
        course_name=course.name,
        course_par=course.par,
        tee_id=tee.id,
        tee_name=tee.name,
        date_played=rnd.date_played,
        number_of_holes=rnd.number_of_holes,
        total_score=rnd.total_score,
        total_putts=rnd.total_putts,
        total_fairways=rnd.total_fairways,
        total_gir=rnd.total_gir,
        to_par=format_score_to_par(played_par, rnd.total_score) if rnd.total_score is not None else None,
        score_differential=_score_differential(rnd, tee),
        putts_per_hole=round_half_up((rnd.total_putts or 0) / rnd.number_of_holes),
        possible_fairways=possible_fairways,
        hole_by_hole=holes,
        scoring_averages=scoring_averages(holes),
        drive_accuracy=accuracy_breakdown(played, "drive", DRIVE_RESULTS, possible_fairways),
        approach_accuracy=accuracy_breakdown(
            played, "approach", APPROACH_RESULTS, rnd.number_of_holes
        ),
        score_distribution=score_distribution((h.par, h.score) for h in scored),
        front_nine=nine_summary([h for h in holes if h.number in FRONT_NINE]),
        back_nine=nine_summary([h for h in holes if h.number in BACK_NINE]),
        running_to_par=running_to_par(holes),
        up_and_downs=[s.hole_number for s in stats if s.up_and_down],
        sand_saves=[s.hole_number for s in stats if s.sand_save],
        three_putts=[s.hole_number for s in stats if s.putts is not None and s.putts >= 3],
    )
