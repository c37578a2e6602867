import logging
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import exists, select
from sqlalchemy.orm import Session, selectinload

from scorebook.core.errors import ConstraintViolation, InvalidInput, NotFound
from scorebook.db.session import transaction
from scorebook.models.course import Course, Hole, Tee, TeeForHole
from scorebook.models.round import HoleStat, Round
from scorebook.services.hole_stats import recompute_round_totals

logger = logging.getLogger(__name__)

VALID_PARS = (3, 4, 5)
MAX_STROKE_INDEX = 18


class HoleIn(BaseModel):
    number: int
    par: int
    stroke_index: int


class HoleEdit(BaseModel):
    id: int
    par: int
    stroke_index: int


class CourseInfo(BaseModel):
    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None


class CourseCreate(CourseInfo):
    name: str
    holes: list[HoleIn]


class TeeHoleIn(BaseModel):
    hole_id: int
    yardage: int


class TeeCreate(BaseModel):
    name: str
    rating: Decimal | None = None
    slope: int | None = None
    holes: list[TeeHoleIn]


def _validate_hole_values(holes: list[HoleIn] | list[HoleEdit]) -> None:
    for h in holes:
        if h.par not in VALID_PARS:
            raise InvalidInput(f"par must be 3, 4 or 5 (got {h.par})")
        if not 1 <= h.stroke_index <= MAX_STROKE_INDEX:
            raise InvalidInput(f"stroke index must be between 1 and {MAX_STROKE_INDEX}")

    indexes = [h.stroke_index for h in holes]
    if len(set(indexes)) != len(indexes):
        raise ConstraintViolation("stroke index must be unique within a course")


def _load_course(db: Session, course_id: int) -> Course:
    course = db.execute(
        select(Course)
        .options(selectinload(Course.holes), selectinload(Course.tees))
        .where(Course.id == course_id)
    ).scalars().one_or_none()
    if not course:
        raise NotFound(f"Course {course_id} not found")
    return course


def create_course(db: Session, data: CourseCreate) -> Course:
    name = data.name.strip()
    if not name:
        raise InvalidInput("name required")
    if len(data.holes) not in (9, 18):
        raise InvalidInput("a course has 9 or 18 holes")
    numbers = sorted(h.number for h in data.holes)
    if numbers != list(range(1, len(data.holes) + 1)):
        raise InvalidInput("hole numbers must run 1..N without gaps")
    _validate_hole_values(data.holes)

    with transaction(db):
        course = Course(
            name=name,
            address=data.address,
            city=data.city,
            state=data.state,
            country=data.country,
            par=sum(h.par for h in data.holes),
        )
        course.holes = [
            Hole(number=h.number, par=h.par, stroke_index=h.stroke_index)
            for h in sorted(data.holes, key=lambda x: x.number)
        ]
        db.add(course)

    logger.info("Created course %s (%s holes, par %s)", course.id, len(data.holes), course.par)
    return _load_course(db, course.id)


def get_course(db: Session, course_id: int) -> Course:
    return _load_course(db, course_id)


def list_courses(db: Session) -> list[Course]:
    stmt = select(Course).options(selectinload(Course.holes)).order_by(Course.name)
    return list(db.execute(stmt).scalars().all())


def list_playable_courses(db: Session) -> list[Course]:
    """Courses a round can be started on, i.e. with at least one tee."""
    stmt = (
        select(Course)
        .options(selectinload(Course.tees))
        .where(exists().where(Tee.course_id == Course.id))
        .order_by(Course.name)
    )
    return list(db.execute(stmt).scalars().all())


def update_course_info(db: Session, course_id: int, data: CourseInfo) -> Course:
    changes = data.model_dump(exclude_unset=True)
    if "name" in changes and not (changes["name"] or "").strip():
        raise InvalidInput("name required")

    with transaction(db):
        course = _load_course(db, course_id)
        for key, value in changes.items():
            setattr(course, key, value.strip() if isinstance(value, str) else value)
    return course


def _clear_par3_drives(db: Session, hole_ids: list[int]) -> int:
    """Drop tee-shot results on holes that became par 3 and refresh the affected rounds."""
    stats = db.execute(
        select(HoleStat).where(HoleStat.hole_id.in_(hole_ids), HoleStat.drive.isnot(None))
    ).scalars().all()
    for stat in stats:
        stat.drive = None

    round_ids = {s.round_id for s in stats}
    if round_ids:
        rounds = db.execute(select(Round).where(Round.id.in_(round_ids))).scalars().all()
        for rnd in rounds:
            recompute_round_totals(db, rnd)
    return len(round_ids)


def update_course_holes(db: Session, course_id: int, holes: list[HoleEdit]) -> Course:
    """
    Edit par/stroke index of existing holes and rewrite Course.par in the same transaction.

    A hole turned into a par 3 loses its recorded drives, and the fairway
    totals of the rounds that had them are re-derived.
    """
    with transaction(db):
        course = _load_course(db, course_id)
        by_id = {h.id: h for h in course.holes}

        for edit in holes:
            if edit.id not in by_id:
                raise NotFound(f"Hole {edit.id} not found on course {course_id}")

        edited = {e.id: e for e in holes}
        merged = [
            HoleEdit(
                id=h.id,
                par=edited[h.id].par if h.id in edited else h.par,
                stroke_index=edited[h.id].stroke_index if h.id in edited else h.stroke_index,
            )
            for h in course.holes
        ]
        _validate_hole_values(merged)

        now_par3 = [m.id for m in merged if m.par == 3 and by_id[m.id].par != 3]
        for m in merged:
            by_id[m.id].par = m.par
            by_id[m.id].stroke_index = m.stroke_index
        course.par = sum(m.par for m in merged)

        touched = _clear_par3_drives(db, now_par3) if now_par3 else 0

    logger.info(
        "Updated %s holes on course %s (par now %s, %s rounds refreshed)",
        len(holes),
        course_id,
        course.par,
        touched,
    )
    return course


def add_tee(db: Session, course_id: int, data: TeeCreate) -> Tee:
    name = data.name.strip()
    if not name:
        raise InvalidInput("tee name required")
    if data.slope is not None and data.slope == 0:
        raise InvalidInput("slope must be non-zero")
    if data.rating is not None and not data.rating.is_finite():
        raise InvalidInput("rating must be a finite number")

    with transaction(db):
        course = _load_course(db, course_id)
        if any(t.name.lower() == name.lower() for t in course.tees):
            raise ConstraintViolation(f"Tee {name!r} already exists on this course")

        hole_ids = {h.id for h in course.holes}
        given = [h.hole_id for h in data.holes]
        if len(set(given)) != len(given) or set(given) != hole_ids:
            raise ConstraintViolation("a tee needs exactly one yardage per course hole")
        if any(h.yardage < 0 for h in data.holes):
            raise InvalidInput("yardage cannot be negative")

        tee = Tee(
            course_id=course.id,
            name=name,
            rating=data.rating,
            slope=data.slope,
            yardage=sum(h.yardage for h in data.holes),
        )
        tee.tee_for_holes = [TeeForHole(hole_id=h.hole_id, yardage=h.yardage) for h in data.holes]
        db.add(tee)

    logger.info("Added tee %s (%s yds) to course %s", tee.id, tee.yardage, course_id)
    return tee


def delete_tee(db: Session, tee_id: int) -> None:
    """Remove a tee. Refused while any round was played from it."""
    with transaction(db):
        tee = db.get(Tee, tee_id)
        if not tee:
            raise NotFound(f"Tee {tee_id} not found")

        in_use = db.execute(select(Round.id).where(Round.tee_id == tee_id).limit(1)).first()
        if in_use:
            raise ConstraintViolation("Tee is referenced by recorded rounds")

        db.delete(tee)

    logger.info("Deleted tee %s", tee_id)


def delete_course(db: Session, course_id: int) -> None:
    """Delete a course with its holes, tees, rounds and hole stats."""
    with transaction(db):
        course = db.get(Course, course_id)
        if not course:
            raise NotFound(f"Course {course_id} not found")
        db.delete(course)

    logger.info("Deleted course %s", course_id)
