from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from conftest import PARS, make_course, make_round, make_tee
from scorebook.core.errors import ConstraintViolation, InvalidInput, NotFound
from scorebook.models.course import Course, Hole, Tee, TeeForHole
from scorebook.models.round import HoleStat, Round
from scorebook.services.courses import (
    CourseCreate,
    CourseInfo,
    HoleEdit,
    HoleIn,
    TeeCreate,
    TeeHoleIn,
    add_tee,
    create_course,
    delete_course,
    delete_tee,
    get_course,
    list_courses,
    list_playable_courses,
    update_course_holes,
    update_course_info,
)
from scorebook.services.dashboard import get_fairways_hit_trend
from scorebook.services.round_view import get_round_with_stats


def _holes(pars):
    return [HoleIn(number=i, par=p, stroke_index=i) for i, p in enumerate(pars, start=1)]


def test_create_course_sets_par_from_holes(db):
    course = make_course(db)

    assert course.par == 72
    assert [h.number for h in course.holes] == list(range(1, 19))


def test_create_nine_hole_course(db):
    course = make_course(db, pars=PARS[:9], name="Executive")
    assert course.par == 36
    assert len(course.holes) == 9


@pytest.mark.parametrize(
    "holes",
    [
        _holes(PARS[:12]),
        _holes([6] + PARS[1:]),
        [HoleIn(number=i, par=4, stroke_index=19 if i == 1 else i) for i in range(1, 19)],
        [HoleIn(number=i + 1, par=4, stroke_index=i) for i in range(1, 19)],
    ],
)
def test_create_course_rejects_invalid_holes(db, holes):
    with pytest.raises(InvalidInput):
        create_course(db, CourseCreate(name="Bad", holes=holes))


def test_duplicate_stroke_index_is_a_constraint_violation(db):
    holes = [HoleIn(number=i, par=4, stroke_index=1 if i == 2 else i) for i in range(1, 19)]
    with pytest.raises(ConstraintViolation):
        create_course(db, CourseCreate(name="Dupes", holes=holes))
    assert db.execute(select(func.count(Course.id))).scalar_one() == 0


def test_tee_yardage_is_sum_of_hole_yardages(db):
    course = make_course(db)
    tee = make_tee(db, course)

    assert tee.yardage == sum(300 + n for n in range(1, 19))
    assert tee.rating == Decimal("70.1")
    assert len(tee.tee_for_holes) == 18


def test_tee_needs_every_hole(db):
    course = make_course(db)
    partial = [TeeHoleIn(hole_id=h.id, yardage=350) for h in course.holes[:17]]

    with pytest.raises(ConstraintViolation):
        add_tee(db, course.id, TeeCreate(name="Blue", rating=Decimal("72.0"), slope=130, holes=partial))


def test_tee_name_unique_per_course_and_slope_non_zero(db):
    course = make_course(db)
    make_tee(db, course)

    with pytest.raises(ConstraintViolation):
        make_tee(db, course, name="white")
    with pytest.raises(InvalidInput):
        make_tee(db, course, name="Red", slope=0)


def test_update_course_holes_swaps_stroke_index_and_recomputes_par(db):
    course = make_course(db)
    h1, h2 = course.holes[0], course.holes[1]

    updated = update_course_holes(
        db,
        course.id,
        [
            HoleEdit(id=h1.id, par=5, stroke_index=2),
            HoleEdit(id=h2.id, par=4, stroke_index=1),
        ],
    )

    assert updated.par == 73
    reloaded = get_course(db, course.id)
    assert (reloaded.holes[0].par, reloaded.holes[0].stroke_index) == (5, 2)
    assert reloaded.holes[1].stroke_index == 1
    assert reloaded.par == sum(h.par for h in reloaded.holes)


def test_update_course_holes_rejects_collisions_and_keeps_state(db):
    course = make_course(db)

    with pytest.raises(ConstraintViolation):
        update_course_holes(db, course.id, [HoleEdit(id=course.holes[0].id, par=4, stroke_index=5)])
    with pytest.raises(NotFound):
        update_course_holes(db, course.id, [HoleEdit(id=99999, par=4, stroke_index=1)])

    assert get_course(db, course.id).par == 72


def test_update_course_info(db):
    course = make_course(db)

    updated = update_course_info(db, course.id, CourseInfo(name="  Pine Valley GC ", city="Pine Valley"))

    assert updated.name == "Pine Valley GC"
    assert updated.city == "Pine Valley"
    assert updated.state == "NJ"
    with pytest.raises(InvalidInput):
        update_course_info(db, course.id, CourseInfo(name="   "))


def test_delete_tee_blocked_while_rounds_use_it(db):
    course = make_course(db)
    white = make_tee(db, course)
    blue = make_tee(db, course, name="Blue")
    make_round(db, course, white)

    with pytest.raises(ConstraintViolation):
        delete_tee(db, white.id)

    delete_tee(db, blue.id)
    assert db.get(Tee, blue.id) is None
    assert db.execute(select(func.count(TeeForHole.id))).scalar_one() == 18
    with pytest.raises(NotFound):
        delete_tee(db, blue.id)


def test_delete_course_cascades(db):
    course = make_course(db)
    tee = make_tee(db, course)
    make_round(db, course, tee)
    other = make_course(db, name="Other")

    delete_course(db, course.id)

    assert [c.id for c in list_courses(db)] == [other.id]
    assert db.execute(select(func.count(Hole.id))).scalar_one() == 18
    assert db.execute(select(func.count(Tee.id))).scalar_one() == 0
    assert db.execute(select(func.count(Round.id))).scalar_one() == 0
    assert db.execute(select(func.count(HoleStat.id))).scalar_one() == 0
    with pytest.raises(NotFound):
        get_course(db, course.id)


def test_playable_courses_need_a_tee(db):
    make_course(db, name="Bare")
    teed = make_course(db, name="Teed")
    make_tee(db, teed)

    assert [c.name for c in list_playable_courses(db)] == ["Teed"]


def test_hole_turned_par_three_drops_its_drives(db):
    course = make_course(db)
    tee = make_tee(db, course)
    rnd = make_round(db, course, tee, played=date(2024, 3, 10))
    first = course.holes[0]

    update_course_holes(db, course.id, [HoleEdit(id=first.id, par=3, stroke_index=1)])

    assert db.get(Round, rnd.id).total_fairways == 13
    stat = db.execute(
        select(HoleStat).where(HoleStat.round_id == rnd.id, HoleStat.hole_number == 1)
    ).scalar_one()
    assert stat.drive is None

    view = get_round_with_stats(db, rnd.id)
    assert view.possible_fairways == 13
    assert view.drive_accuracy["hit"].count == 13
    assert view.drive_accuracy["hit"].percentage == 100.0
    assert get_fairways_hit_trend(db, "u1", 3, 2024).current_percent == pytest.approx(1.0)
