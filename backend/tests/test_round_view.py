import pytest
from sqlalchemy import select

from conftest import hole_ids, make_course, make_round, make_tee
from scorebook.core.errors import NotFound
from scorebook.models.course import TeeForHole
from scorebook.models.round import Accuracy
from scorebook.services.hole_stats import (
    ChipShotsUpdate,
    DriveUpdate,
    PuttsUpdate,
    SandShotsUpdate,
    ScoreUpdate,
    update_hole_stat,
)
from scorebook.services.round_view import get_round_with_stats


@pytest.fixture()
def course(db):
    return make_course(db)


@pytest.fixture()
def tee(db, course):
    return make_tee(db, course)


def test_hole_by_hole_joins_yardage_and_stats(db, course, tee):
    rnd = make_round(db, course, tee, prefill=False)
    update_hole_stat(db, rnd.id, 1, hole_ids(course)[1], ScoreUpdate(value=5))

    view = get_round_with_stats(db, rnd.id)

    assert [h.number for h in view.hole_by_hole] == list(range(1, 19))
    first = view.hole_by_hole[0]
    assert (first.par, first.stroke_index, first.yardage) == (4, 1, 301)
    assert first.stats.score == 5
    assert view.hole_by_hole[1].stats.score is None


def test_missing_tee_yardage_reads_as_zero(db, course, tee):
    rnd = make_round(db, course, tee)
    row = db.execute(
        select(TeeForHole).where(TeeForHole.tee_id == tee.id, TeeForHole.hole_id == hole_ids(course)[2])
    ).scalar_one()
    db.delete(row)
    db.commit()

    view = get_round_with_stats(db, rnd.id)
    assert view.hole_by_hole[1].yardage == 0


def test_nine_hole_round_composite_keeps_every_course_hole(db, course, tee):
    rnd = make_round(db, course, tee, holes=9)
    view = get_round_with_stats(db, rnd.id)

    assert len(view.hole_by_hole) == 18
    assert all(h.stats is None for h in view.hole_by_hole[9:])
    assert view.total_score == 36
    assert view.to_par == "E"
    assert view.back_nine.complete_round is False
    assert view.possible_fairways == 14


def test_scoring_averages(db, course, tee):
    rnd = make_round(db, course, tee)
    update_hole_stat(db, rnd.id, 1, hole_ids(course)[1], ScoreUpdate(value=5))

    view = get_round_with_stats(db, rnd.id)
    assert view.scoring_averages == {3: 3.0, 4: 4.1, 5: 5.0}


def test_scoring_averages_skip_unscored_holes(db, course, tee):
    rnd = make_round(db, course, tee, prefill=False)
    update_hole_stat(db, rnd.id, 3, hole_ids(course)[3], ScoreUpdate(value=2))

    view = get_round_with_stats(db, rnd.id)
    assert view.scoring_averages == {3: 2.0, 4: None, 5: None}


def test_accuracy_breakdown(db, course, tee):
    rnd = make_round(db, course, tee)
    update_hole_stat(db, rnd.id, 1, hole_ids(course)[1], DriveUpdate(value=Accuracy.LEFT))

    view = get_round_with_stats(db, rnd.id)

    assert set(view.drive_accuracy) == {"hit", "left", "right"}
    assert view.drive_accuracy["hit"].count == 13
    assert view.drive_accuracy["hit"].percentage == 92.9
    assert view.drive_accuracy["left"].percentage == 7.1
    assert view.drive_accuracy["right"].percentage == 0.0
    assert set(view.approach_accuracy) == {"hit", "left", "right", "long", "short"}
    assert view.approach_accuracy["hit"].count == 18
    assert view.approach_accuracy["hit"].percentage == 100.0


def test_nine_hole_subtotals(db, course, tee):
    rnd = make_round(db, course, tee, prefill=False)
    ids = hole_ids(course)
    update_hole_stat(db, rnd.id, 1, ids[1], ScoreUpdate(value=5))
    update_hole_stat(db, rnd.id, 2, ids[2], ScoreUpdate(value=4))

    view = get_round_with_stats(db, rnd.id)

    assert view.front_nine.par == 36
    assert view.front_nine.score == 9
    assert view.front_nine.yardage == sum(300 + n for n in range(1, 10))
    assert view.front_nine.complete_round is False
    assert view.back_nine.par == 36
    assert view.back_nine.score == 0


def test_complete_nines(db, course, tee):
    rnd = make_round(db, course, tee)
    view = get_round_with_stats(db, rnd.id)

    assert view.front_nine.complete_round is True
    assert view.back_nine.complete_round is True
    assert view.front_nine.score + view.back_nine.score == 72


def test_running_score_to_par(db, course, tee):
    rnd = make_round(db, course, tee, prefill=False)
    ids = hole_ids(course)
    update_hole_stat(db, rnd.id, 1, ids[1], ScoreUpdate(value=5))
    update_hole_stat(db, rnd.id, 2, ids[2], ScoreUpdate(value=3))
    update_hole_stat(db, rnd.id, 4, ids[4], ScoreUpdate(value=5))

    running = get_round_with_stats(db, rnd.id).running_to_par

    assert (running[0].par_thru, running[0].score_thru, running[0].to_par) == (4, 5, "+1")
    assert (running[1].par_thru, running[1].score_thru, running[1].to_par) == (8, 8, "E")
    assert running[2].score_thru is None
    # A gap at hole 3 leaves hole 4 undefined even though it is scored.
    assert running[3].score_thru is None
    assert running[3].par_thru == 16


def test_round_level_derived_values(db, course, tee):
    rnd = make_round(db, course, tee)
    ids = hole_ids(course)
    update_hole_stat(db, rnd.id, 2, ids[2], ChipShotsUpdate(value=1))
    update_hole_stat(db, rnd.id, 2, ids[2], PuttsUpdate(value=1))
    update_hole_stat(db, rnd.id, 5, ids[5], SandShotsUpdate(value=1))
    update_hole_stat(db, rnd.id, 5, ids[5], PuttsUpdate(value=1))
    update_hole_stat(db, rnd.id, 9, ids[9], PuttsUpdate(value=3))
    update_hole_stat(db, rnd.id, 9, ids[9], ScoreUpdate(value=6))

    view = get_round_with_stats(db, rnd.id)

    assert view.total_score == 73
    assert view.to_par == "+1"
    # (73 - 70.1) * 113 / 125 = 2.62
    assert view.score_differential == "2.6"
    assert view.total_putts == 35
    assert view.putts_per_hole == 1.9
    assert view.up_and_downs == [2]
    assert view.sand_saves == [5]
    assert view.three_putts == [9]
    assert view.score_distribution.par == 17
    assert view.score_distribution.bogey == 1


def test_incomplete_round_has_no_differential(db, course, tee):
    rnd = make_round(db, course, tee, prefill=False)
    view = get_round_with_stats(db, rnd.id)

    assert view.total_score is None
    assert view.to_par is None
    assert view.score_differential is None
    assert view.score_distribution.total == 0


def test_missing_round(db):
    with pytest.raises(NotFound):
        get_round_with_stats(db, 1234)
