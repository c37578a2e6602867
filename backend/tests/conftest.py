from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scorebook.api.deps import get_db
from scorebook.db.base import Base
from scorebook.db.session import enable_sqlite_foreign_keys
import scorebook.models  # noqa: F401
from scorebook.main import app
from scorebook.services import courses as course_service
from scorebook.services import rounds as round_service
from scorebook.services.courses import CourseCreate, HoleIn, TeeCreate, TeeHoleIn
from scorebook.services.rounds import RoundCreate

# Par 72: four par 3s, ten par 4s, four par 5s -> 14 possible fairways.
PARS = [4, 4, 3, 5, 4, 4, 3, 4, 5, 4, 3, 4, 5, 4, 4, 3, 4, 5]


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_course(db, pars=PARS, name="Pine Valley"):
    return course_service.create_course(
        db,
        CourseCreate(
            name=name,
            city="Clementon",
            state="NJ",
            country="USA",
            holes=[
                HoleIn(number=i, par=par, stroke_index=i) for i, par in enumerate(pars, start=1)
            ],
        ),
    )


def make_tee(db, course, name="White", rating=Decimal("70.1"), slope=125):
    return course_service.add_tee(
        db,
        course.id,
        TeeCreate(
            name=name,
            rating=rating,
            slope=slope,
            holes=[TeeHoleIn(hole_id=h.id, yardage=300 + h.number) for h in course.holes],
        ),
    )


def make_round(db, course, tee, *, user_id="u1", played=date(2024, 3, 10), holes=18, prefill=True):
    return round_service.create_round(
        db,
        user_id,
        RoundCreate(
            course_id=course.id,
            tee_id=tee.id,
            date_played=played,
            number_of_holes=holes,
            prefill=prefill,
        ),
    )


def hole_ids(course):
    return {h.number: h.id for h in course.holes}
