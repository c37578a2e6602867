from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from scorebook.api.deps import get_db
from scorebook.services import courses as course_service
from scorebook.services.courses import CourseCreate, CourseInfo, HoleEdit, TeeCreate

router = APIRouter()


class HoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: int
    par: int
    stroke_index: int


class TeeSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    rating: Decimal | None
    slope: int | None
    yardage: int


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str | None
    city: str | None
    state: str | None
    country: str | None
    par: int
    holes: list[HoleOut] = []
    tees: list[TeeSummaryOut] = []


class CourseSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    city: str | None
    state: str | None
    par: int


class HolesEdit(BaseModel):
    holes: list[HoleEdit]


@router.post("/courses", response_model=CourseOut, status_code=201)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)):
    return course_service.create_course(db, payload)


@router.get("/courses", response_model=list[CourseSummaryOut])
def list_courses(db: Session = Depends(get_db)):
    return course_service.list_courses(db)


@router.get("/courses/playable", response_model=list[CourseOut])
def list_playable_courses(db: Session = Depends(get_db)):
    return course_service.list_playable_courses(db)


@router.get("/courses/{course_id}", response_model=CourseOut)
def get_course(course_id: int, db: Session = Depends(get_db)):
    return course_service.get_course(db, course_id)


@router.patch("/courses/{course_id}", response_model=CourseOut)
def update_course_info(course_id: int, payload: CourseInfo, db: Session = Depends(get_db)):
    course_service.update_course_info(db, course_id, payload)
    return course_service.get_course(db, course_id)


@router.put("/courses/{course_id}/holes", response_model=CourseOut)
def update_course_holes(course_id: int, payload: HolesEdit, db: Session = Depends(get_db)):
    course_service.update_course_holes(db, course_id, payload.holes)
    return course_service.get_course(db, course_id)


@router.post("/courses/{course_id}/tees", response_model=TeeSummaryOut, status_code=201)
def add_tee(course_id: int, payload: TeeCreate, db: Session = Depends(get_db)):
    return course_service.add_tee(db, course_id, payload)


@router.delete("/tees/{tee_id}")
def delete_tee(tee_id: int, db: Session = Depends(get_db)):
    course_service.delete_tee(db, tee_id)
    return {"ok": True}


@router.delete("/courses/{course_id}")
def delete_course(course_id: int, db: Session = Depends(get_db)):
    course_service.delete_course(db, course_id)
    return {"ok": True}
