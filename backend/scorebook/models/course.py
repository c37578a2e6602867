from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scorebook.db.base import Base


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(String(200))
    city: Mapped[str | None] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(100))
    country: Mapped[str | None] = mapped_column(String(100))
    # Sum of Hole.par; rewritten whenever holes change.
    par: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    holes: Mapped[list["Hole"]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Hole.number",
    )

    tees: Mapped[list["Tee"]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Tee.id",
    )

    rounds: Mapped[list["Round"]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
    )


class Hole(Base):
    __tablename__ = "holes"
    __table_args__ = (
        UniqueConstraint("course_id", "number", name="uq_hole_course_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    par: Mapped[int] = mapped_column(Integer, nullable=False)
    stroke_index: Mapped[int] = mapped_column(Integer, nullable=False)

    course: Mapped["Course"] = relationship(back_populates="holes")
    tee_yardages: Mapped[list["TeeForHole"]] = relationship(
        back_populates="hole",
        cascade="all, delete-orphan",
    )


class Tee(Base):
    __tablename__ = "tees"
    __table_args__ = (
        UniqueConstraint("course_id", "name", name="uq_tee_course_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    rating: Mapped[Decimal | None] = mapped_column(Numeric(4, 1), nullable=True)
    slope: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Sum of TeeForHole.yardage.
    yardage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    course: Mapped["Course"] = relationship(back_populates="tees")
    tee_for_holes: Mapped[list["TeeForHole"]] = relationship(
        back_populates="tee",
        cascade="all, delete-orphan",
    )


class TeeForHole(Base):
    __tablename__ = "tee_for_holes"
    __table_args__ = (
        UniqueConstraint("tee_id", "hole_id", name="uq_tee_for_hole"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tee_id: Mapped[int] = mapped_column(
        ForeignKey("tees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hole_id: Mapped[int] = mapped_column(
        ForeignKey("holes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    yardage: Mapped[int] = mapped_column(Integer, nullable=False)

    tee: Mapped["Tee"] = relationship(back_populates="tee_for_holes")
    hole: Mapped["Hole"] = relationship(back_populates="tee_yardages")
