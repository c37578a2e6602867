import enum
from datetime import date

from sqlalchemy import Date, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scorebook.db.base import Base


class Accuracy(str, enum.Enum):
    HIT = "hit"
    LEFT = "left"
    RIGHT = "right"
    LONG = "long"
    SHORT = "short"


# Long/short make no sense off the tee.
DRIVE_RESULTS = (Accuracy.HIT, Accuracy.LEFT, Accuracy.RIGHT)
APPROACH_RESULTS = tuple(Accuracy)

AccuracyColumn = Enum(
    Accuracy,
    name="accuracy",
    native_enum=False,
    length=16,
    validate_strings=True,
    values_callable=lambda members: [m.value for m in members],
)


class Round(Base):
    __tablename__ = "rounds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tee_id: Mapped[int] = mapped_column(
        ForeignKey("tees.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    date_played: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    number_of_holes: Mapped[int] = mapped_column(Integer, nullable=False)

    # Cached aggregates over hole_stats, maintained by services.hole_stats.
    # total_score stays NULL until every expected hole has a score.
    total_score: Mapped[int | None] = mapped_column(Integer)
    total_putts: Mapped[int | None] = mapped_column(Integer)
    total_fairways: Mapped[int | None] = mapped_column(Integer)
    total_gir: Mapped[int | None] = mapped_column(Integer)

    course = relationship("Course", back_populates="rounds")
    tee = relationship("Tee")
    hole_stats: Mapped[list["HoleStat"]] = relationship(
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="HoleStat.hole_number",
    )

    @property
    def is_complete(self) -> bool:
        return self.total_score is not None


class HoleStat(Base):
    __tablename__ = "hole_stats"
    __table_args__ = (
        UniqueConstraint("round_id", "hole_number", name="uq_hole_stat_round_hole"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    round_id: Mapped[int] = mapped_column(
        ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hole_id: Mapped[int] = mapped_column(
        ForeignKey("holes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hole_number: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[int | None] = mapped_column(Integer)
    putts: Mapped[int | None] = mapped_column(Integer)
    chip_shots: Mapped[int | None] = mapped_column(Integer)
    sand_shots: Mapped[int | None] = mapped_column(Integer)
    drive: Mapped[Accuracy | None] = mapped_column(AccuracyColumn)
    approach: Mapped[Accuracy | None] = mapped_column(AccuracyColumn)
    note: Mapped[str | None] = mapped_column(Text)

    round: Mapped["Round"] = relationship(back_populates="hole_stats")
    hole = relationship("Hole")

    @property
    def up_and_down(self) -> bool:
        return self.putts == 1 and self.chip_shots == 1

    @property
    def sand_save(self) -> bool:
        return self.putts == 1 and self.sand_shots == 1
