from .course import Course, Hole, Tee, TeeForHole
from .round import APPROACH_RESULTS, DRIVE_RESULTS, Accuracy, HoleStat, Round

__all__ = [
    "Course",
    "Hole",
    "Tee",
    "TeeForHole",
    "Round",
    "HoleStat",
    "Accuracy",
    "DRIVE_RESULTS",
    "APPROACH_RESULTS",
]
