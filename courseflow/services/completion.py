from __future__ import annotations

from dataclasses import dataclass

from courseflow.models.course import Unit
from courseflow.models.progress import Completed, ProgressSnapshot, is_completed


@dataclass(frozen=True, slots=True)
class UnitCompletion:
    completed: int
    total: int

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.completed * 100 / self.total)


def completed_count(progress: ProgressSnapshot) -> int:
    return sum(1 for record in progress.values() if isinstance(record, Completed))


def unit_completion(unit: Unit, progress: ProgressSnapshot) -> UnitCompletion:
    """Completed lessons out of the unit's total.

    Falls back to the advertised ``lesson_count`` when the unit's
    lessons have not been expanded.
    """
    done = sum(1 for lesson in unit.lessons if is_completed(progress, lesson.id))
    total = len(unit.lessons) or unit.lesson_count
    return UnitCompletion(completed=done, total=total)
