"""
Plan authoring.

Turns a manual selection or a generated fragment into a saved WorkoutPlan,
enforcing the weekday rules: one to three weekdays per plan and no weekday
shared between plans.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Union

from ..catalog import ExerciseCatalog
from ..errors import ValidationError, WeekdayConflictError
from ..models import ExerciseMap, WorkoutPlan
from ..taxonomy import MUSCLE_SUB_GROUPS, Weekday
from ..timing import recommended_details
from .generator import PlanFragment

logger = logging.getLogger(__name__)

DayLike = Union[Weekday, str]


def manual_details(catalog: ExerciseCatalog, selections: Dict[str, List[str]]) -> ExerciseMap:
    """
    Starting parameters for hand-picked exercises.

    Args:
        catalog: Catalog the names come from
        selections: sub-group -> exercise names, in the order picked

    Returns:
        sub-group -> name -> details from the low end of each recommendation
    """
    exercises: ExerciseMap = {}
    for sub_group, names in selections.items():
        for name in names:
            definition = catalog.find(sub_group, name)
            if definition is None:
                raise ValidationError(f"'{name}' não existe em {sub_group}")
            exercises.setdefault(sub_group, {})[name] = recommended_details(definition)
    return exercises


class PlanBook:
    """Create and delete plans over a PlanRepository."""

    def __init__(
        self,
        plans,
        max_days: int = 3,
        max_groups: int = 3,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.plans = plans
        self.max_days = max_days
        self.max_groups = max_groups
        self.clock = clock

    def taken_weekdays(self) -> Dict[Weekday, str]:
        """Weekday -> id of the plan that owns it."""
        return {day: plan.id for plan in self.plans.all() for day in plan.days}

    def available_weekdays(self) -> List[Weekday]:
        taken = self.taken_weekdays()
        return [d for d in Weekday if d not in taken]

    def plan_for(self, weekday: Weekday) -> Optional[WorkoutPlan]:
        for plan in self.plans.all():
            if weekday in plan.days:
                return plan
        return None

    def create(self, days: Iterable[DayLike], muscles: Iterable[str], exercises: ExerciseMap) -> WorkoutPlan:
        """
        Validate and save a new plan.

        Raises:
            ValidationError: bad weekday count, muscle groups or exercise details
            WeekdayConflictError: a weekday already belongs to another plan
        """
        weekdays = self._validate_days(days)
        groups = self._validate_muscles(muscles)
        self._validate_exercises(exercises)

        plan = WorkoutPlan(days=weekdays, muscles=groups, exercises=exercises, created_at=self.clock())
        self.plans.add(plan)
        logger.info("Saved plan %s for %s (%d exercises)", plan.id, plan.day_label, plan.exercise_count)
        return plan

    def create_from_fragment(self, days: Iterable[DayLike], fragment: PlanFragment) -> WorkoutPlan:
        return self.create(days, fragment.muscles, fragment.exercises)

    def delete(self, plan_id: str) -> WorkoutPlan:
        plan = self.plans.delete(plan_id)
        logger.info("Deleted plan %s (%s)", plan.id, plan.day_label)
        return plan

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_days(self, days: Iterable[DayLike]) -> List[Weekday]:
        weekdays: List[Weekday] = []
        for day in days:
            try:
                wd = day if isinstance(day, Weekday) else Weekday.from_label(day)
            except ValueError:
                raise ValidationError(f"Dia inválido: {day}") from None
            if wd not in weekdays:
                weekdays.append(wd)

        if not weekdays:
            raise ValidationError("Escolha ao menos um dia para o treino.")
        if len(weekdays) > self.max_days:
            raise ValidationError(f"Escolha no máximo {self.max_days} dias.")

        taken = self.taken_weekdays()
        for wd in weekdays:
            if wd in taken:
                logger.warning("Weekday %s already used by plan %s", wd.label, taken[wd])
                raise WeekdayConflictError(wd.label, taken[wd])
        return weekdays

    def _validate_muscles(self, muscles: Iterable[str]) -> List[str]:
        groups = []
        for group in muscles:
            if group not in MUSCLE_SUB_GROUPS:
                raise ValidationError(f"Grupo muscular desconhecido: {group}")
            if group not in groups:
                groups.append(group)
        if not groups:
            raise ValidationError("Selecione ao menos um grupo muscular.")
        if len(groups) > self.max_groups:
            raise ValidationError(f"Selecione no máximo {self.max_groups} grupos musculares.")
        return groups

    @staticmethod
    def _validate_exercises(exercises: ExerciseMap) -> None:
        if not any(exercises.values()):
            raise ValidationError("Selecione ao menos um exercício primeiro.")
        for by_name in exercises.values():
            for details in by_name.values():
                if (
                    details.sets < 1
                    or details.time_per_set < 0
                    or details.rest < 0
                    or not details.reps.strip()
                ):
                    raise ValidationError(
                        "Preencha todos os campos (séries, reps, tempo, descanso) de todos os exercícios escolhidos."
                    )
