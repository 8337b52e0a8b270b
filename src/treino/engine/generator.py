"""
Recommended Workout Generator

Internal Codename: FORGE
Greedily fills a time budget with exercises from the catalog, compound
movements first.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..catalog import ExerciseCatalog
from ..errors import (
    EmptyCatalogError,
    GenerationFailedError,
    InvalidDurationError,
    ValidationError,
)
from ..models import ExerciseDefinition, ExerciseKind, ExerciseMap
from ..taxonomy import MUSCLE_SUB_GROUPS, sub_groups_of
from ..timing import exercise_seconds, plan_seconds, recommended_details

logger = logging.getLogger(__name__)

OVERSHOOT_TOLERANCE = 1.2  # Accept up to 20% over the target


@dataclass
class Candidate:
    """One (group, sub-group, exercise) triple in the selection pool."""
    group: str
    sub_group: str
    definition: ExerciseDefinition

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def is_multi(self) -> bool:
        return self.definition.kind is ExerciseKind.MULTI


Ordering = Callable[[List[Candidate]], List[Candidate]]


def random_ordering(pool: List[Candidate]) -> List[Candidate]:
    shuffled = list(pool)
    random.shuffle(shuffled)
    return shuffled


def identity_ordering(pool: List[Candidate]) -> List[Candidate]:
    return list(pool)


def seeded_ordering(seed: int) -> Ordering:
    """Shuffle driven by a private RNG; every call restarts from the seed."""
    def order(pool: List[Candidate]) -> List[Candidate]:
        shuffled = list(pool)
        random.Random(seed).shuffle(shuffled)
        return shuffled
    return order


@dataclass
class PlanFragment:
    """Generator output, ready to be embedded in a WorkoutPlan."""
    exercises: ExerciseMap
    sub_groups: Dict[str, List[str]]  # group -> involved sub-groups
    target_seconds: int
    selected_groups: List[str] = field(default_factory=list)

    @property
    def muscles(self) -> List[str]:
        """Every selected group, including any the budget left empty."""
        return list(self.selected_groups or self.sub_groups)

    @property
    def total_seconds(self) -> int:
        return plan_seconds(self.exercises)

    @property
    def exercise_count(self) -> int:
        return sum(len(ex) for ex in self.exercises.values())


class RecommendedWorkoutGenerator:
    """
    Builds time-bounded routines.

    The ordering function decides the pool order before compound movements
    are moved to the front. Production uses a random shuffle; tests pass
    identity_ordering or seeded_ordering(seed).
    """

    def __init__(
        self,
        catalog: ExerciseCatalog,
        ordering: Optional[Ordering] = None,
        max_groups: int = 3
    ):
        self.catalog = catalog
        self.ordering = ordering or random_ordering
        self.max_groups = max_groups

    def build_pool(self, selected_groups: Iterable[str]) -> List[Candidate]:
        """Every catalog exercise reachable from the groups through the taxonomy."""
        pool = []
        for group in selected_groups:
            for sub_group in sub_groups_of(group):
                for definition in self.catalog.iter_sub_group(sub_group):
                    pool.append(Candidate(group, sub_group, definition))
        return pool

    def generate(self, selected_groups: Iterable[str], target_seconds: int) -> PlanFragment:
        """
        Generate a routine close to target_seconds.

        Args:
            selected_groups: One to three primary muscle groups
            target_seconds: Time budget in seconds

        Returns:
            PlanFragment with sub-group -> exercise -> details

        Raises:
            ValidationError: Bad group selection
            EmptyCatalogError: No exercise reachable from the groups
            InvalidDurationError: target_seconds <= 0
            GenerationFailedError: Nothing could be accepted
        """
        groups = self._validate_groups(selected_groups)

        pool = self.build_pool(groups)
        if not pool:
            raise EmptyCatalogError(groups)
        if target_seconds <= 0:
            raise InvalidDurationError(target_seconds)

        # Stable partition: compound first, ordering preserved inside each kind
        ordered = sorted(self.ordering(pool), key=lambda c: not c.is_multi)

        distinct = len({c.name for c in ordered})
        limit = target_seconds * OVERSHOOT_TOLERANCE

        exercises: ExerciseMap = {}
        sub_groups: Dict[str, List[str]] = {}
        accepted: Set[str] = set()
        accumulated = 0

        for step in range(2 * len(ordered)):
            if accumulated >= target_seconds or len(accepted) >= distinct:
                break

            candidate = ordered[step % len(ordered)]
            if candidate.name in accepted:
                continue

            details = recommended_details(candidate.definition)
            cost = exercise_seconds(details)

            if accumulated == 0 or accumulated + cost <= limit:
                exercises.setdefault(candidate.sub_group, {})[candidate.name] = details
                involved = sub_groups.setdefault(candidate.group, [])
                if candidate.sub_group not in involved:
                    involved.append(candidate.sub_group)
                accepted.add(candidate.name)
                accumulated += cost
                logger.debug("Accepted %s (%ss), total %ss", candidate.name, cost, accumulated)
            else:
                logger.debug("Rejected %s (%ss), would reach %ss", candidate.name, cost, accumulated + cost)

        if not accepted:
            raise GenerationFailedError()

        logger.info(
            "Generated %d exercises for %s: %ss of %ss target",
            len(accepted), ', '.join(groups), accumulated, target_seconds
        )
        return PlanFragment(
            exercises=exercises,
            sub_groups=sub_groups,
            target_seconds=target_seconds,
            selected_groups=list(groups),
        )

    def _validate_groups(self, selected_groups: Iterable[str]) -> List[str]:
        groups: List[str] = []
        for group in selected_groups:
            if group not in MUSCLE_SUB_GROUPS:
                raise ValidationError(f"Grupo muscular desconhecido: {group}")
            if group not in groups:
                groups.append(group)
        if not groups:
            raise ValidationError("Selecione ao menos um grupo muscular.")
        if len(groups) > self.max_groups:
            raise ValidationError(f"Selecione no máximo {self.max_groups} grupos musculares.")
        return groups
