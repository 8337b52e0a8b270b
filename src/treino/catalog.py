"""
Exercise Catalog

Internal Codename: ARSENAL
Registry of exercise definitions grouped by sub-group, each split into
isolated and multi-joint lists. Seeded from YAML, extended by the user.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import yaml

from .errors import DuplicateExerciseError, ValidationError
from .models import ExerciseDefinition, ExerciseKind
from .taxonomy import sub_groups_of

logger = logging.getLogger(__name__)


class ExerciseCatalog:
    """
    Sub-group -> {isolated, multi} registry.

    Duplicate names inside a sub-group are tolerated unless the catalog was
    built with strict_names=True.
    """

    def __init__(self, strict_names: bool = False):
        self.strict_names = strict_names
        self._entries: Dict[str, Dict[ExerciseKind, List[ExerciseDefinition]]] = {}

    def __contains__(self, sub_group: str) -> bool:
        return sub_group in self._entries

    def __len__(self) -> int:
        return sum(len(lst) for kinds in self._entries.values() for lst in kinds.values())

    @property
    def sub_groups(self) -> List[str]:
        return list(self._entries)

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_exercise(
        self,
        group: str,
        sub_group: str,
        kind: ExerciseKind,
        definition: ExerciseDefinition
    ) -> ExerciseDefinition:
        """
        Add an exercise to a sub-group, creating the sub-group if needed.

        Args:
            group: Primary muscle group the sub-group belongs to
            sub_group: Target sub-group
            kind: isolated or multi
            definition: Exercise to add

        Returns:
            The stored definition (rest normalised to carry an 's' suffix)

        Raises:
            ValidationError: group, sub-group or name blank
            DuplicateExerciseError: name exists and strict_names is on
        """
        if not (group or '').strip() or not (sub_group or '').strip() or not (definition.name or '').strip():
            raise ValidationError("Preencha todos os campos obrigatórios.")

        if sub_group not in sub_groups_of(group):
            logger.debug("Sub-group %s is not part of %s in the taxonomy", sub_group, group)

        if self.strict_names and self.find(sub_group, definition.name) is not None:
            raise DuplicateExerciseError(sub_group, definition.name)

        rest = definition.rest.strip()
        stored = ExerciseDefinition(
            name=definition.name,
            kind=kind,
            sets=definition.sets,
            reps=definition.reps,
            rest=rest if not rest or rest.endswith('s') else rest + 's',
            more=definition.more,
            less=definition.less,
            time_based=definition.time_based,
        )
        self._bucket(sub_group)[kind].append(stored)
        logger.info("Added %s exercise '%s' to %s", kind.value, stored.name, sub_group)
        return stored

    def remove_exercise(self, sub_group: str, name: str) -> bool:
        """Remove every entry with this name from both lists. Returns whether anything was removed."""
        kinds = self._entries.get(sub_group)
        if not kinds:
            return False
        removed = False
        for kind, lst in kinds.items():
            kept = [d for d in lst if d.name != name]
            if len(kept) != len(lst):
                removed = True
                kinds[kind] = kept
        if removed:
            logger.info("Removed '%s' from %s", name, sub_group)
        return removed

    # =========================================================================
    # Queries
    # =========================================================================

    def list_by_sub_group(self, sub_group: str) -> Dict[str, List[ExerciseDefinition]]:
        kinds = self._entries.get(sub_group, {})
        return {
            'isolated': list(kinds.get(ExerciseKind.ISOLATED, [])),
            'multi': list(kinds.get(ExerciseKind.MULTI, [])),
        }

    def find(self, sub_group: str, name: str) -> Optional[ExerciseDefinition]:
        for definition in self.iter_sub_group(sub_group):
            if definition.name == name:
                return definition
        return None

    def iter_sub_group(self, sub_group: str) -> Iterator[ExerciseDefinition]:
        """Multi-joint entries first, then isolated, in insertion order."""
        kinds = self._entries.get(sub_group, {})
        yield from kinds.get(ExerciseKind.MULTI, [])
        yield from kinds.get(ExerciseKind.ISOLATED, [])

    # =========================================================================
    # Documents
    # =========================================================================

    def to_document(self) -> Dict[str, Any]:
        return {
            sub_group: {
                'isolated': [d.to_dict() for d in kinds[ExerciseKind.ISOLATED]],
                'multi': [d.to_dict() for d in kinds[ExerciseKind.MULTI]],
            }
            for sub_group, kinds in self._entries.items()
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any], strict_names: bool = False) -> 'ExerciseCatalog':
        """Build from a sub-group -> {isolated, multi} document. Missing lists are empty."""
        catalog = cls(strict_names=strict_names)
        for sub_group, lists in (document or {}).items():
            lists = lists or {}
            bucket = catalog._bucket(sub_group)
            for kind in ExerciseKind:
                for raw in lists.get(kind.value) or []:
                    bucket[kind].append(ExerciseDefinition.from_dict(raw, kind))
        return catalog

    def _bucket(self, sub_group: str) -> Dict[ExerciseKind, List[ExerciseDefinition]]:
        if sub_group not in self._entries:
            self._entries[sub_group] = {ExerciseKind.ISOLATED: [], ExerciseKind.MULTI: []}
        return self._entries[sub_group]


def load_seed(path: Path, strict_names: bool = False) -> ExerciseCatalog:
    """
    Load the seed catalog shipped as YAML.

    Args:
        path: YAML file, sub-group -> {isolated: [...], multi: [...]}
        strict_names: Passed through to the catalog

    Returns:
        ExerciseCatalog; empty when the file does not exist
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Seed catalog not found at %s, starting empty", path)
        return ExerciseCatalog(strict_names=strict_names)

    with open(path, encoding='utf-8') as f:
        document = yaml.safe_load(f) or {}

    catalog = ExerciseCatalog.from_document(document, strict_names=strict_names)
    logger.info("Loaded %d seed exercises across %d sub-groups", len(catalog), len(catalog.sub_groups))
    return catalog
