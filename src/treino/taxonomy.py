"""
Muscle taxonomy and calendar labels.

Fixed configuration: six primary muscle groups, each with an ordered list of
sub-groups. Not user editable.
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional


MUSCLE_SUB_GROUPS: Dict[str, List[str]] = {
    'Pernas': ['Quadríceps', 'Posterior de coxa', 'Glúteos', 'Panturrilhas', 'Adutores / Abdutores'],
    'Peito': ['Peito superior', 'Peito médio', 'Peito inferior'],
    'Costas': ['Costas superiores', 'Costas médias', 'Lombar', 'Largura das costas'],
    'Ombros': ['Ombro frontal', 'Ombro lateral', 'Ombro posterior', 'Trapézio'],
    'Braços': ['Bíceps curto', 'Bíceps longo', 'Braquial', 'Tríceps longo', 'Tríceps lateral', 'Tríceps medial'],
    'Abdômen': ['Abdômen superior', 'Abdômen inferior', 'Abdômen lateral / core'],
}

MUSCLE_GROUPS: List[str] = list(MUSCLE_SUB_GROUPS)

MONTH_LABELS: List[str] = [
    'Jan', 'Fev', 'Mar', 'Abr', 'Mai', 'Jun',
    'Jul', 'Ago', 'Set', 'Out', 'Nov', 'Dez',
]


def sub_groups_of(group: str) -> List[str]:
    """Ordered sub-groups of a primary group; empty for unknown groups."""
    return list(MUSCLE_SUB_GROUPS.get(group, []))


def group_of(sub_group: str) -> Optional[str]:
    """Primary group owning a sub-group, or None."""
    for group, subs in MUSCLE_SUB_GROUPS.items():
        if sub_group in subs:
            return group
    return None


class Weekday(Enum):
    """Training weekdays, Monday first so date.weekday() indexes directly."""
    SEGUNDA = 'Segunda'
    TERCA = 'Terça'
    QUARTA = 'Quarta'
    QUINTA = 'Quinta'
    SEXTA = 'Sexta'
    SABADO = 'Sábado'
    DOMINGO = 'Domingo'

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def of(cls, day: date) -> 'Weekday':
        return list(cls)[day.weekday()]

    @classmethod
    def from_label(cls, text: str) -> 'Weekday':
        """Case-insensitive lookup by label ('quarta') or name ('QUARTA')."""
        needle = text.strip().lower()
        for wd in cls:
            if wd.value.lower() == needle or wd.name.lower() == needle:
                return wd
        raise ValueError(f"Unknown weekday: {text}")

