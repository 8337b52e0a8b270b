"""
Core data types shared by the catalog, stores and engine.

Each persisted type maps 1:1 onto the JSON documents kept by treino.store.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .taxonomy import Weekday

DATE_FORMAT = '%d/%m/%Y'


class ExerciseKind(Enum):
    ISOLATED = 'isolated'
    MULTI = 'multi'


@dataclass
class ExerciseDefinition:
    """Catalog entry. Recommended values are free text ranges like '3-4' or '60-90s'."""
    name: str
    kind: ExerciseKind
    sets: str = ''
    reps: str = ''
    rest: str = ''
    more: Optional[str] = None   # Synergists worked harder
    less: Optional[str] = None   # Muscles recruited less
    time_based: bool = False     # Held for a duration instead of repeated

    def to_dict(self) -> Dict[str, Any]:
        recs: Dict[str, Any] = {'sets': self.sets, 'reps': self.reps, 'rest': self.rest}
        if self.time_based:
            recs['time_based'] = True
        doc: Dict[str, Any] = {'name': self.name}
        if self.more:
            doc['more'] = self.more
        if self.less:
            doc['less'] = self.less
        doc['recs'] = recs
        return doc

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kind: ExerciseKind) -> 'ExerciseDefinition':
        recs = data.get('recs') or {}
        return cls(
            name=str(data['name']),
            kind=kind,
            sets=str(recs.get('sets', '')),
            reps=str(recs.get('reps', '')),
            rest=str(recs.get('rest', '')),
            more=data.get('more'),
            less=data.get('less'),
            time_based=bool(recs.get('time_based', False)),
        )


@dataclass
class ExerciseDetails:
    """Working parameters of one exercise inside a plan."""
    sets: int
    reps: str
    time_per_set: int
    rest: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sets': self.sets,
            'reps': self.reps,
            'time_per_set': self.time_per_set,
            'rest': self.rest,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExerciseDetails':
        return cls(
            sets=int(data['sets']),
            reps=str(data['reps']),
            time_per_set=int(data['time_per_set']),
            rest=int(data['rest']),
        )


# sub-group -> exercise name -> details, insertion ordered
ExerciseMap = Dict[str, Dict[str, ExerciseDetails]]


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class WorkoutPlan:
    """A saved routine bound to one to three weekdays."""
    days: List[Weekday]
    muscles: List[str]
    exercises: ExerciseMap
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def day_label(self) -> str:
        return ' / '.join(d.label for d in self.days)

    @property
    def sub_groups(self) -> List[str]:
        return list(self.exercises)

    @property
    def exercise_count(self) -> int:
        return sum(len(ex) for ex in self.exercises.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'days': [d.label for d in self.days],
            'muscles': list(self.muscles),
            'exercises': {
                sub: {name: details.to_dict() for name, details in exs.items()}
                for sub, exs in self.exercises.items()
            },
            'created_at': self.created_at.isoformat(timespec='seconds'),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkoutPlan':
        return cls(
            id=data['id'],
            days=[Weekday.from_label(d) for d in data.get('days', [])],
            muscles=list(data.get('muscles', [])),
            exercises={
                sub: {name: ExerciseDetails.from_dict(d) for name, d in exs.items()}
                for sub, exs in (data.get('exercises') or {}).items()
            },
            created_at=datetime.fromisoformat(data['created_at']),
        )


@dataclass
class HistoryEntry:
    """One completed session. Only `visible` ever changes after creation."""
    workout_id: str
    days: List[str]
    muscles: List[str]
    sub_muscles: List[str]
    date: date
    weights: Dict[str, str]
    visible: bool = True
    id: str = field(default_factory=new_id)

    @property
    def date_label(self) -> str:
        return self.date.strftime(DATE_FORMAT)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'workout_id': self.workout_id,
            'days': list(self.days),
            'muscles': list(self.muscles),
            'sub_muscles': list(self.sub_muscles),
            'date': self.date_label,
            'weights': dict(self.weights),
            'visible': self.visible,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HistoryEntry':
        return cls(
            id=data['id'],
            workout_id=data['workout_id'],
            days=list(data.get('days', [])),
            muscles=list(data.get('muscles', [])),
            sub_muscles=list(data.get('sub_muscles', [])),
            date=datetime.strptime(data['date'], DATE_FORMAT).date(),
            weights={str(k): str(v) for k, v in (data.get('weights') or {}).items() if v is not None},
            visible=bool(data.get('visible', True)),
        )
