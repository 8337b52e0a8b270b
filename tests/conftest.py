"""Shared fixtures: a small catalog, plan builders and a temp data directory."""

from datetime import date, datetime

import pytest

from treino.catalog import ExerciseCatalog
from treino.models import ExerciseDefinition, ExerciseDetails, ExerciseKind, HistoryEntry, WorkoutPlan
from treino.store import DocumentStore, HistoryRepository, PlanRepository
from treino.taxonomy import Weekday

# 2024-03-04 is a Monday
MONDAY = date(2024, 3, 4)
TUESDAY = date(2024, 3, 5)


def ex(name, kind=ExerciseKind.ISOLATED, sets='3', reps='10', rest='60s', **kw):
    return ExerciseDefinition(name=name, kind=kind, sets=sets, reps=reps, rest=rest, **kw)


def details(sets=3, reps='10', time_per_set=45, rest=60):
    return ExerciseDetails(sets=sets, reps=reps, time_per_set=time_per_set, rest=rest)


def make_plan(days=(Weekday.SEGUNDA,), exercises=None, plan_id='plan-1', muscles=('Peito',)):
    if exercises is None:
        exercises = {
            'Peito médio': {
                'Supino Reto': details(sets=2, rest=90),
                'Crucifixo': details(sets=1, rest=60),
            },
            'Peito superior': {
                'Supino inclinado': details(sets=3, rest=60),
            },
        }
    return WorkoutPlan(
        id=plan_id,
        days=list(days),
        muscles=list(muscles),
        exercises=exercises,
        created_at=datetime(2024, 3, 1, 8, 0),
    )


def entry(day, weights, workout_id='plan-1', visible=True):
    return HistoryEntry(
        workout_id=workout_id,
        days=['Segunda'],
        muscles=['Peito'],
        sub_muscles=['Peito médio'],
        date=day,
        weights=dict(weights),
        visible=visible,
    )


@pytest.fixture
def chest_catalog():
    """Peito only: 2 multi + 2 isolated in Peito médio, 1 multi in Peito superior."""
    catalog = ExerciseCatalog()
    catalog.add_exercise('Peito', 'Peito médio', ExerciseKind.MULTI,
                         ex('Supino reto', ExerciseKind.MULTI, sets='3-4', reps='8-12', rest='90-120s'))
    catalog.add_exercise('Peito', 'Peito médio', ExerciseKind.MULTI,
                         ex('Flexão de braço', ExerciseKind.MULTI, sets='3', reps='12-15', rest='60s'))
    catalog.add_exercise('Peito', 'Peito médio', ExerciseKind.ISOLATED,
                         ex('Crucifixo', sets='3', reps='12', rest='60s'))
    catalog.add_exercise('Peito', 'Peito médio', ExerciseKind.ISOLATED,
                         ex('Peck deck', sets='3-4', reps='12-15', rest='45-60s'))
    catalog.add_exercise('Peito', 'Peito superior', ExerciseKind.MULTI,
                         ex('Supino inclinado', ExerciseKind.MULTI, sets='4', reps='8-10', rest='90s'))
    return catalog


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path / 'data')


@pytest.fixture
def plan_repo(store):
    return PlanRepository(store)


@pytest.fixture
def history_repo(store):
    return HistoryRepository(store)
