"""Plan creation rules: weekday exclusivity and limits."""

from datetime import datetime

import pytest

from treino.engine.authoring import PlanBook, manual_details
from treino.engine.generator import RecommendedWorkoutGenerator, identity_ordering
from treino.errors import NotFoundError, ValidationError, WeekdayConflictError
from treino.models import ExerciseKind
from treino.taxonomy import Weekday

from conftest import details, ex


def _book(plan_repo):
    return PlanBook(plan_repo, clock=lambda: datetime(2024, 3, 1, 9, 30))


def _chest():
    return {'Peito médio': {'Supino Reto': details()}}


def test_create_plan(plan_repo):
    plan = _book(plan_repo).create(['Segunda', Weekday.QUARTA], ['Peito'], _chest())
    assert plan.days == [Weekday.SEGUNDA, Weekday.QUARTA]
    assert plan.day_label == 'Segunda / Quarta'
    assert plan.created_at == datetime(2024, 3, 1, 9, 30)
    assert plan_repo.get(plan.id) == plan


def test_weekdays_are_exclusive(plan_repo):
    book = _book(plan_repo)
    first = book.create(['Segunda', 'Quarta'], ['Peito'], _chest())
    with pytest.raises(WeekdayConflictError) as exc:
        book.create(['Terça', 'quarta'], ['Peito'], _chest())
    assert exc.value.weekday == 'Quarta'
    assert exc.value.plan_id == first.id
    assert len(plan_repo.all()) == 1


def test_weekday_sets_stay_disjoint(plan_repo):
    book = _book(plan_repo)
    book.create(['Segunda'], ['Peito'], _chest())
    book.create(['Terça', 'Quinta', 'Sábado'], ['Peito'], _chest())
    book.create(['Domingo'], ['Peito'], _chest())
    plans = plan_repo.all()
    for i, a in enumerate(plans):
        for b in plans[i + 1:]:
            assert not set(a.days) & set(b.days)
    assert book.available_weekdays() == [Weekday.QUARTA, Weekday.SEXTA]
    assert book.plan_for(Weekday.QUINTA).day_label == 'Terça / Quinta / Sábado'
    assert book.plan_for(Weekday.SEXTA) is None


def test_deleting_frees_weekdays(plan_repo):
    book = _book(plan_repo)
    plan = book.create(['Segunda'], ['Peito'], _chest())
    book.delete(plan.id)
    assert Weekday.SEGUNDA in book.available_weekdays()
    book.create(['Segunda'], ['Peito'], _chest())
    with pytest.raises(NotFoundError):
        book.delete(plan.id)


@pytest.mark.parametrize('days', [[], ['Segunda', 'Terça', 'Quarta', 'Quinta'], ['Feriado']])
def test_bad_weekday_selection(plan_repo, days):
    with pytest.raises(ValidationError):
        _book(plan_repo).create(days, ['Peito'], _chest())


def test_unknown_weekday_label_hides_lookup_error(plan_repo):
    with pytest.raises(ValidationError) as exc:
        _book(plan_repo).create(['Feriado'], ['Peito'], _chest())
    assert 'Feriado' in str(exc.value)
    assert exc.value.__cause__ is None
    assert exc.value.__suppress_context__


def test_repeated_weekday_counts_once(plan_repo):
    plan = _book(plan_repo).create(['Segunda', 'segunda'], ['Peito'], _chest())
    assert plan.days == [Weekday.SEGUNDA]


@pytest.mark.parametrize('muscles', [[], ['Peito', 'Costas', 'Pernas', 'Ombros'], ['Pescoço']])
def test_bad_muscle_selection(plan_repo, muscles):
    with pytest.raises(ValidationError):
        _book(plan_repo).create(['Segunda'], muscles, _chest())


@pytest.mark.parametrize('exercises', [
    {},
    {'Peito médio': {}},
    {'Peito médio': {'Supino Reto': details(sets=0)}},
    {'Peito médio': {'Supino Reto': details(reps=' ')}},
    {'Peito médio': {'Supino Reto': details(rest=-1)}},
])
def test_incomplete_exercises_rejected(plan_repo, exercises):
    with pytest.raises(ValidationError):
        _book(plan_repo).create(['Segunda'], ['Peito'], exercises)


def test_manual_details_from_recommendations(chest_catalog):
    exercises = manual_details(chest_catalog, {'Peito médio': ['Peck deck', 'Supino reto']})
    assert list(exercises['Peito médio']) == ['Peck deck', 'Supino reto']
    d = exercises['Peito médio']['Supino reto']
    assert (d.sets, d.reps, d.time_per_set, d.rest) == (3, '8', 45, 90)
    with pytest.raises(ValidationError):
        manual_details(chest_catalog, {'Peito médio': ['Remada']})


def test_save_generated_fragment(plan_repo, chest_catalog):
    fragment = RecommendedWorkoutGenerator(chest_catalog, ordering=identity_ordering).generate(['Peito'], 600)
    plan = _book(plan_repo).create_from_fragment(['Sexta'], fragment)
    assert plan.muscles == ['Peito']
    assert plan.exercises == fragment.exercises


def test_saved_fragment_lists_every_selected_group(plan_repo, chest_catalog):
    chest_catalog.add_exercise('Pernas', 'Quadríceps', ExerciseKind.ISOLATED, ex('Cadeira extensora'))
    fragment = RecommendedWorkoutGenerator(chest_catalog, ordering=identity_ordering).generate(['Peito', 'Pernas'], 100)
    plan = _book(plan_repo).create_from_fragment(['Sexta'], fragment)
    assert plan.muscles == ['Peito', 'Pernas']
    assert plan.sub_groups == ['Peito superior']
