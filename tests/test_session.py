"""
Active session state machine.

Default plan flattens to:
    0 Supino Reto       2 sets, 90 s rest
    1 Crucifixo         1 set
    2 Supino inclinado  3 sets, 60 s rest
"""

import pytest

from treino.engine.session import (
    SessionPhase,
    SessionRunner,
    WorkoutSession,
    flatten,
    start_session,
)
from treino.engine.ticker import CooperativeTicker
from treino.errors import (
    AlreadyDoneTodayError,
    GuardError,
    GuardViolation,
    ValidationError,
    WrongDayError,
)
from treino.taxonomy import Weekday

from conftest import MONDAY, TUESDAY, details, entry, make_plan


def _session(plan=None, history=(), today=MONDAY, alerts=None):
    ticker = CooperativeTicker()
    on_alert = alerts.append if alerts is not None else None
    session = start_session(plan or make_plan(), history, ticker=ticker, on_alert=on_alert, clock=lambda: today)
    return session, ticker


def _run_to_completion(session):
    visited = []
    while session.phase is not SessionPhase.COMPLETED:
        if session.is_resting:
            session.skip_rest()
            continue
        visited.append((session.exercise_idx, session.set_idx))
        session.complete_set()
    return visited


# -----------------------------------------------------------------------------
# Entry guards
# -----------------------------------------------------------------------------

def test_wrong_day_rejected():
    plan = make_plan()
    session = WorkoutSession(plan, clock=lambda: TUESDAY)
    with pytest.raises(WrongDayError) as exc:
        session.start([])
    assert exc.value.weekday == 'Terça'
    assert session.phase is SessionPhase.IDLE


def test_any_plan_weekday_allowed():
    plan = make_plan(days=[Weekday.SEGUNDA, Weekday.TERCA])
    session, _ = _session(plan, today=TUESDAY)
    assert session.phase is SessionPhase.EXERCISING


def test_already_done_today_rejected():
    with pytest.raises(AlreadyDoneTodayError) as exc:
        _session(history=[entry(MONDAY, {'Supino Reto': '80'})])
    assert isinstance(exc.value, GuardError)


def test_hidden_entry_does_not_block():
    session, _ = _session(history=[entry(MONDAY, {'Supino Reto': '80'}, visible=False)])
    assert session.phase is SessionPhase.EXERCISING


def test_other_plan_or_other_day_does_not_block():
    history = [
        entry(MONDAY, {}, workout_id='other-plan'),
        entry(TUESDAY, {}, workout_id='plan-1'),
    ]
    session, _ = _session(history=history)
    assert session.phase is SessionPhase.EXERCISING


def test_plan_without_exercises_rejected():
    with pytest.raises(ValidationError):
        WorkoutSession(make_plan(exercises={'Peito médio': {}}))


# -----------------------------------------------------------------------------
# Sets and exercises
# -----------------------------------------------------------------------------

def test_flatten_order():
    assert [s.name for s in flatten(make_plan())] == ['Supino Reto', 'Crucifixo', 'Supino inclinado']


def test_every_set_visited_once_in_order():
    session, _ = _session()
    visited = _run_to_completion(session)
    assert visited == [(0, 0), (0, 1), (1, 0), (2, 0), (2, 1), (2, 2)]
    assert visited == sorted(visited)
    assert session.phase is SessionPhase.COMPLETED


def test_zero_set_exercise_takes_one_completion():
    plan = make_plan(exercises={'Peito médio': {'A': details(sets=0), 'B': details(sets=1)}})
    session, _ = _session(plan)
    assert _run_to_completion(session) == [(0, 0), (1, 0)]


def test_last_set_moves_on_without_rest():
    session, _ = _session()
    session.complete_set()
    session.skip_rest()
    session.complete_set()
    assert session.phase is SessionPhase.EXERCISING
    assert session.current_step.name == 'Crucifixo'
    assert session.set_idx == 0
    assert session.timer is None


# -----------------------------------------------------------------------------
# Rest timer
# -----------------------------------------------------------------------------

def test_rest_starts_paused():
    session, ticker = _session()
    session.complete_set()
    assert session.phase is SessionPhase.RESTING
    assert session.set_idx == 1
    assert (session.timer.remaining, session.timer.total, session.timer.paused) == (90, 90, True)
    assert not ticker.active
    assert ticker.tick() is False
    assert session.timer.remaining == 90


def test_complete_set_illegal_while_resting():
    session, _ = _session()
    session.complete_set()
    before = (session.phase, session.exercise_idx, session.set_idx, session.timer)
    with pytest.raises(GuardViolation):
        session.complete_set()
    assert (session.phase, session.exercise_idx, session.set_idx, session.timer) == before


def test_countdown_pause_restart_and_alert():
    alerts = []
    session, ticker = _session(alerts=alerts)
    session.complete_set()

    session.resume()
    assert ticker.active
    for _ in range(3):
        ticker.tick()
    assert session.timer.remaining == 87

    session.pause()
    assert not ticker.active
    ticker.tick()
    assert session.timer.remaining == 87

    session.restart_rest()
    assert (session.timer.remaining, session.timer.paused) == (90, True)

    session.toggle_pause()
    assert not session.timer.paused
    ticks = 0
    while ticker.tick():
        ticks += 1
    assert ticks + 1 == 90
    assert session.phase is SessionPhase.EXERCISING
    assert session.timer is None
    assert [s.name for s in alerts] == ['Supino Reto']


def test_skip_ends_rest_without_alert():
    alerts = []
    session, ticker = _session(alerts=alerts)
    session.complete_set()
    session.resume()
    session.skip_rest()
    assert session.phase is SessionPhase.EXERCISING
    assert not ticker.active
    assert alerts == []


@pytest.mark.parametrize('action', ['pause', 'resume', 'toggle_pause', 'restart_rest', 'skip_rest'])
def test_rest_controls_illegal_while_exercising(action):
    session, _ = _session()
    with pytest.raises(GuardViolation):
        getattr(session, action)()
    assert session.phase is SessionPhase.EXERCISING


def test_double_pause_and_double_resume_rejected():
    session, _ = _session()
    session.complete_set()
    with pytest.raises(GuardViolation):
        session.pause()
    session.resume()
    with pytest.raises(GuardViolation):
        session.resume()


# -----------------------------------------------------------------------------
# Finish and abandon
# -----------------------------------------------------------------------------

def test_finish_emits_entry_with_non_blank_weights():
    session, _ = _session()
    _run_to_completion(session)
    result = session.finish({'Supino Reto': ' 80 ', 'Crucifixo': '', 'Supino inclinado': 60})

    assert result.workout_id == 'plan-1'
    assert result.date == MONDAY
    assert result.days == ['Segunda']
    assert result.muscles == ['Peito']
    assert result.sub_muscles == ['Peito médio', 'Peito superior']
    assert result.weights == {'Supino Reto': '80', 'Supino inclinado': '60'}
    assert result.visible is True
    assert session.phase is SessionPhase.FINISHED


def test_finish_rejects_unknown_exercise_and_keeps_state():
    session, _ = _session()
    _run_to_completion(session)
    with pytest.raises(ValidationError):
        session.finish({'Agachamento': '100'})
    assert session.phase is SessionPhase.COMPLETED


def test_finish_before_completion_rejected():
    session, _ = _session()
    with pytest.raises(GuardViolation):
        session.finish({})


def test_entry_is_a_snapshot():
    plan = make_plan()
    session, _ = _session(plan)
    _run_to_completion(session)
    result = session.finish({'Crucifixo': '20'})
    plan.exercises.pop('Peito superior')
    plan.muscles.append('Costas')
    assert result.sub_muscles == ['Peito médio', 'Peito superior']
    assert result.muscles == ['Peito']


def test_nothing_allowed_after_finish():
    session, _ = _session()
    _run_to_completion(session)
    session.finish()
    for action in (session.complete_set, session.abandon, session.finish):
        with pytest.raises(GuardViolation):
            action()


def test_abandon_cancels_running_countdown():
    session, ticker = _session()
    session.complete_set()
    session.resume()
    session.abandon()
    assert session.phase is SessionPhase.ABANDONED
    assert not ticker.active
    assert session.timer is None


# -----------------------------------------------------------------------------
# Runner
# -----------------------------------------------------------------------------

def test_same_day_guard_follows_visibility(history_repo):
    runner = SessionRunner(history_repo, clock=lambda: MONDAY)
    plan = make_plan()

    session = runner.start(plan)
    _run_to_completion(session)
    saved = runner.finish({'Supino Reto': '80'})
    assert runner.active is None
    assert history_repo.visible_log()[0].id == saved.id

    with pytest.raises(AlreadyDoneTodayError):
        runner.start(plan)

    history_repo.toggle_visibility(saved.id)
    assert runner.start(plan).phase is SessionPhase.EXERCISING


def test_runner_allows_one_session_in_progress(history_repo):
    runner = SessionRunner(history_repo, clock=lambda: MONDAY)
    first = runner.start(make_plan())
    with pytest.raises(GuardViolation):
        runner.start(make_plan(plan_id='plan-2'))
    assert runner.active is first


def test_runner_replaces_unsaved_completed_session(history_repo):
    tickers = []

    def factory():
        tickers.append(CooperativeTicker())
        return tickers[-1]

    runner = SessionRunner(history_repo, clock=lambda: MONDAY, ticker_factory=factory)
    first = runner.start(make_plan())
    _run_to_completion(first)

    second = runner.start(make_plan())
    assert first.phase is SessionPhase.ABANDONED
    assert runner.active is second
    assert history_repo.full_log() == []


def test_runner_without_session(history_repo):
    runner = SessionRunner(history_repo)
    with pytest.raises(GuardViolation):
        runner.finish({})
    with pytest.raises(GuardViolation):
        runner.abandon()
