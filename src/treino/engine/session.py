"""
Active Session State Machine

Internal Codename: SPOTTER
Walks one workout plan set by set, with paused-by-default rest countdowns
between sets, and emits a single HistoryEntry when the trainee saves.

Legal graph:
    IDLE -> EXERCISING <-> RESTING -> ... -> COMPLETED -> FINISHED
    any non-terminal phase -> ABANDONED
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import (
    AlreadyDoneTodayError,
    GuardViolation,
    InvariantViolation,
    ValidationError,
    WrongDayError,
)
from ..models import ExerciseDetails, HistoryEntry, WorkoutPlan
from ..taxonomy import Weekday
from .ticker import CooperativeTicker, Ticker

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    IDLE = 'idle'
    EXERCISING = 'exercising'
    RESTING = 'resting'
    COMPLETED = 'completed'
    FINISHED = 'finished'
    ABANDONED = 'abandoned'


TERMINAL_PHASES = (SessionPhase.FINISHED, SessionPhase.ABANDONED)


@dataclass(frozen=True)
class RestTimer:
    remaining: int
    total: int
    paused: bool


@dataclass(frozen=True)
class SessionStep:
    """One exercise of the flattened plan."""
    sub_group: str
    name: str
    details: ExerciseDetails

    @property
    def total_sets(self) -> int:
        # A zero-set entry still takes one completion to move past
        return max(self.details.sets, 1)


def flatten(plan: WorkoutPlan) -> List[SessionStep]:
    """Sub-group order, then insertion order inside each sub-group."""
    return [
        SessionStep(sub_group, name, details)
        for sub_group, by_name in plan.exercises.items()
        for name, details in by_name.items()
    ]


def check_start(plan: WorkoutPlan, history: Iterable[HistoryEntry], today: date) -> None:
    """
    Entry guards for a new session.

    Raises:
        WrongDayError: today is not one of the plan's weekdays
        AlreadyDoneTodayError: a visible entry for this plan is dated today
    """
    weekday = Weekday.of(today)
    if weekday not in plan.days:
        raise WrongDayError(weekday.label, [d.label for d in plan.days])
    for entry in history:
        if entry.visible and entry.workout_id == plan.id and entry.date == today:
            raise AlreadyDoneTodayError(plan.id, entry.date_label)


class WorkoutSession:
    """
    One training session over a plan.

    Every public transition either completes fully or raises without touching
    state. The session owns one ticker and keeps it running only while a rest
    countdown is live.
    """

    def __init__(
        self,
        plan: WorkoutPlan,
        ticker: Optional[Ticker] = None,
        on_alert: Optional[Callable[[SessionStep], None]] = None,
        clock: Callable[[], date] = date.today
    ):
        self.plan = plan
        self.steps = flatten(plan)
        if not self.steps:
            raise ValidationError("Este treino não tem exercícios.")
        self.ticker = ticker if ticker is not None else CooperativeTicker()
        self.on_alert = on_alert
        self.clock = clock

        self._phase = SessionPhase.IDLE
        self._exercise_idx = 0
        self._set_idx = 0
        self._timer: Optional[RestTimer] = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def exercise_idx(self) -> int:
        return self._exercise_idx

    @property
    def set_idx(self) -> int:
        return self._set_idx

    @property
    def timer(self) -> Optional[RestTimer]:
        return self._timer

    @property
    def current_step(self) -> SessionStep:
        return self.steps[self._exercise_idx]

    @property
    def is_resting(self) -> bool:
        return self._phase is SessionPhase.RESTING

    @property
    def in_progress(self) -> bool:
        return self._phase in (SessionPhase.EXERCISING, SessionPhase.RESTING)

    @property
    def is_last_exercise(self) -> bool:
        return self._exercise_idx == len(self.steps) - 1

    # =========================================================================
    # Transitions
    # =========================================================================

    def start(self, history: Iterable[HistoryEntry] = ()) -> 'WorkoutSession':
        """IDLE -> EXERCISING after the weekday and same-day guards pass."""
        self._require('start', SessionPhase.IDLE)
        check_start(self.plan, history, self.clock())
        self._phase = SessionPhase.EXERCISING
        logger.info("Session started for plan %s (%d exercises)", self.plan.id, len(self.steps))
        self._check_invariants()
        return self

    def complete_set(self) -> 'WorkoutSession':
        """
        Finish the current set.

        Not the last set: rest (paused) and move to the next set.
        Last set: next exercise at set 0, or COMPLETED after the final one.
        """
        self._require('complete_set', SessionPhase.EXERCISING)
        step = self.current_step

        if self._set_idx < step.total_sets - 1:
            rest = step.details.rest
            self._timer = RestTimer(remaining=rest, total=rest, paused=True)
            self._set_idx += 1
            self._phase = SessionPhase.RESTING
            logger.debug("%s: set done, resting %ss before set %d", step.name, rest, self._set_idx + 1)
        elif not self.is_last_exercise:
            self._exercise_idx += 1
            self._set_idx = 0
            logger.debug("Moving to %s", self.current_step.name)
        else:
            self._phase = SessionPhase.COMPLETED
            logger.info("Session for plan %s completed", self.plan.id)

        self._check_invariants()
        return self

    def pause(self) -> 'WorkoutSession':
        self._require('pause', SessionPhase.RESTING)
        if self._timer.paused:
            raise GuardViolation('pause', 'resting (paused)')
        self._set_timer(paused=True)
        return self

    def resume(self) -> 'WorkoutSession':
        self._require('resume', SessionPhase.RESTING)
        if not self._timer.paused:
            raise GuardViolation('resume', 'resting (running)')
        self._set_timer(paused=False)
        return self

    def toggle_pause(self) -> 'WorkoutSession':
        self._require('toggle_pause', SessionPhase.RESTING)
        self._set_timer(paused=not self._timer.paused)
        return self

    def restart_rest(self) -> 'WorkoutSession':
        """Back to the full rest duration, paused."""
        self._require('restart_rest', SessionPhase.RESTING)
        self._timer = RestTimer(remaining=self._timer.total, total=self._timer.total, paused=True)
        self.ticker.cancel()
        return self

    def skip_rest(self) -> 'WorkoutSession':
        """End the rest now, without the alert."""
        self._require('skip_rest', SessionPhase.RESTING)
        self._end_rest(alert=False)
        return self

    def tick(self) -> None:
        """One second of a running rest countdown. Ignored when nothing is counting."""
        if self._phase is not SessionPhase.RESTING or self._timer.paused:
            return
        remaining = self._timer.remaining - 1
        if remaining <= 0:
            self._end_rest(alert=True)
        else:
            self._timer = RestTimer(remaining=remaining, total=self._timer.total, paused=False)

    def finish(self, weights: Optional[Dict[str, object]] = None) -> HistoryEntry:
        """
        Save a COMPLETED session.

        Args:
            weights: exercise name -> weight as typed by the trainee. Blank
                values are dropped; names outside the plan are rejected.

        Returns:
            The HistoryEntry to append to the log
        """
        self._require('finish', SessionPhase.COMPLETED)
        recorded = self._clean_weights(weights or {})

        entry = HistoryEntry(
            workout_id=self.plan.id,
            days=[d.label for d in self.plan.days],
            muscles=list(self.plan.muscles),
            sub_muscles=list(self.plan.sub_groups),
            date=self.clock(),
            weights=recorded,
        )
        self._close(SessionPhase.FINISHED)
        logger.info("Session saved as history entry %s (%d weights)", entry.id, len(recorded))
        return entry

    def abandon(self) -> None:
        if self._phase in TERMINAL_PHASES:
            raise GuardViolation('abandon', self._phase.value)
        self._close(SessionPhase.ABANDONED)
        logger.info("Session for plan %s abandoned", self.plan.id)

    # =========================================================================
    # Internals
    # =========================================================================

    def _require(self, action: str, phase: SessionPhase) -> None:
        if self._phase is not phase:
            raise GuardViolation(action, self._phase.value)

    def _set_timer(self, paused: bool) -> None:
        t = self._timer
        self._timer = RestTimer(remaining=t.remaining, total=t.total, paused=paused)
        if paused:
            self.ticker.cancel()
        else:
            self.ticker.start(self.tick)

    def _end_rest(self, alert: bool) -> None:
        self.ticker.cancel()
        self._timer = None
        self._phase = SessionPhase.EXERCISING
        self._check_invariants()
        if alert:
            logger.debug("Rest over for %s", self.current_step.name)
            if self.on_alert is not None:
                self.on_alert(self.current_step)

    def _close(self, phase: SessionPhase) -> None:
        self.ticker.cancel()
        self._timer = None
        self._phase = phase

    def _clean_weights(self, weights: Dict[str, object]) -> Dict[str, str]:
        names = {s.name for s in self.steps}
        unknown = [n for n in weights if n not in names]
        if unknown:
            raise ValidationError(f"Exercícios fora do treino: {', '.join(unknown)}")
        recorded = {}
        for step in self.steps:
            value = weights.get(step.name)
            text = '' if value is None else str(value).strip()
            if text:
                recorded[step.name] = text
        return recorded

    def _check_invariants(self) -> None:
        if not 0 <= self._exercise_idx < len(self.steps):
            raise InvariantViolation(f"exercise index {self._exercise_idx} outside {len(self.steps)} exercises")
        if not 0 <= self._set_idx < self.current_step.total_sets:
            raise InvariantViolation(
                f"set index {self._set_idx} outside {self.current_step.total_sets} sets of {self.current_step.name}"
            )
        if (self._phase is SessionPhase.RESTING) != (self._timer is not None):
            raise InvariantViolation(f"timer {self._timer} inconsistent with phase {self._phase.value}")


def start_session(
    plan: WorkoutPlan,
    history: Iterable[HistoryEntry],
    ticker: Optional[Ticker] = None,
    on_alert: Optional[Callable[[SessionStep], None]] = None,
    clock: Callable[[], date] = date.today
) -> WorkoutSession:
    """Create a session and start it, raising a GuardError when not allowed."""
    return WorkoutSession(plan, ticker=ticker, on_alert=on_alert, clock=clock).start(history)


class SessionRunner:
    """
    Holds the single active session and persists what it produces.

    A new session may replace a COMPLETED one that was never saved (its ticker
    is cancelled); an EXERCISING or RESTING session must be finished or
    abandoned first.
    """

    def __init__(
        self,
        history_repo,
        clock: Callable[[], date] = date.today,
        ticker_factory: Callable[[], Ticker] = CooperativeTicker,
        on_alert: Optional[Callable[[SessionStep], None]] = None
    ):
        self.history_repo = history_repo
        self.clock = clock
        self.ticker_factory = ticker_factory
        self.on_alert = on_alert
        self._active: Optional[WorkoutSession] = None

    @property
    def active(self) -> Optional[WorkoutSession]:
        return self._active

    def start(self, plan: WorkoutPlan) -> WorkoutSession:
        previous = self._active
        if previous is not None and previous.in_progress:
            raise GuardViolation('start', previous.phase.value)

        session = start_session(
            plan,
            self.history_repo.full_log(),
            ticker=self.ticker_factory(),
            on_alert=self.on_alert,
            clock=self.clock,
        )
        if previous is not None and previous.phase not in TERMINAL_PHASES:
            previous.abandon()
        self._active = session
        return session

    def finish(self, weights: Optional[Dict[str, object]] = None) -> HistoryEntry:
        session = self._require_active('finish')
        entry = session.finish(weights)
        self.history_repo.append(entry)
        self._active = None
        return entry

    def abandon(self) -> None:
        session = self._require_active('abandon')
        session.abandon()
        self._active = None

    def _require_active(self, action: str) -> WorkoutSession:
        if self._active is None:
            raise GuardViolation(action, 'no active session')
        return self._active
