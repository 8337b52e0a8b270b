"""
Treino engine

Internal Codename: FORGE / SPOTTER / LOGBOOK

- FORGE: time-bounded routine generation from the catalog
- SPOTTER: set and rest state machine for one live session
- LOGBOOK: weight trends and period comparison over the history log
"""

from .generator import RecommendedWorkoutGenerator, PlanFragment, identity_ordering, seeded_ordering
from .authoring import PlanBook, manual_details
from .session import SessionPhase, SessionRunner, WorkoutSession, start_session
from .ticker import CooperativeTicker
from .analytics import Granularity, NavContext, PerformanceAnalyzer, query

__all__ = [
    'RecommendedWorkoutGenerator',
    'PlanFragment',
    'identity_ordering',
    'seeded_ordering',
    'PlanBook',
    'manual_details',
    'SessionPhase',
    'SessionRunner',
    'WorkoutSession',
    'start_session',
    'CooperativeTicker',
    'Granularity',
    'NavContext',
    'PerformanceAnalyzer',
    'query',
]
