"""
Performance Analytics

Internal Codename: LOGBOOK
Turns the history log into per-exercise weight series at several
granularities, with headline metrics and period-over-period comparison.

Analytics always read the full log: hidden (soft-deleted) entries are still
real training and count here. Only the calendar's "had a session" marker
looks at visible entries alone.
"""

import calendar
import logging
import re
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from ..errors import ValidationError
from ..models import DATE_FORMAT, HistoryEntry
from ..taxonomy import MONTH_LABELS, Weekday

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r'^[-+]?\d+(?:[.,]\d+)?')

LAST_WEEK = 4  # Week 4 absorbs days 22-31


class Granularity(Enum):
    WEEK_DAYS = 'week-days'
    MONTH_DAYS = 'month-days'
    MONTH_WEEKS = 'month-weeks'
    YEAR_MONTHS = 'year-months'
    YEARS = 'years'


def parse_weight(text: str) -> float:
    """Leading number of a free-form weight ('80kg' -> 80.0, '72,5' -> 72.5, 'x' -> 0.0)."""
    match = _LEADING_NUMBER.match((text or '').strip())
    if not match:
        return 0.0
    return float(match.group(0).replace(',', '.'))


def week_of_month(day_of_month: int) -> int:
    return min((day_of_month - 1) // 7 + 1, LAST_WEEK)


def week_day_range(week: int) -> Tuple[int, int]:
    """Inclusive day-of-month bounds of a week bucket."""
    if week >= LAST_WEEK:
        return 22, 31
    return (week - 1) * 7 + 1, week * 7


@dataclass(frozen=True)
class NavContext:
    """Selected month (1-12), year and week of month (1-4)."""
    month: int
    year: int
    week: int = 1

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Mês inválido: {self.month}")
        if not 1 <= self.week <= LAST_WEEK:
            raise ValidationError(f"Semana inválida: {self.week}")

    @classmethod
    def for_date(cls, day: date) -> 'NavContext':
        return cls(month=day.month, year=day.year, week=week_of_month(day.day))

    def previous_month(self) -> 'NavContext':
        if self.month == 1:
            return replace(self, month=12, year=self.year - 1)
        return replace(self, month=self.month - 1)

    def next_month(self) -> 'NavContext':
        if self.month == 12:
            return replace(self, month=1, year=self.year + 1)
        return replace(self, month=self.month + 1)

    def previous_week(self) -> 'NavContext':
        """Week 1 steps back to the last week of the previous month."""
        if self.week == 1:
            return replace(self.previous_month(), week=LAST_WEEK)
        return replace(self, week=self.week - 1)

    @property
    def month_label(self) -> str:
        return f'{MONTH_LABELS[self.month - 1]} {self.year}'


@dataclass
class SeriesPoint:
    key: object       # Chronological bucket key (year, month, week or date)
    label: str        # Short axis label
    full_date: str    # Tooltip label
    value: float      # Mean weight in the bucket


@dataclass
class Metrics:
    latest: float
    earliest: float
    change_percent: float


@dataclass
class Comparison:
    label: str
    current_average: float
    previous_average: float
    percent: Optional[float]
    no_data: bool


@dataclass
class DayMark:
    day: date
    has_session: bool   # Any visible entry, any plan
    has_weight: bool    # Weight recorded for the exercise, any visibility


@dataclass
class DayInfo:
    day: date
    weight: Optional[float]
    has_session: bool


@dataclass
class AnalyticsResult:
    exercise: str
    granularity: Granularity
    nav: NavContext
    series: List[SeriesPoint]
    metrics: Optional[Metrics]
    comparison: Optional[Comparison]


class PerformanceAnalyzer:
    """
    Aggregates weight history for one exercise at a time.

    Tracks:
    - Bucketed mean weight series
    - Latest value and change over the series
    - Current vs previous period averages
    - Calendar markers and per-day detail
    """

    def __init__(self, history: Iterable[HistoryEntry]):
        self.history = list(history)

    def exercises(self) -> List[str]:
        """Names with at least one recorded weight, alphabetical."""
        names = {
            name
            for entry in self.history
            for name, value in entry.weights.items()
            if value.strip()
        }
        return sorted(names)

    def frame(self, exercise: str) -> pd.DataFrame:
        """
        One row per entry with a recorded weight for the exercise.

        Columns: date, year, month, day, week, weight, visible
        """
        rows = [
            {
                'date': entry.date,
                'year': entry.date.year,
                'month': entry.date.month,
                'day': entry.date.day,
                'week': week_of_month(entry.date.day),
                'weight': parse_weight(entry.weights[exercise]),
                'visible': entry.visible,
            }
            for entry in self.history
            if entry.weights.get(exercise, '').strip()
        ]
        columns = ['date', 'year', 'month', 'day', 'week', 'weight', 'visible']
        return pd.DataFrame(rows, columns=columns).astype(
            {'year': int, 'month': int, 'day': int, 'week': int, 'weight': float, 'visible': bool}
        )

    # =========================================================================
    # Series
    # =========================================================================

    def series(self, exercise: str, granularity: Granularity, nav: NavContext) -> List[SeriesPoint]:
        """
        Mean weight per bucket, ascending.

        Args:
            exercise: Exercise name as recorded in history
            granularity: Bucket size and filtering window
            nav: Selected month/year/week

        Returns:
            List of SeriesPoint, empty when nothing matches
        """
        df = self.frame(exercise)

        if granularity is Granularity.YEARS:
            means = df.groupby('year')['weight'].mean()
            return [SeriesPoint(int(y), str(y), str(y), float(v)) for y, v in means.items()]

        if granularity is Granularity.YEAR_MONTHS:
            means = df[df['year'] == nav.year].groupby('month')['weight'].mean()
            return [
                SeriesPoint(int(m), MONTH_LABELS[m - 1], f'{MONTH_LABELS[m - 1]} {nav.year}', float(v))
                for m, v in means.items()
            ]

        in_month = df[(df['year'] == nav.year) & (df['month'] == nav.month)]

        if granularity is Granularity.MONTH_WEEKS:
            means = in_month.groupby('week')['weight'].mean()
            return [SeriesPoint(int(w), f'Sem {w}', f'Semana {w}', float(v)) for w, v in means.items()]

        if granularity is Granularity.WEEK_DAYS:
            first, last = week_day_range(nav.week)
            in_month = in_month[(in_month['day'] >= first) & (in_month['day'] <= last)]
            means = in_month.groupby('date')['weight'].mean()
            return [
                SeriesPoint(d, Weekday.of(d).label, d.strftime(DATE_FORMAT), float(v))
                for d, v in means.items()
            ]

        means = in_month.groupby('date')['weight'].mean()
        return [SeriesPoint(d, d.strftime('%d/%m'), d.strftime(DATE_FORMAT), float(v)) for d, v in means.items()]

    @staticmethod
    def metrics(series: List[SeriesPoint]) -> Optional[Metrics]:
        """Latest value and change from the first bucket; None for an empty series."""
        if not series:
            return None
        latest = series[-1].value
        earliest = series[0].value
        change = 0.0 if earliest == 0 else (latest - earliest) / earliest * 100
        return Metrics(latest=latest, earliest=earliest, change_percent=change)

    # =========================================================================
    # Comparison
    # =========================================================================

    def comparison(self, exercise: str, granularity: Granularity, nav: NavContext) -> Optional[Comparison]:
        """
        Average of the current window against the one before it.

        Averages are over raw entries, not bucket means. Not defined for
        the years view.
        """
        if granularity is Granularity.YEARS:
            return None

        df = self.frame(exercise)

        if granularity is Granularity.WEEK_DAYS:
            label = 'Comparação com a semana anterior'
            current = self._week_window(df, nav)
            previous = self._week_window(df, nav.previous_week())
        elif granularity is Granularity.YEAR_MONTHS:
            label = 'Comparação com o ano anterior'
            current = df[df['year'] == nav.year]
            previous = df[df['year'] == nav.year - 1]
        else:
            label = 'Comparação com o mês anterior'
            prev = nav.previous_month()
            current = df[(df['year'] == nav.year) & (df['month'] == nav.month)]
            previous = df[(df['year'] == prev.year) & (df['month'] == prev.month)]

        current_avg = _average(current)
        previous_avg = _average(previous)

        if previous_avg == 0:
            return Comparison(label, current_avg, previous_avg, percent=None, no_data=True)

        percent = (current_avg - previous_avg) / previous_avg * 100
        return Comparison(label, current_avg, previous_avg, percent=percent, no_data=False)

    @staticmethod
    def _week_window(df: pd.DataFrame, nav: NavContext) -> pd.DataFrame:
        first, last = week_day_range(nav.week)
        return df[
            (df['year'] == nav.year)
            & (df['month'] == nav.month)
            & (df['day'] >= first)
            & (df['day'] <= last)
        ]

    # =========================================================================
    # Calendar
    # =========================================================================

    def calendar(self, exercise: str, month: int, year: int) -> List[DayMark]:
        """One marker per day of the month."""
        session_days = {e.date for e in self.history if e.visible}
        weight_days = set(self.frame(exercise)['date'])
        days_in_month = calendar.monthrange(year, month)[1]
        marks = []
        for n in range(1, days_in_month + 1):
            day = date(year, month, n)
            marks.append(DayMark(day, day in session_days, day in weight_days))
        return marks

    def day_info(self, exercise: str, day: date) -> DayInfo:
        """Weight recorded on a day (mean if several) and whether a visible session happened."""
        df = self.frame(exercise)
        on_day = df[df['date'] == day]
        weight = float(on_day['weight'].mean()) if not on_day.empty else None
        has_session = any(e.visible and e.date == day for e in self.history)
        return DayInfo(day=day, weight=weight, has_session=has_session)

    # =========================================================================
    # Entry point
    # =========================================================================

    def query(self, exercise: str, granularity: Granularity, nav: NavContext) -> AnalyticsResult:
        series = self.series(exercise, granularity, nav)
        result = AnalyticsResult(
            exercise=exercise,
            granularity=granularity,
            nav=nav,
            series=series,
            metrics=self.metrics(series),
            comparison=self.comparison(exercise, granularity, nav),
        )
        logger.debug("%s %s %s: %d buckets", exercise, granularity.value, nav, len(series))
        return result


def _average(window: pd.DataFrame) -> float:
    if window.empty:
        return 0.0
    return float(window['weight'].mean())


def query(
    history: Iterable[HistoryEntry],
    exercise_name: str,
    granularity: Granularity,
    nav: NavContext
) -> AnalyticsResult:
    """Series, metrics and comparison for one exercise."""
    return PerformanceAnalyzer(history).query(exercise_name, granularity, nav)
