"""
Time-Cost Model

Estimates how long an exercise takes from its set/rest configuration. Rest
happens only between sets, never after the last one. The is-time-based flag
plays no part here; it only changes how reps are labelled.
"""

import re

from .models import ExerciseDefinition, ExerciseDetails, ExerciseMap

_NON_DIGITS = re.compile(r'\D')

DEFAULT_TIME_PER_SET = 45  # Seconds of work assumed per set when nothing else is known


def estimate_seconds(sets: int, time_per_set: int, rest_per_set: int) -> int:
    """
    Estimated duration of one exercise.

    Args:
        sets: Number of sets
        time_per_set: Seconds spent executing each set
        rest_per_set: Seconds of rest between consecutive sets

    Returns:
        Total seconds, 0 when sets <= 0
    """
    if sets <= 0:
        return 0
    execution = sets * time_per_set
    rest_total = max(sets - 1, 0) * rest_per_set
    return execution + rest_total


def exercise_seconds(details: ExerciseDetails) -> int:
    return estimate_seconds(details.sets, details.time_per_set, details.rest)


def plan_seconds(exercises: ExerciseMap) -> int:
    """Sum of exercise_seconds over a sub-group -> name -> details mapping."""
    return sum(
        exercise_seconds(details)
        for by_name in exercises.values()
        for details in by_name.values()
    )


def parse_value(text) -> int:
    """Digits of a free-text value as an int ('90s' -> 90, '' -> 0)."""
    digits = _NON_DIGITS.sub('', str(text))
    return int(digits) if digits else 0


def low_end(range_text: str, default: str) -> str:
    """
    First value of a recommended range.

    '3-4' -> '3', '60-90s' -> '60', '30s' -> '30s', '' -> default.
    A single value keeps its unit; parse_value drops it when a number is needed.
    """
    text = (range_text or '').strip()
    if not text:
        return default
    first = text.split('-')[0].strip()
    return first or default


def format_seconds(total_seconds: int) -> str:
    """Human label: '0 s', '45 s', '5 min', '5 min e 40 s'."""
    if total_seconds <= 0:
        return '0 s'
    mins, secs = divmod(int(total_seconds), 60)
    if mins == 0:
        return f'{secs} s'
    if secs == 0:
        return f'{mins} min'
    return f'{mins} min e {secs} s'



def recommended_details(definition: ExerciseDefinition) -> ExerciseDetails:
    """
    Working parameters taken from the low end of each recommended range.

    Falls back to 3 sets of 10 with 60 s rest when a range is blank.
    """
    return ExerciseDetails(
        sets=parse_value(low_end(definition.sets, '3')),
        reps=low_end(definition.reps, '10'),
        time_per_set=DEFAULT_TIME_PER_SET,
        rest=parse_value(low_end(definition.rest, '60')),
    )
