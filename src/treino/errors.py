"""
Treino error taxonomy.

Every recoverable failure raised by the engine derives from TreinoError and
carries a short message meant to be shown to the trainee as-is.
"""

from typing import Optional


class TreinoError(Exception):
    """Base class for recoverable engine errors."""


# =============================================================================
# Input validation
# =============================================================================

class ValidationError(TreinoError):
    """Malformed catalog, plan or weight input."""


class DuplicateExerciseError(ValidationError):
    """Exercise name already present in the sub-group (strict catalogs only)."""

    def __init__(self, sub_group: str, name: str):
        super().__init__(f"'{name}' já existe em {sub_group}")
        self.sub_group = sub_group
        self.name = name


class WeekdayConflictError(ValidationError):
    """Weekday already assigned to another plan."""

    def __init__(self, weekday: str, plan_id: Optional[str] = None):
        super().__init__(f"{weekday} já tem um treino salvo")
        self.weekday = weekday
        self.plan_id = plan_id


# =============================================================================
# Generator
# =============================================================================

class GenerationError(TreinoError):
    """The generator could not produce a routine."""


class EmptyCatalogError(GenerationError):
    def __init__(self, groups=None):
        super().__init__("Nenhum exercício disponível para os grupos escolhidos")
        self.groups = list(groups or [])


class InvalidDurationError(GenerationError):
    def __init__(self, target_seconds):
        super().__init__("Informe uma duração válida")
        self.target_seconds = target_seconds


class GenerationFailedError(GenerationError):
    def __init__(self):
        super().__init__("Não foi possível gerar um treino com esse tempo")


# =============================================================================
# Session
# =============================================================================

class GuardError(TreinoError):
    """A session start guard rejected the request."""


class WrongDayError(GuardError):
    def __init__(self, weekday: str, allowed):
        allowed = list(allowed)
        super().__init__(f"Este treino não é de {weekday}. Dias: {' / '.join(allowed)}")
        self.weekday = weekday
        self.allowed = allowed


class AlreadyDoneTodayError(GuardError):
    def __init__(self, workout_id: str, day: str):
        super().__init__("Você já concluiu este treino hoje")
        self.workout_id = workout_id
        self.day = day


class GuardViolation(TreinoError):
    """Attempted transition outside the legal session state graph."""

    def __init__(self, action: str, phase):
        super().__init__(f"Ação '{action}' não permitida no estado {phase}")
        self.action = action
        self.phase = phase


class InvariantViolation(Exception):
    """Internal session bookkeeping broke. A bug, never a user error."""


class NotFoundError(TreinoError):
    """Unknown plan or history entry id."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} '{item_id}' não encontrado")
        self.kind = kind
        self.item_id = item_id
