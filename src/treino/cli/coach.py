#!/usr/bin/env python3
"""
Treino CLI - COACH

Internal Codename: COACH
Command-line front end for the workout engine.

Usage:
    treino catalog list [--group GROUP | --sub-group SUB]
    treino catalog add --group G --sub-group S --kind {isolated,multi} --name N ...
    treino catalog remove --sub-group S --name N
    treino generate --group G [--group G2] --minutes N [--seed S] [--save-day DAY]
    treino plans list | create --day DAY --pick SUB NAME ... | delete PLAN_ID
    treino train PLAN_ID
    treino history list [--all] | hide ENTRY_ID | show ENTRY_ID
    treino stats EXERCISE [--by GRANULARITY] [--month M --year Y --week W] [--chart PATH]
    treino calendar EXERCISE [--month M --year Y] [--day DATE]
"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Tuple

import click
from dateutil import parser as date_parser

from treino.catalog import ExerciseCatalog
from treino.config import EngineConfig
from treino.errors import TreinoError, ValidationError
from treino.engine import (
    Granularity,
    NavContext,
    PerformanceAnalyzer,
    PlanBook,
    RecommendedWorkoutGenerator,
    SessionPhase,
    SessionRunner,
    manual_details,
    seeded_ordering,
)
from treino.engine.session import SessionStep, WorkoutSession
from treino.models import ExerciseDefinition, ExerciseKind, ExerciseMap
from treino.store import CatalogRepository, DocumentStore, HistoryRepository, PlanRepository
from treino.taxonomy import MUSCLE_GROUPS, MONTH_LABELS, Weekday, group_of, sub_groups_of
from treino.timing import exercise_seconds, format_seconds, plan_seconds


@dataclass
class Workspace:
    """Repositories over one data directory."""
    config: EngineConfig
    catalog: CatalogRepository
    plans: PlanRepository
    history: HistoryRepository

    @classmethod
    def open(cls, config: EngineConfig) -> 'Workspace':
        store = DocumentStore(config.data_dir)
        return cls(
            config=config,
            catalog=CatalogRepository(store, seed_path=config.seed_path, strict_names=config.strict_names),
            plans=PlanRepository(store),
            history=HistoryRepository(store),
        )

    def plan_book(self) -> PlanBook:
        return PlanBook(self.plans, max_days=self.config.max_plan_days, max_groups=self.config.max_muscle_groups)


def _fail(error: TreinoError) -> None:
    click.secho(f"❌ {error}", fg='red')
    raise SystemExit(1)


def _parse_day(text: str) -> date:
    """Free-form date, day first ('04/03/2024', '4 mar 2024', '2024-03-04')."""
    try:
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError):
        raise click.BadParameter(f"Data inválida: {text}")


def _print_routine(exercises: ExerciseMap) -> None:
    for sub_group, by_name in exercises.items():
        click.echo(f"\n{sub_group}")
        click.echo('─' * 60)
        for name, details in by_name.items():
            click.echo(
                f"  {name:<36} {details.sets}x{details.reps:<6} "
                f"descanso {details.rest:>3}s  ~{format_seconds(exercise_seconds(details))}"
            )
    click.echo(f"\nTempo estimado: {format_seconds(plan_seconds(exercises))}")


@click.group()
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path), help='Where plans and history are kept')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path), help='Alternate engine.yaml')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging')
@click.pass_context
def cli(ctx, data_dir: Optional[Path], config_path: Optional[Path], verbose: bool):
    """
    Treino - workout engine

    COACH: pick muscles, get a routine, train it, watch the numbers move.
    """
    config = EngineConfig.from_yaml(config_path)
    if data_dir is not None:
        config.data_dir = data_dir

    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

    ctx.obj = Workspace.open(config)


# =============================================================================
# Catalog
# =============================================================================

@cli.group()
def catalog():
    """Browse and edit the exercise library."""


@catalog.command('list')
@click.option('--group', type=click.Choice(MUSCLE_GROUPS), help='Only this muscle group')
@click.option('--sub-group', help='Only this sub-group')
@click.pass_obj
def catalog_list(ws: Workspace, group: Optional[str], sub_group: Optional[str]):
    """List exercises by sub-group."""
    lib: ExerciseCatalog = ws.catalog.load()

    if sub_group:
        targets = [sub_group]
    elif group:
        targets = sub_groups_of(group)
    else:
        targets = lib.sub_groups

    for sub in targets:
        lists = lib.list_by_sub_group(sub)
        click.echo(f"\n{sub}")
        click.echo('─' * 60)
        for label, key in (('Multiarticulares', 'multi'), ('Isolados', 'isolated')):
            click.echo(f"  {label}:")
            if not lists[key]:
                click.echo("    (nenhum)")
            for ex in lists[key]:
                reps_label = 'tempo' if ex.time_based else 'reps'
                click.echo(f"    {ex.name:<36} séries {ex.sets:<5} {reps_label} {ex.reps:<8} descanso {ex.rest}")


@catalog.command('add')
@click.option('--group', required=True, type=click.Choice(MUSCLE_GROUPS))
@click.option('--sub-group', required=True)
@click.option('--kind', type=click.Choice([k.value for k in ExerciseKind]), default='isolated')
@click.option('--name', required=True)
@click.option('--sets', default='3', help='Recommended sets, e.g. "3-4"')
@click.option('--reps', default='10-12', help='Recommended reps, e.g. "8-12"')
@click.option('--rest', default='60', help='Recommended rest in seconds, e.g. "60-90"')
@click.option('--more', help='Muscles worked harder')
@click.option('--less', help='Muscles recruited less')
@click.option('--time-based', is_flag=True, help='Held for time instead of repetitions')
@click.pass_obj
def catalog_add(ws: Workspace, group, sub_group, kind, name, sets, reps, rest, more, less, time_based):
    """Add an exercise to the library."""
    definition = ExerciseDefinition(
        name=name, kind=ExerciseKind(kind), sets=sets, reps=reps, rest=rest,
        more=more, less=less, time_based=time_based,
    )
    try:
        stored = ws.catalog.mutate(lambda lib: lib.add_exercise(group, sub_group, ExerciseKind(kind), definition))
    except TreinoError as e:
        _fail(e)
    click.secho(f"✓ '{stored.name}' adicionado em {sub_group}", fg='green')


@catalog.command('remove')
@click.option('--sub-group', required=True)
@click.option('--name', required=True)
@click.pass_obj
def catalog_remove(ws: Workspace, sub_group: str, name: str):
    """Remove an exercise from the library."""
    removed = ws.catalog.mutate(lambda lib: lib.remove_exercise(sub_group, name))
    if removed:
        click.secho(f"✓ '{name}' removido de {sub_group}", fg='green')
    else:
        click.echo(f"'{name}' não encontrado em {sub_group}")


# =============================================================================
# Generator
# =============================================================================

@cli.command()
@click.option('--group', 'groups', multiple=True, required=True, type=click.Choice(MUSCLE_GROUPS),
              help='Muscle group (repeat up to 3 times)')
@click.option('--minutes', type=int, required=True, help='Target duration in minutes')
@click.option('--seed', type=int, help='Fixed shuffle seed')
@click.option('--save-day', 'save_days', multiple=True, help='Save the routine as a plan for this weekday')
@click.pass_obj
def generate(ws: Workspace, groups: Tuple[str, ...], minutes: int, seed: Optional[int], save_days: Tuple[str, ...]):
    """Generate a routine that fits the time you have."""
    generator = RecommendedWorkoutGenerator(
        ws.catalog.load(),
        ordering=seeded_ordering(seed) if seed is not None else None,
        max_groups=ws.config.max_muscle_groups,
    )

    try:
        fragment = generator.generate(list(groups), minutes * 60)
    except TreinoError as e:
        _fail(e)

    click.echo("=" * 60)
    click.echo(f"TREINO RECOMENDADO: {', '.join(fragment.muscles)} ({minutes} min)")
    click.echo("=" * 60)
    _print_routine(fragment.exercises)

    if save_days:
        try:
            plan = ws.plan_book().create_from_fragment(save_days, fragment)
        except TreinoError as e:
            _fail(e)
        click.secho(f"\n✓ Salvo para {plan.day_label} (id {plan.id})", fg='green')


# =============================================================================
# Plans
# =============================================================================

@cli.group()
def plans():
    """Saved workout plans."""


@plans.command('list')
@click.pass_obj
def plans_list(ws: Workspace):
    """List saved plans."""
    saved = ws.plans.all()
    if not saved:
        click.echo("Nenhum treino salvo.")
        return

    for plan in saved:
        click.echo("=" * 60)
        click.echo(f"{plan.day_label}: {', '.join(plan.muscles)}")
        click.echo(f"id {plan.id} - criado em {plan.created_at:%d/%m/%Y %H:%M}")
        click.echo("=" * 60)
        _print_routine(plan.exercises)

    book = ws.plan_book()
    free = ', '.join(d.label for d in book.available_weekdays()) or 'nenhum'
    click.echo(f"\nDias livres: {free}")


@plans.command('create')
@click.option('--day', 'days', multiple=True, required=True, help='Weekday (repeat up to 3 times)')
@click.option('--pick', 'picks', multiple=True, required=True, nargs=2, metavar='SUB_GROUP NAME',
              help='Exercise to include')
@click.pass_obj
def plans_create(ws: Workspace, days: Tuple[str, ...], picks: Tuple[Tuple[str, str], ...]):
    """Save a plan from hand-picked exercises."""
    selections = {}
    muscles = []
    for sub_group, name in picks:
        selections.setdefault(sub_group, []).append(name)
        group = group_of(sub_group)
        if group and group not in muscles:
            muscles.append(group)

    try:
        exercises = manual_details(ws.catalog.load(), selections)
        plan = ws.plan_book().create(days, muscles, exercises)
    except TreinoError as e:
        _fail(e)

    click.secho(f"✓ Treino salvo para {plan.day_label} (id {plan.id})", fg='green')
    _print_routine(plan.exercises)


@plans.command('delete')
@click.argument('plan_id')
@click.pass_obj
def plans_delete(ws: Workspace, plan_id: str):
    """Delete a plan."""
    try:
        plan = ws.plan_book().delete(plan_id)
    except TreinoError as e:
        _fail(e)
    click.secho(f"✓ Treino de {plan.day_label} excluído", fg='green')


# =============================================================================
# Training session
# =============================================================================

def _show_step(session: WorkoutSession) -> None:
    step = session.current_step
    click.echo(f"\n{'─' * 60}")
    click.echo(
        f"[{session.exercise_idx + 1}/{len(session.steps)}] {step.name} ({step.sub_group})"
    )
    click.echo(f"Série {session.set_idx + 1}/{step.total_sets} - {step.details.reps} reps")


def _countdown(session: WorkoutSession, interval: float) -> None:
    """Run the rest countdown until it ends or the trainee interrupts (Ctrl+C pauses)."""
    session.resume()
    try:
        while session.is_resting and not session.timer.paused:
            click.echo(f"\r⏱  {session.timer.remaining:>3}s ", nl=False)
            time.sleep(interval)
            session.ticker.tick()
    except KeyboardInterrupt:
        if session.is_resting and not session.timer.paused:
            session.pause()
    click.echo()


def _rest(session: WorkoutSession, interval: float) -> None:
    while session.is_resting:
        t = session.timer
        click.echo(f"Descanso: {t.remaining}s de {t.total}s (pausado)")
        choice = click.prompt(
            "[Enter] iniciar  [s] pular  [r] reiniciar",
            default='', show_default=False,
        ).strip().lower()
        if choice == 's':
            session.skip_rest()
        elif choice == 'r':
            session.restart_rest()
        else:
            _countdown(session, interval)


@cli.command()
@click.argument('plan_id')
@click.pass_obj
def train(ws: Workspace, plan_id: str):
    """Run a training session for a saved plan."""

    def alert(step: SessionStep) -> None:
        click.echo('\a', nl=False)
        click.secho(f"🔔 Descanso concluído! Próxima série de {step.name}", fg='yellow')

    runner = SessionRunner(ws.history, on_alert=alert)

    try:
        plan = ws.plans.get(plan_id)
        session = runner.start(plan)
    except TreinoError as e:
        _fail(e)

    click.echo("=" * 60)
    click.echo(f"TREINO DE {plan.day_label.upper()}: {', '.join(plan.muscles)}")
    click.echo("=" * 60)

    while session.phase is not SessionPhase.COMPLETED:
        if session.is_resting:
            _rest(session, ws.config.tick_interval_sec)
            continue

        _show_step(session)
        choice = click.prompt(
            "[Enter] série concluída  [q] abandonar",
            default='', show_default=False,
        ).strip().lower()
        if choice == 'q':
            runner.abandon()
            click.secho("Treino abandonado.", fg='yellow')
            return
        session.complete_set()

    click.echo(f"\n{'=' * 60}")
    click.secho("✓ TREINO CONCLUÍDO", fg='green')
    click.echo("Informe a carga usada em cada exercício (Enter para pular).")

    weights = {}
    for step in session.steps:
        weights[step.name] = click.prompt(f"  {step.name}", default='', show_default=False)

    try:
        entry = runner.finish(weights)
    except TreinoError as e:
        _fail(e)

    click.secho(f"✓ Registrado em {entry.date_label} ({len(entry.weights)} cargas)", fg='green')


# =============================================================================
# History
# =============================================================================

@cli.group()
def history():
    """Completed sessions."""


@history.command('list')
@click.option('--all', 'show_all', is_flag=True, help='Include hidden entries')
@click.pass_obj
def history_list(ws: Workspace, show_all: bool):
    """List completed sessions, newest first."""
    entries = ws.history.full_log() if show_all else ws.history.visible_log()
    if not entries:
        click.echo("Nenhum treino registrado.")
        return

    for entry in entries:
        hidden = '' if entry.visible else ' [oculto]'
        click.echo(f"{entry.date_label}  {' / '.join(entry.days):<20} {', '.join(entry.muscles)}{hidden}")
        click.echo(f"  id {entry.id}")
        for name, weight in entry.weights.items():
            click.echo(f"    {name:<36} {weight}")


@history.command('hide')
@click.argument('entry_id')
@click.pass_obj
def history_hide(ws: Workspace, entry_id: str):
    """Hide an entry from the log (analytics still count it)."""
    try:
        ws.history.set_visibility(entry_id, False)
    except TreinoError as e:
        _fail(e)
    click.secho("✓ Registro ocultado", fg='green')


@history.command('show')
@click.argument('entry_id')
@click.pass_obj
def history_show(ws: Workspace, entry_id: str):
    """Make a hidden entry visible again."""
    try:
        ws.history.set_visibility(entry_id, True)
    except TreinoError as e:
        _fail(e)
    click.secho("✓ Registro visível", fg='green')


# =============================================================================
# Analytics
# =============================================================================

def _nav(on: Optional[str], month: Optional[int], year: Optional[int], week: Optional[int]) -> NavContext:
    base = NavContext.for_date(_parse_day(on) if on else date.today())
    try:
        return NavContext(
            month=month if month is not None else base.month,
            year=year if year is not None else base.year,
            week=week if week is not None else base.week,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))


@cli.command()
@click.argument('exercise')
@click.option('--by', 'granularity', type=click.Choice([g.value for g in Granularity]), default='month-weeks')
@click.option('--on', help='Any date inside the period to show')
@click.option('--month', type=int)
@click.option('--year', type=int)
@click.option('--week', type=int, help='Week of month 1-4 (week-days view)')
@click.option('--chart', type=click.Path(dir_okay=False, path_type=Path), help='Save a PNG chart here')
@click.pass_obj
def stats(ws: Workspace, exercise: str, granularity: str, on, month, year, week, chart: Optional[Path]):
    """Weight trend for an exercise."""
    nav = _nav(on, month, year, week)
    analyzer = PerformanceAnalyzer(ws.history.full_log())
    result = analyzer.query(exercise, Granularity(granularity), nav)

    click.echo("=" * 60)
    click.echo(f"EVOLUÇÃO: {exercise} ({granularity}, {nav.month_label})")
    click.echo("=" * 60)

    if not result.series:
        click.echo(f"Sem cargas registradas para '{exercise}' nesse período.")
        known = analyzer.exercises()
        if known:
            click.echo(f"Exercícios com registro: {', '.join(known)}")
        return

    for point in result.series:
        click.echo(f"  {point.label:<10} {point.full_date:<14} {point.value:>7.1f} kg")

    m = result.metrics
    click.echo(f"\n{'─' * 60}")
    click.echo(f"Atual: {m.latest:.1f} kg")
    click.echo("Variação: ", nl=False)
    click.secho(f"{m.change_percent:+.1f}%", fg='green' if m.change_percent >= 0 else 'red')

    c = result.comparison
    if c is not None:
        click.echo(f"{c.label}: ", nl=False)
        if c.no_data:
            click.echo("sem dados anteriores")
        else:
            click.secho(f"{c.percent:+.1f}%", fg='green' if c.percent >= 0 else 'red')

    if chart is not None:
        from treino.plotting import render_series
        path = render_series(result, chart)
        click.echo(f"\nGráfico salvo em {path}")


@cli.command('calendar')
@click.argument('exercise')
@click.option('--month', type=int)
@click.option('--year', type=int)
@click.option('--day', 'day_text', help='Show details for this date')
@click.pass_obj
def calendar_cmd(ws: Workspace, exercise: str, month, year, day_text):
    """Month view: sessions (•) and days with a weight for the exercise (*)."""
    nav = _nav(None, month, year, None)
    analyzer = PerformanceAnalyzer(ws.history.full_log())

    click.echo(f"{MONTH_LABELS[nav.month - 1]} {nav.year} - {exercise}")
    click.echo(' '.join(f"{wd.label[:3]:>4}" for wd in Weekday))

    marks = analyzer.calendar(exercise, nav.month, nav.year)
    cells = ['    '] * marks[0].day.weekday()
    for mark in marks:
        flag = '*' if mark.has_weight else '•' if mark.has_session else ' '
        cells.append(f"{mark.day.day:>3}{flag}")
    for i in range(0, len(cells), 7):
        click.echo(' '.join(cells[i:i + 7]))

    if day_text:
        info = analyzer.day_info(exercise, _parse_day(day_text))
        click.echo(f"\n{info.day:%d/%m/%Y}: ", nl=False)
        if info.weight is not None:
            click.echo(f"{info.weight:.1f} kg")
        elif info.has_session:
            click.echo("treino feito, sem carga para esse exercício")
        else:
            click.echo("sem treino")


if __name__ == '__main__':
    cli()
