"""
Whole-document JSON persistence.

Each collection (catalog, plans, history) lives in one JSON file that is read
fully into memory on first use and rewritten completely after every mutation.
There is no locking: two processes writing the same data directory race and
the last writer wins.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, List, Optional

from .catalog import ExerciseCatalog, load_seed
from .errors import NotFoundError
from .models import HistoryEntry, WorkoutPlan

logger = logging.getLogger(__name__)

CATALOG_KEY = 'catalog'
PLANS_KEY = 'plans'
HISTORY_KEY = 'history'


class DocumentStore:
    """Key -> JSON document on disk under a data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f'{key}.json'

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def read(self, key: str, default: Any = None) -> Any:
        """
        Load a document.

        Args:
            key: Document name
            default: Returned when the document has never been written

        Returns:
            Parsed JSON value
        """
        path = self.path_for(key)
        if not path.exists():
            return default
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def write(self, key: str, document: Any) -> None:
        """Replace a document wholesale."""
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        logger.info("Wrote %s (%s)", key, path)


class CatalogRepository:
    """Catalog document; seeded from YAML the first time it is read."""

    def __init__(self, store: DocumentStore, seed_path: Optional[Path] = None, strict_names: bool = False):
        self.store = store
        self.seed_path = seed_path
        self.strict_names = strict_names
        self._catalog: Optional[ExerciseCatalog] = None

    def load(self) -> ExerciseCatalog:
        if self._catalog is None:
            if self.store.exists(CATALOG_KEY):
                self._catalog = ExerciseCatalog.from_document(
                    self.store.read(CATALOG_KEY, {}), strict_names=self.strict_names
                )
            elif self.seed_path is not None:
                self._catalog = load_seed(self.seed_path, strict_names=self.strict_names)
                # A missing seed stays unsaved so a later run can still seed
                if Path(self.seed_path).exists():
                    self.save()
            else:
                self._catalog = ExerciseCatalog(strict_names=self.strict_names)
        return self._catalog

    def save(self) -> None:
        self.store.write(CATALOG_KEY, self.load().to_document())

    def mutate(self, change: Callable[[ExerciseCatalog], Any]) -> Any:
        """Apply a change to the catalog and persist the whole document."""
        result = change(self.load())
        self.save()
        return result


class PlanRepository:
    """Array of WorkoutPlan documents."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self._plans: Optional[List[WorkoutPlan]] = None

    def all(self) -> List[WorkoutPlan]:
        if self._plans is None:
            self._plans = [WorkoutPlan.from_dict(d) for d in self.store.read(PLANS_KEY, [])]
        return list(self._plans)

    def get(self, plan_id: str) -> WorkoutPlan:
        for plan in self.all():
            if plan.id == plan_id:
                return plan
        raise NotFoundError('Treino', plan_id)

    def add(self, plan: WorkoutPlan) -> WorkoutPlan:
        self._plans = self.all() + [plan]
        self._flush()
        return plan

    def delete(self, plan_id: str) -> WorkoutPlan:
        plan = self.get(plan_id)
        self._plans = [p for p in self.all() if p.id != plan_id]
        self._flush()
        return plan

    def _flush(self) -> None:
        self.store.write(PLANS_KEY, [p.to_dict() for p in self._plans or []])


class HistoryRepository:
    """
    Array of HistoryEntry documents, newest first.

    Two read paths over the same data: visible_log() for list views and
    full_log() for analytics, which must see hidden entries too.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self._entries: Optional[List[HistoryEntry]] = None

    def full_log(self) -> List[HistoryEntry]:
        if self._entries is None:
            self._entries = [HistoryEntry.from_dict(d) for d in self.store.read(HISTORY_KEY, [])]
        return list(self._entries)

    def visible_log(self) -> List[HistoryEntry]:
        return [e for e in self.full_log() if e.visible]

    def get(self, entry_id: str) -> HistoryEntry:
        for entry in self.full_log():
            if entry.id == entry_id:
                return entry
        raise NotFoundError('Registro', entry_id)

    def append(self, entry: HistoryEntry) -> HistoryEntry:
        self._entries = [entry] + self.full_log()
        self._flush()
        return entry

    def set_visibility(self, entry_id: str, visible: bool) -> HistoryEntry:
        entry = self.get(entry_id)
        entry.visible = visible
        self._flush()
        return entry

    def toggle_visibility(self, entry_id: str) -> HistoryEntry:
        entry = self.get(entry_id)
        return self.set_visibility(entry_id, not entry.visible)

    def _flush(self) -> None:
        self.store.write(HISTORY_KEY, [e.to_dict() for e in self._entries or []])
