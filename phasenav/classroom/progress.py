"""
ProgressStore - Track phase/module unlocks in ~/.phasenav/progress.db.

Stores one serialized ProgressState per storage key:
- Unlocked phases (plus display aliases)
- Unlocked modules per phase
- Completed modules per phase
- The phase the learner is on
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from phasenav.errors import PersistedStateCorruption
from phasenav.schemas import Curriculum, ProgressState, UnlockResult, add_unique

from .catalog import DEFAULT_CURRICULUM

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_DIR = Path.home() / ".phasenav"
DEFAULT_PROGRESS_DB = DEFAULT_PROGRESS_DIR / "progress.db"
DEFAULT_STORAGE_KEY = "ecommerceProjectProgress"


class ProgressStore:
    """
    Durable source of truth for what a learner may open and has finished.

    The store is the only writer of its ProgressState. State is read once
    on initialization and written back once per completed module; there is
    no cross-session locking, so the last writer wins.
    """

    def __init__(
        self,
        db_path: Optional[Path] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        curriculum: Optional[Curriculum] = None,
    ):
        """
        Initialize the store and load (or create) the stored state.

        Args:
            db_path: Path to progress.db (default: ~/.phasenav/progress.db)
            storage_key: Slot name the state is stored under
            curriculum: Phase/module order used for unlocking (default: e-commerce project)
        """
        self.db_path = db_path or DEFAULT_PROGRESS_DB
        self.storage_key = storage_key
        self.curriculum = curriculum or DEFAULT_CURRICULUM
        self.progress: ProgressState = ProgressState.initial()
        self._ensure_database()
        self.initialize()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS progress_slots (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    # -------------------------------------------------------------------------
    # Raw Slot Access
    # -------------------------------------------------------------------------

    def read_raw(self) -> Optional[str]:
        """Return the stored value for this slot, or None if absent."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT value FROM progress_slots WHERE key = ?",
                (self.storage_key,)
            )
            row = cursor.fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def write_raw(self, value: str):
        """Overwrite the stored value for this slot."""
        conn = self._get_connection()
        try:
            now = datetime.now().isoformat()
            conn.execute(
                """INSERT INTO progress_slots (key, value, updated_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                     value = excluded.value,
                     updated_at = excluded.updated_at""",
                (self.storage_key, value, now)
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _parse(raw: str) -> ProgressState:
        try:
            return ProgressState.model_validate_json(raw)
        except ValidationError as e:
            raise PersistedStateCorruption(str(e)) from e

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self):
        """
        Load the stored state, creating the default one when needed.

        An absent or unreadable record is replaced by the initial state
        (first phase and its overview unlocked). Idempotent: a valid stored
        record is only read, never rewritten.
        """
        raw = self.read_raw()
        if raw is not None:
            try:
                self.progress = self._parse(raw)
                return
            except PersistedStateCorruption as e:
                logger.warning(f"Discarding unreadable progress for '{self.storage_key}': {e}")

        self.progress = ProgressState.initial()
        self.save()

    def save(self):
        """Serialize the full state into the slot."""
        self.write_raw(self.progress.to_json())

    def reset(self):
        """Reset progress to the initial state."""
        self.progress = ProgressState.initial()
        self.save()

    def get_progress(self) -> ProgressState:
        """Return a copy of the current state."""
        return self.progress.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_phase_unlocked(self, phase: str) -> bool:
        return phase in self.progress.unlocked_phases

    def is_phase_accessible(self, phase: str) -> bool:
        """Unlock check that treats a phase and its aliases as one."""
        definition = self.curriculum.phase(phase)
        if definition is None:
            return self.is_phase_unlocked(phase)
        return any(self.is_phase_unlocked(name) for name in definition.all_ids)

    def is_module_unlocked(self, phase: str, module: str) -> bool:
        return module in self.progress.unlocked_modules.get(phase, [])

    def is_module_completed(self, phase: str, module: str) -> bool:
        return module in self.progress.completed_modules.get(phase, [])

    # -------------------------------------------------------------------------
    # Completion and Unlocking
    # -------------------------------------------------------------------------

    def complete_module(self, phase: str, module: str) -> UnlockResult:
        """
        Mark a module completed and unlock whatever follows it.

        Completing module i unlocks module i+1 of the same phase. Completing
        the phase's terminal module also unlocks the next phase (with its
        aliases) and that phase's first module. Repeated calls, and calls for
        modules that are not unlocked, change nothing.

        Returns:
            UnlockResult describing the changes (empty when nothing changed)
        """
        phase = self.curriculum.canonical_phase(phase) or phase
        result = UnlockResult(phase=phase, module=module)

        if self.is_module_completed(phase, module):
            return result
        if not self.is_module_unlocked(phase, module):
            logger.debug(f"Ignoring completion of locked module {phase}/{module}")
            return result

        add_unique(self.progress.completed_modules.setdefault(phase, []), module)
        result.completed = True
        self._unlock_next_module(phase, module, result)
        self.save()
        return result

    def _unlock_next_module(self, phase: str, module: str, result: UnlockResult):
        definition = self.curriculum.phase(phase)
        if definition is None:
            return

        following = definition.next_module(module)
        if following is not None:
            unlocked = self.progress.unlocked_modules.setdefault(phase, [])
            if add_unique(unlocked, following.id):
                result.unlocked_module = following.id

        descriptor = definition.get_module(module)
        if descriptor is not None and descriptor.is_terminal:
            self._unlock_next_phase(phase, result)

    def _unlock_next_phase(self, phase: str, result: UnlockResult):
        next_phase = self.curriculum.next_phase(phase)
        if next_phase is None:
            return

        for name in next_phase.all_ids:
            if add_unique(self.progress.unlocked_phases, name):
                result.unlocked_phases.append(name)

        first = next_phase.first_module.id
        if add_unique(self.progress.unlocked_modules.setdefault(next_phase.id, []), first):
            result.next_phase_module = first
        self.progress.current_phase = next_phase.id
        logger.info(f"Unlocked phase '{next_phase.id}' after completing '{phase}'")

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def get_completion_stats(self) -> dict:
        """
        Get completion statistics.

        Returns:
            Dictionary with overall counts and a per-phase breakdown
        """
        phases = []
        total = 0
        completed = 0
        for definition in self.curriculum.phases:
            done = [
                m for m in definition.module_ids
                if self.is_module_completed(definition.id, m)
            ]
            phases.append({
                "id": definition.id,
                "label": definition.label,
                "unlocked": self.is_phase_accessible(definition.id),
                "completed": len(done),
                "total": len(definition.modules),
            })
            total += len(definition.modules)
            completed += len(done)

        return {
            "current_phase": self.progress.current_phase,
            "total_modules": total,
            "completed": completed,
            "completion_percent": round(completed / total * 100, 1) if total > 0 else 0,
            "phases": phases,
        }
