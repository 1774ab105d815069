"""Owns the learner's story-mode state, its persistence and change notifications.

The controller is the only stateful piece around the pure progression engine:
it loads and migrates the saved snapshot, applies engine transitions, persists
each new snapshot and then tells subscribers about it.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .config import Settings, UnlockRule, get_settings
from .curriculum import CurriculumCatalog, LearningUnit, story_mode_curriculum
from .learner_state import LearnerState, current_unit, fresh_state, migrate
from .progression import (
    NextAction,
    complete_add_to_arsenal,
    complete_drill,
    complete_progression_session,
    compute_next_action,
    pass_exam,
    unlock_move,
)
from .repositories.learner_progress import JsonFileLearnerProgressStore, LearnerProgressStore
from .telemetry import emit_event

logger = logging.getLogger(__name__)

StateListener = Callable[[LearnerState], None]


class StoryModeController:
    def __init__(
        self,
        store: LearnerProgressStore,
        curriculum: Optional[CurriculumCatalog] = None,
        *,
        unlock_rule: UnlockRule = "arsenal",
    ) -> None:
        self._store = store
        self._curriculum = curriculum if curriculum is not None else story_mode_curriculum
        self._unlock_rule: UnlockRule = unlock_rule
        self._state = fresh_state(self._curriculum)
        self._initialized = False
        self._listeners: List[StateListener] = []

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "StoryModeController":
        settings = settings or get_settings()
        store = JsonFileLearnerProgressStore(settings.progress_path, settings.storage_key)
        return cls(store, unlock_rule=settings.unlock_rule)

    @property
    def state(self) -> LearnerState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def curriculum(self) -> CurriculumCatalog:
        return self._curriculum

    @property
    def unlock_rule(self) -> UnlockRule:
        return self._unlock_rule

    @property
    def next_action(self) -> NextAction:
        return compute_next_action(self._state, self._curriculum)

    @property
    def current_unit(self) -> Optional[LearningUnit]:
        return current_unit(self._state, self._curriculum)

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def init(self) -> LearnerState:
        """Load, migrate and adopt the saved state.

        Never raises because of saved data. A snapshot that cannot be loaded or
        decoded discards the store and starts fresh. A migrated snapshot that
        cannot be re-saved is kept in memory; the store is left untouched.
        """
        try:
            loaded = self._store.load()
        except Exception:  # noqa: BLE001
            logger.exception("Failed to restore learner state; starting fresh")
            try:
                self._store.clear()
            except Exception:  # noqa: BLE001
                logger.exception("Failed to clear learner progress store")
            loaded = None
            emit_event("learner_state_reset", reason="load_failed")

        if loaded is None:
            self._state = fresh_state(self._curriculum)
        else:
            result = migrate(loaded, self._curriculum)
            self._state = result.state
            if result.changed:
                logger.warning(
                    "Migrated learner state from %d to %d records",
                    len(loaded.progress),
                    len(result.state.progress),
                )
                try:
                    self._store.save(self._state)
                except Exception:  # noqa: BLE001
                    logger.exception("Failed to persist migrated learner state")
                emit_event(
                    "learner_state_migrated",
                    previous_records=len(loaded.progress),
                    records=len(result.state.progress),
                )

        self._initialized = True
        emit_event("story_mode_initialized", next_action=self.next_action)
        self._notify()
        return self._state

    def mark_drill_done(self) -> LearnerState:
        unit = self.current_unit
        return self._commit(complete_drill(self._state, self._curriculum), "drill_done", unit.id if unit else None)

    def mark_add_to_arsenal_done(self, unit_id: int) -> LearnerState:
        updated = complete_add_to_arsenal(self._state, unit_id, unlock_rule=self._unlock_rule)
        return self._commit(updated, "add_to_arsenal_done", unit_id)

    def mark_progression_session_done(self) -> LearnerState:
        unit = self.current_unit
        updated = complete_progression_session(self._state, self._curriculum)
        return self._commit(updated, "progression_session_done", unit.id if unit else None)

    def mark_exam_passed(self) -> LearnerState:
        unit = self.current_unit
        return self._commit(pass_exam(self._state, self._curriculum), "exam_passed", unit.id if unit else None)

    def unlock_move(self, unit_id: int) -> LearnerState:
        return self._commit(unlock_move(self._state, unit_id, self._curriculum), "unit_unlocked", unit_id)

    def reset(self) -> LearnerState:
        self._store.clear()
        self._state = fresh_state(self._curriculum)
        emit_event("learner_state_reset", reason="requested")
        self._notify()
        return self._state

    def _commit(self, updated: LearnerState, action: str, unit_id: Optional[int]) -> LearnerState:
        self._store.save(updated)
        self._state = updated
        emit_event("learner_state_changed", action=action, unit_id=unit_id)
        self._notify()
        return updated

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:  # noqa: BLE001
                logger.exception("Story mode listener failed")


__all__ = ["StateListener", "StoryModeController"]
