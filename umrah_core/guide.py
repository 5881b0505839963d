# umrah_core/guide.py
import random
from typing import Callable, List, Optional

from umrah_core import state_store
from umrah_core.errors import RoundNotFoundError
from umrah_core.models import ContentTables, DuaEntry, Round, Theme, UserState, progress_kind, round_key
from umrah_core.selection import DuaSelector


class GuideSession:
    """
    One user's pass through the guide.

    Holds the loaded content tables and the current UserState. Each change
    replaces the state with the new object returned by state_store and hands
    it to `persist` (usually StateFile.save) straight away.
    """

    def __init__(self, tables: ContentTables, state: Optional[UserState] = None,
                 persist: Optional[Callable[[UserState], None]] = None,
                 rng: Optional[random.Random] = None):
        self.tables = tables
        self.state = state or state_store.default_state()
        self.persist = persist
        self.selector = DuaSelector(tables, rng=rng)

    def _update(self, new_state: UserState):
        self.state = new_state
        if self.persist:
            self.persist(new_state)

    @property
    def mode(self) -> str:
        return self.state.config.ritual_type

    def rounds(self, kind: str) -> List[Round]:
        return list(self.tables.rounds.get(kind, {}).get(self.mode, []))

    def theme_id_for(self, kind: str, number: int) -> str:
        """Theme for a round: the user's override in custom mode, else rounds.json."""
        key = round_key(kind, self.mode, number)
        config = self.state.config
        if config.theme_mode == "custom" and key in config.custom_themes:
            return config.custom_themes[key]
        entry = self.tables.find_round(kind, self.mode, number)
        if entry is None:
            raise RoundNotFoundError(key)
        return entry.theme

    def theme_for(self, kind: str, number: int) -> Theme:
        return self.selector.get_theme(self.theme_id_for(kind, number))

    def duas_for_round(self, kind: str, number: int) -> List[DuaEntry]:
        """Duas to show for a round, stable for the session once picked."""
        key = round_key(kind, self.mode, number)
        cache = dict(self.state.selected_duas)
        had_entry = key in cache
        ids = self.selector.select(self.theme_id_for(kind, number), key, self.state.config.randomize, cache)
        if not had_entry:
            new_state = self.state.model_copy(deep=True)
            new_state.selected_duas[key] = list(ids)
            self._update(new_state)
        return self.selector.resolve(ids)

    def complete_round(self, kind: str, number: int):
        self._update(state_store.record_completion(self.state, progress_kind(kind, self.mode), number))

    def is_complete(self, kind: str, number: int) -> bool:
        return number in getattr(self.state.progress, progress_kind(kind, self.mode))

    def reset(self, kind: str):
        self._update(state_store.reset_progress(self.state, progress_kind(kind, self.mode)))

    def reshuffle(self, kind: str, number: int):
        """Forget a round's selection so the next render draws a new pool subset."""
        self._update(state_store.invalidate_selection(self.state, round_key(kind, self.mode, number)))

    def set_randomization(self, enabled: bool):
        self._update(state_store.set_randomization(self.state, enabled))

    def set_ritual_type(self, ritual_type: str):
        self._update(state_store.set_ritual_type(self.state, ritual_type))

    def set_theme_mode(self, theme_mode: str):
        self._update(state_store.set_theme_mode(self.state, theme_mode))

    def set_custom_theme(self, kind: str, number: int, theme_id: Optional[str]):
        if theme_id is not None:
            self.selector.get_theme(theme_id)
        self._update(state_store.set_custom_theme(self.state, round_key(kind, self.mode, number), theme_id))
