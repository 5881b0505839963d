# umrah_core/state_store.py
import json
import os
import sys
import threading
from typing import Dict, Optional, Tuple

from colorama import Fore, Style
from pydantic import ValidationError

from umrah_core.models import PROGRESS_KINDS, RITUAL_MODES, UserState
from umrah_core.utils import atomic_write_text

STORAGE_KEY = "umrahGuide.state"
# Older builds stored the same blob under these keys
LEGACY_STORAGE_KEYS: Tuple[str, ...] = ("umrahGuideState",)


def default_state() -> UserState:
    return UserState()


def load_state(persisted: Optional[str]) -> UserState:
    """Build a UserState from its persisted string.

    Missing, empty or corrupt input falls back to the default state; this
    never raises.
    """
    if not persisted:
        return default_state()
    try:
        data = json.loads(persisted)
        if not isinstance(data, dict):
            return default_state()
        return UserState.model_validate(data)
    except (json.JSONDecodeError, ValidationError, TypeError, RecursionError):
        return default_state()


def save_state(state: UserState) -> str:
    """Serialise state canonically: sorted keys, compact separators, sorted progress."""
    data = state.model_dump(mode="json")
    for kind in PROGRESS_KINDS:
        data["progress"][kind] = sorted(getattr(state.progress, kind))
    return json.dumps(data, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _check_kind(ritual_kind: str):
    if ritual_kind not in PROGRESS_KINDS:
        raise ValueError(f"Unknown ritual kind '{ritual_kind}', expected one of {', '.join(PROGRESS_KINDS)}")


def record_completion(state: UserState, ritual_kind: str, number: int) -> UserState:
    """Return a new state with round `number` of ritual_kind marked complete."""
    _check_kind(ritual_kind)
    if not isinstance(number, int) or isinstance(number, bool) or number < 1:
        raise ValueError(f"Round number must be a positive integer, got {number!r}")
    new_state = state.model_copy(deep=True)
    getattr(new_state.progress, ritual_kind).add(number)
    return new_state


def reset_progress(state: UserState, ritual_kind: str) -> UserState:
    _check_kind(ritual_kind)
    new_state = state.model_copy(deep=True)
    getattr(new_state.progress, ritual_kind).clear()
    return new_state


def invalidate_selection(state: UserState, round_key: str) -> UserState:
    """Drop one round's cached selection so the next render picks again."""
    new_state = state.model_copy(deep=True)
    new_state.selected_duas.pop(round_key, None)
    return new_state


def set_randomization(state: UserState, enabled: bool) -> UserState:
    """Toggle pool randomisation; a change clears every cached selection."""
    new_state = state.model_copy(deep=True)
    if new_state.config.randomize != enabled:
        new_state.config.randomize = enabled
        new_state.selected_duas.clear()
    return new_state


def set_ritual_type(state: UserState, ritual_type: str) -> UserState:
    if ritual_type not in RITUAL_MODES:
        raise ValueError(f"Unknown ritual type '{ritual_type}'")
    new_state = state.model_copy(deep=True)
    new_state.config.ritual_type = ritual_type
    return new_state


def set_theme_mode(state: UserState, theme_mode: str) -> UserState:
    """Switch between the default round themes and the user's custom ones."""
    if theme_mode not in ("default", "custom"):
        raise ValueError(f"Unknown theme mode '{theme_mode}'")
    new_state = state.model_copy(deep=True)
    if new_state.config.theme_mode != theme_mode:
        new_state.config.theme_mode = theme_mode
        # Rounds with an override now resolve to a different theme
        for key in new_state.config.custom_themes:
            new_state.selected_duas.pop(key, None)
    return new_state


def set_custom_theme(state: UserState, round_key: str, theme_id: Optional[str]) -> UserState:
    """Override (or with theme_id=None, restore) the theme used for one round."""
    new_state = state.model_copy(deep=True)
    if theme_id is None:
        new_state.config.custom_themes.pop(round_key, None)
    else:
        new_state.config.custom_themes[round_key] = theme_id
    new_state.selected_duas.pop(round_key, None)
    return new_state


class StateFile:
    """
    Small JSON key/value file that holds the persisted state blob.

    Reading prefers STORAGE_KEY and falls back to the legacy keys; the next
    write stores the blob under STORAGE_KEY and drops the legacy entries.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError, RecursionError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def read_blob(self) -> Optional[str]:
        with self._lock:
            data = self._read_all()
        if STORAGE_KEY in data:
            return data[STORAGE_KEY]
        for key in LEGACY_STORAGE_KEYS:
            if key in data:
                return data[key]
        return None

    def write_blob(self, blob: str):
        with self._lock:
            data = self._read_all()
            for key in LEGACY_STORAGE_KEYS:
                data.pop(key, None)
            data[STORAGE_KEY] = blob
            try:
                atomic_write_text(self.path, json.dumps(data, ensure_ascii=False, indent=2))
            except OSError as e:
                print(f"{Fore.RED}Error saving guide state to '{self.path}': {e}{Style.RESET_ALL}", file=sys.stderr)

    def load(self) -> UserState:
        return load_state(self.read_blob())

    def save(self, state: UserState):
        self.write_blob(save_state(state))
