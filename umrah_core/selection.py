# umrah_core/selection.py
import random
import sys
import threading
from typing import Dict, List, Optional

from colorama import Fore, Style

from umrah_core.errors import ThemeNotFoundError
from umrah_core.models import ContentTables, DuaEntry, IntegrityWarning, Theme

SelectionCache = Dict[str, List[str]]


def _unique(ids: List[str]) -> List[str]:
    seen = set()
    result = []
    for dua_id in ids:
        if dua_id not in seen:
            seen.add(dua_id)
            result.append(dua_id)
    return result


def select_duas_for_round(theme: Theme, round_key: str, randomization_enabled: bool,
                          cache: SelectionCache, dua_table: Dict[str, DuaEntry],
                          rng: Optional[random.Random] = None,
                          report: Optional[List[IntegrityWarning]] = None) -> List[str]:
    """
    Return the ordered dua ids shown for one round.

    A round that is already in the cache gets the cached list back as is, so
    the same round renders the same duas for the rest of the session. A fresh
    selection is the theme's required ids (first occurrence wins) followed by
    up to `count` distinct ids drawn at random from the pool, in draw order.
    Pool ids already required are skipped. Ids missing from dua_table are
    left out and recorded in `report` instead of failing the render.

    Args:
        theme: Theme the round is mapped to.
        round_key: Cache key of the round, see models.round_key().
        randomization_enabled: When False only the required ids are used.
        cache: Selection cache, updated in place.
        dua_table: Dua id -> DuaEntry.
        rng: Randomness provider; the module-level generator when omitted.
        report: Optional list that receives IntegrityWarning values.
    """
    if round_key in cache:
        return cache[round_key]

    rng = rng or random
    composition = theme.duas

    chosen = _unique(composition.required)
    pool = _unique(composition.pool)
    if randomization_enabled and composition.count > 0 and pool:
        drawn = rng.sample(pool, min(composition.count, len(pool)))
        chosen.extend(dua_id for dua_id in drawn if dua_id not in chosen)

    selection = []
    for dua_id in chosen:
        if dua_id in dua_table:
            selection.append(dua_id)
            continue
        warning = IntegrityWarning(source=f"themes/{theme.id}/duas", target="duas", missing_id=dua_id)
        print(f"{Fore.YELLOW}Warning: {warning.message} (round {round_key}), skipping.{Style.RESET_ALL}",
              file=sys.stderr)
        if report is not None:
            report.append(warning)

    cache[round_key] = selection
    return selection


class DuaSelector:
    """Selects duas by theme id against loaded content tables.

    Cache population runs under a lock so another thread never sees a
    half-built entry.
    """

    def __init__(self, tables: ContentTables, rng: Optional[random.Random] = None):
        self.tables = tables
        self.rng = rng or random.Random()
        self.warnings: List[IntegrityWarning] = []
        self._lock = threading.Lock()

    def get_theme(self, theme_id: str) -> Theme:
        theme = self.tables.themes.get(theme_id)
        if theme is None:
            raise ThemeNotFoundError(theme_id)
        return theme

    def select(self, theme_id: str, round_key: str, randomization_enabled: bool,
               cache: SelectionCache) -> List[str]:
        theme = self.get_theme(theme_id)
        with self._lock:
            return select_duas_for_round(theme, round_key, randomization_enabled, cache,
                                         self.tables.duas, rng=self.rng, report=self.warnings)

    def resolve(self, dua_ids: List[str]) -> List[DuaEntry]:
        return [self.tables.duas[dua_id] for dua_id in dua_ids if dua_id in self.tables.duas]
