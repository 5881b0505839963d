# umrah_core/data_store.py
import json
import os
import sys
from typing import Dict, List

from colorama import Fore, Style
from pydantic import ValidationError

from umrah_core.errors import ContentLoadError
from umrah_core.models import ContentTables, DuaEntry, IntegrityWarning, Round, Theme
from umrah_core.utils import get_app_path

DATA_FILES = {
    "duas": "duas.json",
    "themes": "themes.json",
    "rounds": "rounds.json",
}

DEFAULT_DATA_DIR = get_app_path("database")


def _parse(document_name: str, text: str):
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ContentLoadError(document_name, f"invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise ContentLoadError(document_name, "top-level value must be an object")
    return data


def _keyed_entries(document_name: str, data: Dict, model):
    table = {}
    for entry_id, fields in data.items():
        if not isinstance(fields, dict):
            raise ContentLoadError(document_name, f"entry '{entry_id}' is not an object")
        try:
            entry = model.model_validate(fields)
        except ValidationError as e:
            raise ContentLoadError(document_name, f"entry '{entry_id}': {e.errors()[0]['msg']}") from e
        # The mapping key is the id the rest of the data refers to
        entry.id = entry_id
        table[entry_id] = entry
    return table


def _round_entries(data: Dict):
    rounds = {}
    for kind, modes in data.items():
        if not isinstance(modes, dict):
            raise ContentLoadError("rounds.json", f"'{kind}' must map modes to round lists")
        rounds[kind] = {}
        for mode, entries in modes.items():
            if not isinstance(entries, list):
                raise ContentLoadError("rounds.json", f"'{kind}/{mode}' must be a list")
            parsed = []
            for item in entries:
                try:
                    parsed.append(Round(kind=kind, mode=mode, **item))
                except (TypeError, ValidationError) as e:
                    raise ContentLoadError("rounds.json", f"bad round in '{kind}/{mode}': {item!r}") from e
            rounds[kind][mode] = parsed
    return rounds


def load_tables(duas_doc: str, themes_doc: str, rounds_doc: str) -> ContentTables:
    """Parse the three content documents (JSON text) into typed tables.

    Raises ContentLoadError naming the document that could not be parsed.
    Schema conformance is not checked here.
    """
    duas = _keyed_entries("duas.json", _parse("duas.json", duas_doc), DuaEntry)
    themes = _keyed_entries("themes.json", _parse("themes.json", themes_doc), Theme)
    rounds = _round_entries(_parse("rounds.json", rounds_doc))
    return ContentTables(duas=duas, themes=themes, rounds=rounds)


def load_tables_from_dir(data_dir: str = DEFAULT_DATA_DIR) -> ContentTables:
    texts = {}
    for key, filename in DATA_FILES.items():
        path = os.path.join(data_dir, filename)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                texts[key] = f.read()
        except OSError as e:
            raise ContentLoadError(filename, f"cannot read {path} ({e.strerror})") from e
    return load_tables(texts["duas"], texts["themes"], texts["rounds"])


def check_references(tables: ContentTables) -> List[IntegrityWarning]:
    """Collect theme -> dua and round -> theme references that do not resolve."""
    warnings = []
    for theme_id, theme in tables.themes.items():
        for field in ("required", "pool"):
            for dua_id in getattr(theme.duas, field):
                if dua_id not in tables.duas:
                    warnings.append(IntegrityWarning(
                        source=f"themes/{theme_id}/duas/{field}", target="duas", missing_id=dua_id))
    for kind, modes in tables.rounds.items():
        for mode, entries in modes.items():
            for entry in entries:
                if entry.theme not in tables.themes:
                    warnings.append(IntegrityWarning(
                        source=f"rounds/{kind}/{mode}/{entry.number}", target="themes", missing_id=entry.theme))
    return warnings


def report_warnings(warnings: List[IntegrityWarning]):
    """Print integrity warnings to stderr so authors can fix the content."""
    for warning in warnings:
        print(f"{Fore.YELLOW}Warning: {warning.message}{Style.RESET_ALL}", file=sys.stderr)
