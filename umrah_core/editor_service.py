# umrah_core/editor_service.py
import copy
import json
import os
import threading
from typing import Dict, List, Optional

from umrah_core.data_store import DATA_FILES, DEFAULT_DATA_DIR
from umrah_core.errors import ContentLoadError, EntryNotFoundError, UnknownFileKeyError
from umrah_core.models import Violation, WriteResult
from umrah_core.schema_validator import SCHEMA_FILES, validate
from umrah_core.utils import atomic_write_text, dump_json_document, read_json_file


class EditorService:
    """
    Read/write access to duas.json, themes.json and rounds.json.

    Every write is validated against the file's JSON Schema before it is
    committed. A rejected write leaves the file on disk untouched. Reading
    the current document, validating the new one and writing it happen under
    one lock per file, so concurrent writers cannot clobber each other.
    """

    def __init__(self, data_dir: str = DEFAULT_DATA_DIR, schema_dir: Optional[str] = None,
                 strict_references: bool = False):
        self.data_dir = data_dir
        self.schema_dir = schema_dir or os.path.join(data_dir, "schemas")
        self.strict_references = strict_references
        self._locks = {key: threading.Lock() for key in DATA_FILES}
        self._schemas: Dict[str, dict] = {}

    # --- paths and schemas ---

    def _check_key(self, file_key: str):
        if file_key not in DATA_FILES:
            raise UnknownFileKeyError(file_key)

    def data_path(self, file_key: str) -> str:
        self._check_key(file_key)
        return os.path.join(self.data_dir, DATA_FILES[file_key])

    def read_schema(self, file_key: str) -> dict:
        self._check_key(file_key)
        if file_key not in self._schemas:
            self._schemas[file_key] = read_json_file(os.path.join(self.schema_dir, SCHEMA_FILES[file_key]))
        return self._schemas[file_key]

    # --- whole-document operations ---

    def read(self, file_key: str) -> dict:
        path = self.data_path(file_key)
        try:
            return read_json_file(path)
        except json.JSONDecodeError as e:
            raise ContentLoadError(DATA_FILES[file_key], f"invalid JSON ({e})") from e

    def write(self, file_key: str, document) -> WriteResult:
        """Validate document and, only if it is valid, replace the file with it."""
        self._check_key(file_key)
        with self._locks[file_key]:
            return self._commit(file_key, document)

    # --- id-scoped operations ---

    def upsert_entry(self, file_key: str, entry_id: str, fields: dict) -> WriteResult:
        """Insert or replace one entry. For duas and themes the id field follows the key."""
        self._check_key(file_key)
        with self._locks[file_key]:
            document = copy.deepcopy(self.read(file_key))
            entry = copy.deepcopy(fields)
            if file_key != "rounds" and isinstance(entry, dict):
                entry["id"] = entry_id
            document[entry_id] = entry
            return self._commit(file_key, document)

    def delete_entry(self, file_key: str, entry_id: str) -> WriteResult:
        self._check_key(file_key)
        with self._locks[file_key]:
            document = copy.deepcopy(self.read(file_key))
            if entry_id not in document:
                raise EntryNotFoundError(file_key, entry_id)
            del document[entry_id]
            return self._commit(file_key, document)

    # --- internals, caller holds the file lock ---

    def _commit(self, file_key: str, document) -> WriteResult:
        violations = validate(document, self.read_schema(file_key))
        if not violations and file_key != "rounds":
            violations = self._id_violations(document)
        if not violations and self.strict_references:
            violations = self._reference_violations(file_key, document)
        if violations:
            return WriteResult(ok=False, violations=violations)
        atomic_write_text(self.data_path(file_key), dump_json_document(document))
        return WriteResult(ok=True)

    @staticmethod
    def _id_violations(document: dict) -> List[Violation]:
        # Entries are looked up by mapping key, so the id field has to agree with it
        return [Violation(path=f"/{key}/id", message=f"id '{entry['id']}' does not match key '{key}'")
                for key, entry in document.items() if entry["id"] != key]

    def _reference_violations(self, file_key: str, document: dict) -> List[Violation]:
        violations = []
        if file_key == "themes":
            duas = self.read("duas")
            for theme_id, theme in document.items():
                for field in ("required", "pool"):
                    for index, dua_id in enumerate(theme["duas"][field]):
                        if dua_id not in duas:
                            violations.append(Violation(
                                path=f"/{theme_id}/duas/{field}/{index}",
                                message=f"unknown dua id '{dua_id}'"))
            # Removing or renaming a theme must not orphan a round
            rounds = self.read("rounds")
            for kind, modes in rounds.items():
                for mode, entries in modes.items():
                    for entry in entries:
                        if entry.get("theme") not in document:
                            violations.append(Violation(
                                path=f"/{entry.get('theme')}",
                                message=f"theme '{entry.get('theme')}' is used by round {kind}/{mode}/{entry.get('number')}"))
        elif file_key == "rounds":
            themes = self.read("themes")
            for kind, modes in document.items():
                for mode, entries in modes.items():
                    for index, entry in enumerate(entries):
                        if entry["theme"] not in themes:
                            violations.append(Violation(
                                path=f"/{kind}/{mode}/{index}/theme",
                                message=f"unknown theme id '{entry['theme']}'"))
        elif file_key == "duas":
            # Removing a dua must not orphan a theme reference
            themes = self.read("themes")
            for theme_id, theme in themes.items():
                for field in ("required", "pool"):
                    for dua_id in theme.get("duas", {}).get(field, []):
                        if dua_id not in document:
                            violations.append(Violation(
                                path=f"/{dua_id}",
                                message=f"dua '{dua_id}' is referenced by theme '{theme_id}' ({field})"))
        return violations
