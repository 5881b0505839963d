# umrah_core/schema_validator.py
import os
from typing import Dict, List

from jsonschema import Draft7Validator

from umrah_core.errors import UnknownFileKeyError
from umrah_core.models import Violation
from umrah_core.utils import get_app_path, read_json_file

SCHEMA_FILES = {
    "duas": "duas.schema.json",
    "themes": "themes.schema.json",
    "rounds": "rounds.schema.json",
}

DEFAULT_SCHEMA_DIR = get_app_path(os.path.join("database", "schemas"))


def _pointer(path) -> str:
    """Render a jsonschema error path as a JSON pointer ("/" for the root)."""
    if not path:
        return "/"
    parts = [str(p).replace("~", "~0").replace("/", "~1") for p in path]
    return "/" + "/".join(parts)


def validate(document, schema: Dict) -> List[Violation]:
    """Validate document against schema and return every violation found.

    An empty list means the document is valid. The function has no side
    effects; violations come back sorted by their location in the document.
    """
    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(document),
                    key=lambda e: [(isinstance(p, int), p) for p in e.absolute_path])
    return [Violation(path=_pointer(err.absolute_path), message=err.message) for err in errors]


def load_schema(file_key: str, schema_dir: str = DEFAULT_SCHEMA_DIR) -> Dict:
    if file_key not in SCHEMA_FILES:
        raise UnknownFileKeyError(file_key)
    return read_json_file(os.path.join(schema_dir, SCHEMA_FILES[file_key]))


def validate_file_key(file_key: str, document, schema_dir: str = DEFAULT_SCHEMA_DIR) -> List[Violation]:
    """Validate a content document against the schema registered for file_key."""
    return validate(document, load_schema(file_key, schema_dir))
