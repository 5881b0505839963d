# umrah_core/utils.py
import json
import os
import sys
import tempfile

# Path and file helpers shared by the guide, the editor and the validator.


def get_app_path(resource_path: str = '') -> str:
    """
    Get the absolute path to a bundled, read-only resource.

    Handles both normal execution and PyInstaller frozen bundles.

    Args:
        resource_path: Path relative to the package directory
                       (e.g. 'database/duas.json'). Leave empty for the
                       package directory itself.
    """
    if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
        # Resources are extracted under _MEIPASS/umrah_core
        base_path = os.path.join(sys._MEIPASS, 'umrah_core')
    else:
        base_path = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(base_path, resource_path) if resource_path else base_path


def read_json_file(path: str):
    """Read and parse a UTF-8 JSON file. Errors propagate to the caller."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def dump_json_document(data) -> str:
    """Serialise a content document the way the editor writes it to disk."""
    return json.dumps(data, ensure_ascii=False, indent=2) + '\n'


def atomic_write_text(path: str, text: str):
    """Write text to path through a temp file in the same directory + os.replace."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix='.tmp-', suffix='.json', dir=directory)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        # Leave the original file as it was
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
