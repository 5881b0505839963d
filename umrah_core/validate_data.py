# umrah_core/validate_data.py
import argparse
import json
import os
import sys
from typing import Optional

from colorama import Fore, Style, init

from umrah_core.config import AppSettings, load_settings
from umrah_core.data_store import DATA_FILES, DEFAULT_DATA_DIR, check_references, load_tables_from_dir
from umrah_core.errors import ContentLoadError
from umrah_core.schema_validator import validate_file_key
from umrah_core.utils import read_json_file


def validate_all(data_dir: str = DEFAULT_DATA_DIR, schema_dir: str = None):
    """Validate the three content documents; returns a list of error lines."""
    schema_dir = schema_dir or os.path.join(data_dir, "schemas")
    errors = []
    for file_key, filename in DATA_FILES.items():
        try:
            document = read_json_file(os.path.join(data_dir, filename))
        except (OSError, json.JSONDecodeError) as e:
            errors.append(f"{file_key}/ could not be read: {e}")
            continue
        for violation in validate_file_key(file_key, document, schema_dir):
            errors.append(f"{file_key}{violation.path} {violation.message}")
    return errors


def parse_args(argv=None, settings: Optional[AppSettings] = None):
    settings = settings or AppSettings()
    parser = argparse.ArgumentParser(description="Validate duas.json, themes.json and rounds.json")
    parser.add_argument('--data-dir', default=settings.data_dir)
    parser.add_argument('--schema-dir', default=settings.schema_dir)
    parser.add_argument('--strict-references', action='store_true', default=settings.strict_references,
                        help="Treat dangling dua/theme references as errors")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    init(autoreset=True)
    args = parse_args(argv, load_settings())

    errors = validate_all(args.data_dir, args.schema_dir)
    if errors:
        print(Fore.RED + "Validation failed:\n" + "\n".join(errors), file=sys.stderr)
        return 1

    try:
        warnings = check_references(load_tables_from_dir(args.data_dir))
    except ContentLoadError as e:
        print(Fore.RED + str(e), file=sys.stderr)
        return 1
    for warning in warnings:
        colour = Fore.RED if args.strict_references else Fore.YELLOW
        print(f"{colour}{warning.message}{Style.RESET_ALL}", file=sys.stderr)
    if warnings and args.strict_references:
        return 1

    print(Fore.GREEN + "✅ Data validation passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
