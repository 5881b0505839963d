# umrah_core/config.py
import json
import os
import sys
from typing import Optional

import platformdirs
from colorama import Fore, Style
from pydantic import BaseModel, Field, ValidationError

from umrah_core.data_store import DEFAULT_DATA_DIR

# --- Constants for platformdirs ---
APP_NAME = "UmrahGuide"
APP_AUTHOR = "UmrahGuide"

SETTINGS_FILENAME = "UmrahGuide-Settings.json"
STATE_FILENAME = "state.json"


class AppSettings(BaseModel):
    data_dir: str = DEFAULT_DATA_DIR
    schema_dir: Optional[str] = None     # defaults to <data_dir>/schemas
    editor_host: str = "127.0.0.1"
    editor_port: int = Field(default=4000, ge=0, le=65535)
    strict_references: bool = False      # dangling ids become write-time violations
    max_body_bytes: int = 5_000_000


def settings_path() -> str:
    return os.path.join(platformdirs.user_config_dir(APP_NAME, APP_AUTHOR), SETTINGS_FILENAME)


def state_path() -> str:
    return os.path.join(platformdirs.user_data_dir(APP_NAME, APP_AUTHOR), STATE_FILENAME)


def load_settings(path: Optional[str] = None) -> AppSettings:
    """Load settings from the JSON settings file, falling back to defaults."""
    path = path or settings_path()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return AppSettings.model_validate(json.load(f))
    except FileNotFoundError:
        return AppSettings()
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"{Fore.YELLOW}Settings file '{path}' is invalid, using defaults ({e.__class__.__name__}).{Style.RESET_ALL}",
              file=sys.stderr)
        return AppSettings()
    except OSError as e:
        print(f"{Fore.RED}Error loading settings from '{path}': {e}{Style.RESET_ALL}", file=sys.stderr)
        return AppSettings()
