# stacksprint/utils/config.py
"""
Runtime settings for the workbench.

All values come from the environment (a local .env file is honoured) and are
read once at import time. Collaborators take them as constructor defaults so
tests can pass their own values instead.
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# generation service
API_BASE = os.environ.get("STACKSPRINT_API_URL", "http://localhost:8080").rstrip("/")
REQUEST_TIMEOUT = float(os.environ.get("STACKSPRINT_TIMEOUT", 30))

# preview debounce (quiet period)
PREVIEW_DEBOUNCE_MS = int(os.environ.get("STACKSPRINT_PREVIEW_DEBOUNCE_MS", 500))

# durable preset store
PRESET_FILE = os.environ.get("STACKSPRINT_PRESET_FILE", "./stacksprint_presets.json")
PRESET_STORAGE_KEY = "stacksprint_presets_v1"

# debug dumps
LOG_DIR = os.environ.get("STACKSPRINT_LOG_DIR", "./stacksprint_logs")
DEBUG = _env_flag("STACKSPRINT_DEBUG")

# downloads
BASH_SCRIPT_FILENAME = "stacksprint-init.sh"
POWERSHELL_SCRIPT_FILENAME = "stacksprint-init.ps1"

NOTIFICATION_LIMIT = int(os.environ.get("STACKSPRINT_NOTIFICATION_LIMIT", 20))
