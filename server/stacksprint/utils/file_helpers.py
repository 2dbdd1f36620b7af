import json
import logging
import os
import time
from typing import Any, Dict, List, Optional

from stacksprint.utils.config import LOG_DIR

logger = logging.getLogger(__name__)


def parse_csv(value: str) -> List[str]:
    """Split comma-separated text, trimming segments and dropping empty ones."""
    if not value:
        return []
    return [seg.strip() for seg in value.split(",") if seg.strip()]


def join_csv(items: Optional[List[str]]) -> str:
    if not items:
        return ""
    return ", ".join(items)


# --- Helper: safe path normalize & reject traversal/abs paths ---
def _safe_normalize(p: str) -> Optional[str]:
    if not isinstance(p, str) or p.strip() == "":
        return None
    p = p.strip().replace("\\", "/")
    # disallow absolute paths
    if p.startswith("/") or os.path.isabs(p):
        return None
    if ".." in p:
        return None
    clean = os.path.normpath(p).replace("\\", "/")
    if clean == ".":
        return None
    return clean


def path_depth(path: str) -> int:
    return len([seg for seg in path.split("/") if seg]) - 1


def is_directory_path(path: str) -> bool:
    # generated trees carry no trailing slash; a dot marks a file
    return "." not in path


def _save_debug_log(prefix: str, payload: Dict[str, Any], log_dir: str = LOG_DIR) -> Optional[str]:
    try:
        os.makedirs(log_dir, exist_ok=True)
        fname = os.path.join(log_dir, f"{int(time.time() * 1000)}_{prefix}.json")
        with open(fname, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)
        return fname
    except Exception:
        logger.exception("Failed to write debug log")
        return None
