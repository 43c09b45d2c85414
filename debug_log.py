from __future__ import annotations

import json
import os
import time
from typing import Mapping, Optional

# Set WIZARD_DEBUG_LOG to a file path to collect JSON-lines traces of wizard state changes.
_DEBUG_LOG_ENV = "WIZARD_DEBUG_LOG"
_RUN_ID = "wizard"

_log_path_override: Optional[str] = None


def configure_debug_log(path: Optional[str]) -> None:
    """
    Point the debug log at `path` (or disable it with None/"").

    When never called, the path is read from the WIZARD_DEBUG_LOG environment variable.
    """
    global _log_path_override
    _log_path_override = (path or "").strip()


def debug_log_path() -> str:
    if _log_path_override is not None:
        return _log_path_override
    return str(os.environ.get(_DEBUG_LOG_ENV) or "").strip()


def debug_log(*, location: str, message: str, data: Mapping[str, object]) -> None:
    path = debug_log_path()
    if not path:
        return
    try:
        payload = {
            "runId": _RUN_ID,
            "location": location,
            "message": message,
            "data": dict(data),
            "timestamp": int(time.time() * 1000),
        }
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(payload, default=str) + "\n")
    except Exception:
        pass
