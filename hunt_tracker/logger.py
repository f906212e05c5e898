import logging
import os
import json
from logging.handlers import RotatingFileHandler
from typing import Dict, Any

LOGGER_NAME = "HuntTracker"
LOG_FILE_NAME = "hunt_tracker.jsonl"

_DEFAULT_CONTEXT = {"session_id": "startup", "phase": "init"}

# Attached to every JSON line. The tracker updates it as sessions start and stop.
_LOG_CONTEXT: Dict[str, Any] = dict(_DEFAULT_CONTEXT)

def update_log_context(key: str, value: Any):
    _LOG_CONTEXT[key] = value

def get_log_context() -> Dict[str, Any]:
    return _LOG_CONTEXT.copy()

def reset_log_context():
    _LOG_CONTEXT.clear()
    _LOG_CONTEXT.update(_DEFAULT_CONTEXT)

class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, for tools/scripts that replay a hunt from its log.
    Snapshots and records travel in extra={'data': ...}.
    """
    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "context": get_log_context()
        }

        payload = getattr(record, 'data', None)
        if payload is not None:
            entry['data'] = payload

        if record.levelno >= logging.ERROR:
            entry["where"] = f"{record.filename}:{record.lineno} ({record.funcName})"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Dataclass payloads (records, snapshots) fall back to str()
        return json.dumps(entry, default=str)

def _log_dir() -> str:
    return os.environ.get("HUNT_TRACKER_LOG_DIR") or os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

def _console_level() -> int:
    name = os.environ.get("HUNT_TRACKER_LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)

def setup_logger():
    """
    Human readable lines on the console (INFO unless HUNT_TRACKER_LOG_LEVEL says otherwise),
    every DEBUG detail as JSON in hunt_tracker.jsonl.
    """
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(logging.DEBUG)

    # Already configured (module re-import, tests)
    if log.handlers:
        return log

    console = logging.StreamHandler()
    console.setLevel(_console_level())
    console.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'))
    log.addHandler(console)

    log_dir = _log_dir()
    try:
        os.makedirs(log_dir, exist_ok=True)
        jsonl = RotatingFileHandler(os.path.join(log_dir, LOG_FILE_NAME),
                                    maxBytes=5*1024*1024, backupCount=3, encoding='utf-8')
    except OSError as e:
        log.warning(f"File logging disabled ({log_dir}): {e}")
    else:
        jsonl.setLevel(logging.DEBUG)
        jsonl.setFormatter(JSONFormatter())
        log.addHandler(jsonl)

    return log

logger = setup_logger()
