from enum import Enum


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"

# Local development backend (wrangler dev default port)
DEFAULT_BACKEND_URL = "http://127.0.0.1:8787"

# -------------------------
# Backend endpoint paths
# -------------------------

HISTORY_PATH = "/history"
GENERATE_PATH = "/nl2sql"
EXECUTE_PATH = "/execsql"
PING_PATH = "/ping"
