import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env variables
load_dotenv()


def _positive_int(name: str, default: int) -> int:
    """Reads an integer environment variable that must be >= 1."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return value


# --- MongoDB ---
MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "cursor_stream")

# Documents requested per cursor batch
CURSOR_BATCH_SIZE = _positive_int("CURSOR_BATCH_SIZE", 1000)

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Jobs ---
EXPORT_DIR = Path(os.getenv("EXPORT_DIR", "exports"))
