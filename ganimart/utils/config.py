"""Load and validate environment variables. Uses python-dotenv.

This module is intentionally thin and side-effect free except for loading `.env`.
Callers should use the accessor functions below rather than reading `os.environ`
directly, to keep environment handling consistent.
"""

from pathlib import Path

from dotenv import load_dotenv
import os


def _project_root() -> Path:
    """Resolve project root (the directory holding app.py)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Existing environment variables win over .env values.
    """
    env_path = _project_root() / ".env"
    load_dotenv(env_path, override=False)


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# --- Public config accessors ---

def data_dir() -> Path:
    """Optional: directory holding the durable store document. Default <root>/data."""
    val = get_optional("GANIMART_DATA_DIR", "")
    return Path(val) if val else _project_root() / "data"


def store_key() -> str:
    """Optional: durable key the store document is saved under. Default ganimart."""
    return get_optional("GANIMART_STORE_KEY", "ganimart")


def legacy_cart_url() -> str | None:
    """Optional: base URL of the legacy cart server exposing POST /cart/add."""
    val = get_optional("LEGACY_CART_URL", "")
    return val.rstrip("/") or None


def legacy_cart_timeout() -> int:
    """Optional: request timeout in seconds for the legacy cart endpoint. Default 10."""
    return get_optional_int("LEGACY_CART_TIMEOUT", 10)


def log_level() -> str:
    """Optional: logging level name. Default INFO."""
    return get_optional("LOG_LEVEL", "INFO").upper()


def project_root() -> Path:
    """Project root directory."""
    return _project_root()
