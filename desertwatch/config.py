"""
Unified configuration: .env locally, Databricks secrets in production.

- Local: set OPENAI_API_KEY (and optionally STATE_DB_PATH) in .env (python-dotenv loads it).
- Databricks: set DATABRICKS_SECRET_SCOPE; store OPENAI_API_KEY in that secret scope.
  .env is not loaded when DATABRICKS_SECRET_SCOPE is set.
"""

import os
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv


def _get(key: str, default: str | None = None) -> str | None:
    """Read config: Databricks secrets first (if scope set), then os.environ."""
    secret_scope = os.getenv("DATABRICKS_SECRET_SCOPE")
    if secret_scope:
        try:
            from dbutils import secrets  # type: ignore
            return secrets.get(scope=secret_scope, key=key)
        except ImportError:
            pass
    return os.getenv(key, default)


def _load_dotenv_local() -> None:
    """Load .env only when running locally (no DATABRICKS_SECRET_SCOPE)."""
    if os.getenv("DATABRICKS_SECRET_SCOPE"):
        return
    root = Path(__file__).resolve().parent.parent
    env_file = root / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=True)


def _float_pair(raw: str) -> Tuple[float, float]:
    lat, lon = (float(x) for x in raw.split(","))
    return lat, lon


_load_dotenv_local()

# ── Paths ───────────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(os.getenv("PROJECT_ROOT", str(Path(__file__).resolve().parent.parent)))
STATE_DB_PATH: Path = Path(os.getenv("STATE_DB_PATH", str(PROJECT_ROOT / "data" / "session.db")))

# ── OpenAI (portable: .env or Databricks secret) ─────────────────────────────
OPENAI_API_KEY: str = (_get("OPENAI_API_KEY") or "").strip()
OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
# Model used together with the hosted web_search tool (Responses API)
SEARCH_MODEL: str = os.getenv("SEARCH_MODEL", "gpt-4o-mini")

# ── Workflow ────────────────────────────────────────────────────────────────
DISCOVERY_TOPIC: str = os.getenv(
    "DISCOVERY_TOPIC",
    "Health infrastructure challenges, equipment status, and hospital news in Ghana 2024-2025",
)
# Seconds between consecutive model calls. 0 disables the throttle.
LLM_MIN_GAP_SECONDS: float = float(os.getenv("LLM_MIN_GAP_SECONDS", "0"))

# ── Map ─────────────────────────────────────────────────────────────────────
SEVERITY_THRESHOLD: int = int(os.getenv("SEVERITY_THRESHOLD", "85"))
MAP_CENTER: Tuple[float, float] = _float_pair(os.getenv("MAP_CENTER", "7.9465,-1.0232"))
MAP_ZOOM: int = int(os.getenv("MAP_ZOOM", "7"))
