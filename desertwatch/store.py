"""
Session preferences in a tiny SQLite key-value table.

Two string keys are used:
    vip_user   JSON of the signed-in VipUser (absent when signed out)
    theme      "dark" | "light" (absent means "dark")
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from desertwatch.config import STATE_DB_PATH
from desertwatch.models import Theme, VipUser

logger = logging.getLogger(__name__)

USER_KEY = "vip_user"
THEME_KEY = "theme"
DEFAULT_THEME: Theme = "dark"

DEMO_USER = VipUser(email="operator@vip.layer", name="Verified Operator", role="Federated Analyst")


class PreferenceStore:
    def __init__(self, db_path: Path | str = STATE_DB_PATH) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._write("CREATE TABLE IF NOT EXISTS preferences (key TEXT PRIMARY KEY, value TEXT NOT NULL)")

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _write(self, sql: str, params: tuple = ()) -> None:
        conn = self._get_conn()
        try:
            conn.execute(sql, params)
            conn.commit()
        finally:
            conn.close()

    # ── raw key-value ───────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self._write(
            "INSERT INTO preferences (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    def delete(self, key: str) -> None:
        self._write("DELETE FROM preferences WHERE key = ?", (key,))

    # ── typed accessors ─────────────────────────────────────────────────────

    def get_user(self) -> Optional[VipUser]:
        raw = self.get(USER_KEY)
        return VipUser.model_validate_json(raw) if raw else None

    def login_demo_user(self) -> VipUser:
        """Mock sign-in: always succeeds as the fixed demo operator."""
        self.set(USER_KEY, DEMO_USER.model_dump_json(by_alias=True))
        logger.info(f"Signed in as {DEMO_USER.email}")
        return DEMO_USER

    def logout(self) -> None:
        self.delete(USER_KEY)
        logger.info("Signed out")

    def get_theme(self) -> Theme:
        raw = self.get(THEME_KEY)
        return raw if raw in ("dark", "light") else DEFAULT_THEME

    def set_theme(self, theme: Theme) -> None:
        if theme not in ("dark", "light"):
            raise ValueError(f"Unknown theme: {theme!r}")
        self.set(THEME_KEY, theme)
