from __future__ import annotations

import sqlite3

import pytest

from desertwatch.store import DEMO_USER, PreferenceStore


class TestPreferenceStore:
    def test_defaults(self, store):
        assert store.get_user() is None
        assert store.get_theme() == "dark"

    def test_creates_parent_directory(self, tmp_path):
        PreferenceStore(tmp_path / "a" / "b" / "prefs.db")
        assert (tmp_path / "a" / "b" / "prefs.db").exists()

    def test_login_logout(self, store):
        assert store.login_demo_user() == DEMO_USER
        assert store.get_user().email == "operator@vip.layer"
        assert '"email"' in store.get("vip_user")
        store.logout()
        assert store.get_user() is None

    def test_theme_persists_across_instances(self, store):
        store.set_theme("light")
        assert PreferenceStore(store.db_path).get_theme() == "light"

    def test_rejects_unknown_theme(self, store):
        with pytest.raises(ValueError):
            store.set_theme("sepia")

    def test_garbage_theme_falls_back_to_dark(self, store):
        store.set("theme", "sepia")
        assert store.get_theme() == "dark"

    def test_connections_closed_after_each_call(self, store, monkeypatch):
        opened = []
        real_get_conn = store._get_conn

        def tracking_conn():
            conn = real_get_conn()
            opened.append(conn)
            return conn

        monkeypatch.setattr(store, "_get_conn", tracking_conn)
        store.set_theme("light")
        store.get_theme()
        store.logout()

        assert len(opened) == 3
        for conn in opened:
            with pytest.raises(sqlite3.ProgrammingError):
                conn.execute("SELECT 1")
