"""Tests for the persisted settings store, the settings bridge and config loading."""

from __future__ import annotations

import json

import pytest

from search_expander.adapters.google import GoogleAdapter
from search_expander.config import ExpansionConfig, migrate_config
from search_expander.document import get_style_property
from search_expander.engines.settings_bridge import SettingsBridge
from search_expander.ui.notifier import MESSAGE_ID, STATS_ID
from search_expander.utils.storage import JsonFileStore, MemoryStore, StorageChange


class TestMemoryStore:

    def test_get_omits_absent_keys(self) -> None:
        store = MemoryStore({"enabled": False})
        assert store.get(["enabled", "maxPages"]) == {"enabled": False}

    def test_listener_sees_only_changed_keys(self) -> None:
        store = MemoryStore({"enabled": True, "maxPages": 5})
        seen = []
        store.add_listener(lambda changes, area: seen.append((changes, area)))

        store.set({"enabled": True, "maxPages": 8})
        store.set({"maxPages": 8})

        assert seen == [({"maxPages": StorageChange(5, 8)}, "sync")]

    def test_remove_listener(self) -> None:
        store = MemoryStore()
        seen = []

        def listener(changes, area):
            seen.append(changes)

        store.add_listener(listener)
        store.remove_listener(listener)
        store.set({"enabled": False})
        assert seen == []


class TestJsonFileStore:

    def test_persists_between_instances(self, tmp_path) -> None:
        path = tmp_path / "settings" / "store.json"
        JsonFileStore(path).set({"enabled": False, "maxPages": 7})

        assert json.loads(path.read_text(encoding="utf-8")) == {"enabled": False, "maxPages": 7}
        assert JsonFileStore(path).get(["enabled", "maxPages"]) == {"enabled": False, "maxPages": 7}

    def test_missing_file_is_empty(self, tmp_path) -> None:
        assert JsonFileStore(tmp_path / "none.json").get(["enabled"]) == {}

    def test_corrupt_file_is_empty(self, tmp_path, caplog) -> None:
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        assert JsonFileStore(path).get(["enabled"]) == {}
        assert "Ignoring unreadable settings file" in caplog.text


class TestSettingsBridgeLoad:

    def test_defaults_when_store_is_empty(self) -> None:
        config = SettingsBridge(MemoryStore(), ExpansionConfig()).load()
        assert config.enabled is True
        assert config.max_pages == 5

    def test_only_explicit_false_disables(self) -> None:
        assert SettingsBridge(MemoryStore({"enabled": None}), ExpansionConfig()).load().enabled is True
        assert SettingsBridge(MemoryStore({"enabled": False}), ExpansionConfig()).load().enabled is False

    def test_stored_page_cap(self) -> None:
        assert SettingsBridge(MemoryStore({"maxPages": 9}), ExpansionConfig()).load().max_pages == 9
        assert SettingsBridge(MemoryStore({"maxPages": 0}), ExpansionConfig()).load().max_pages == 5

    def test_falsy_page_cap_uses_default(self) -> None:
        for value in (0, None, ""):
            config = ExpansionConfig(max_pages=9)
            assert SettingsBridge(MemoryStore({"maxPages": value}), config).load().max_pages == 5

        assert SettingsBridge(MemoryStore(), ExpansionConfig(max_pages=9)).load().max_pages == 9


class TestSettingsBridgeChanges:

    @pytest.fixture
    def wired(self, make_harness):
        h = make_harness()
        store = MemoryStore()
        bridge = SettingsBridge(store, h.config)
        bridge.subscribe(GoogleAdapter(), h.view, h.notifier)
        return h, store, bridge

    def _message(self, h) -> str:
        return h.view.get_element_by_id(MESSAGE_ID).get_text()

    def test_disable_restores_native_pager(self, wired) -> None:
        h, store, _ = wired
        GoogleAdapter().hide_native_pagination(h.view.soup)
        h.notifier.refresh_stats()

        store.set({"enabled": False})

        assert h.config.enabled is False
        assert "style" not in h.view.soup.select_one("#foot").attrs
        assert get_style_property(h.view.get_element_by_id(STATS_ID), "display") == "none"
        assert self._message(h) == "Auto expand disabled"

    def test_enable_hides_native_pager(self, wired) -> None:
        h, store, _ = wired
        store.set({"enabled": False})
        store.set({"enabled": True})

        assert h.config.enabled is True
        assert get_style_property(h.view.soup.select_one("#foot"), "display") == "none"
        assert get_style_property(h.view.get_element_by_id(STATS_ID), "display") == "flex"
        assert self._message(h) == "Auto expand enabled"

    def test_toggle_preserves_engine_state(self, wired) -> None:
        h, store, _ = wired
        h.state.current_page = 3
        h.state.total_results = 30
        h.state.loaded_urls.add("u2")
        h.state.loaded_urls.add("u3")

        store.set({"enabled": False})
        store.set({"enabled": True})

        assert h.state.current_page == 3
        assert h.state.total_results == 30
        assert h.state.loaded_urls.urls() == ["u2", "u3"]

    def test_max_pages_change(self, wired) -> None:
        h, store, _ = wired
        store.set({"maxPages": 12})
        assert h.config.max_pages == 12
        assert self._message(h) == "Max pages set to 12"

    def test_other_areas_ignored(self, wired) -> None:
        h, _, bridge = wired
        bridge.on_changed({"enabled": StorageChange(True, False)}, "local")
        assert h.config.enabled is True

    def test_unsubscribe(self, wired) -> None:
        h, store, bridge = wired
        bridge.unsubscribe()
        store.set({"enabled": False})
        assert h.config.enabled is True


class TestExpansionConfig:

    def test_defaults(self) -> None:
        config = ExpansionConfig()
        assert (config.max_pages, config.loading_delay_ms, config.scroll_threshold_px, config.enabled) == (
            5, 500, 300, True,
        )
        assert config.loading_delay == 0.5

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("EXPANDER_MAX_PAGES", "8")
        monkeypatch.setenv("EXPANDER_LOADING_DELAY_MS", "0")
        monkeypatch.setenv("EXPANDER_ENABLED", "off")
        monkeypatch.setenv("EXPANDER_EXTRA_ADAPTERS", "a.b:C, d.e:F")
        config = ExpansionConfig.from_env()
        assert config.max_pages == 8
        assert config.loading_delay_ms == 0
        assert config.enabled is False
        assert config.extra_adapters == ["a.b:C", "d.e:F"]

    def test_from_file_migrates_store_keys(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"schema_version": 0, "maxPages": 3, "scrollThreshold": 50}), encoding="utf-8")
        config = ExpansionConfig.from_file(path)
        assert config.max_pages == 3
        assert config.scroll_threshold_px == 50
        assert config.schema_version == 1

    def test_migrate_is_pure(self) -> None:
        raw = {"maxPages": 2}
        migrate_config(raw)
        assert raw == {"maxPages": 2}

    @pytest.mark.parametrize(
        "field, value",
        [("max_pages", 0), ("loading_delay_ms", -1), ("scroll_threshold_px", -5)],
    )
    def test_validate(self, field, value) -> None:
        config = ExpansionConfig(**{field: value})
        with pytest.raises(ValueError, match=field):
            config.validate()
