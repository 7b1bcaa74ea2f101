"""Tests for LocaleRegistry."""

import logging
import threading

import pytest

from src.locale_registry.core.errors import MalformedBundle, UnknownLocale
from src.locale_registry.core.resolver import LocaleRegistry
from src.locale_registry.core.resource_table import LocaleBundle


class TestRegistration:
    """Test installing, replacing and removing bundles."""

    def test_new_registry_is_empty(self):
        registry = LocaleRegistry()
        assert registry.locales == ()
        assert registry.active_locale == "zh"
        assert registry.fallback_locale == "en"

    def test_load_registers_bundle(self):
        registry = LocaleRegistry()
        bundle = registry.load("zh", {"menu": {"oneterm": "堡垒机"}})
        assert registry.locales == ("zh",)
        assert registry.bundle("zh") is bundle

    def test_register_prebuilt_bundle(self):
        registry = LocaleRegistry()
        bundle = LocaleBundle.load("en", {"connect": "Connections"})
        registry.register(bundle)
        assert registry.bundle("en") is bundle

    def test_reload_replaces_wholesale(self):
        registry = LocaleRegistry()
        registry.load("zh", {"log": {"time": "时间", "type": "资源类型"}})
        registry.load("zh", {"log": {"time": "日期"}})

        assert registry.resolve("log.time", fallback_locale=None) == "日期"
        assert registry.resolve("log.type", fallback_locale=None) == "[MISSING: log.type]"

    def test_malformed_reload_keeps_previous_bundle(self):
        """Test that a failed load leaves the old bundle active."""
        registry = LocaleRegistry()
        original = registry.load("zh", {"menu": {"oneterm": "堡垒机"}})

        with pytest.raises(MalformedBundle):
            registry.load("zh", {"menu": {"oneterm": 42}})

        assert registry.bundle("zh") is original
        assert registry.resolve("menu.oneterm") == "堡垒机"

    def test_malformed_first_load_installs_nothing(self):
        registry = LocaleRegistry()
        with pytest.raises(MalformedBundle):
            registry.load("zh", {"menu": None})
        assert registry.locales == ()

    def test_bundle_unknown_locale(self):
        registry = LocaleRegistry()
        with pytest.raises(UnknownLocale) as exc_info:
            registry.bundle("fr")
        assert exc_info.value.locale == "fr"

    def test_bundle_defaults_to_active(self, registry):
        assert registry.bundle().locale == "zh"

    def test_unregister(self, registry):
        registry.unregister("en")
        assert registry.locales == ("zh",)

    def test_unregister_unknown(self, registry):
        with pytest.raises(UnknownLocale):
            registry.unregister("fr")

    def test_unregister_active_refused(self, registry):
        with pytest.raises(ValueError, match="active"):
            registry.unregister("zh")
        assert "zh" in registry.locales

    def test_invalid_missing_template(self):
        with pytest.raises(ValueError):
            LocaleRegistry(missing_template="missing!")

    def test_missing_template_with_other_fields(self):
        with pytest.raises(ValueError):
            LocaleRegistry(missing_template="{lang}: {key}")


class TestActiveLocale:
    """Test switching the active locale."""

    def test_set_active_locale(self, registry):
        registry.set_active_locale("en")
        assert registry.active_locale == "en"
        assert registry.resolve("menu.oneterm") == "Bastion Host"

    def test_set_unknown_locale_fails(self, registry):
        """Test switching to an unregistered locale keeps the current one."""
        with pytest.raises(UnknownLocale):
            registry.set_active_locale("fr")

        assert registry.active_locale == "zh"
        assert registry.resolve("menu.oneterm") == "堡垒机"

    def test_unknown_locale_is_lookup_error(self, registry):
        with pytest.raises(LookupError):
            registry.set_active_locale("fr")

    def test_switch_back_and_forth(self, registry):
        registry.set_active_locale("en")
        registry.set_active_locale("zh")
        assert registry.resolve("connect") == "连接数"

    def test_concurrent_switch_readers_see_whole_bundles(self, registry):
        """Readers always get one locale's value, never a mix or a failure."""
        expected = {"堡垒机", "Bastion Host"}
        seen: set[str] = set()
        errors: list[Exception] = []
        stop = threading.Event()

        def reader():
            try:
                while not stop.is_set():
                    seen.add(registry.resolve("menu.oneterm"))
            except Exception as exc:  # pragma: no cover
                errors.append(exc)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for i in range(200):
            registry.set_active_locale("en" if i % 2 == 0 else "zh")
        stop.set()
        for t in threads:
            t.join()

        assert not errors
        assert seen <= expected


class TestResolve:
    """Test key resolution with fallback."""

    def test_lookup_fidelity(self, registry):
        """resolve() returns exactly what the active bundle stores."""
        bundle = registry.bundle("zh")
        for key in bundle.keys():
            assert registry.resolve(key) == bundle.get(key)

    def test_concrete_oneterm(self):
        registry = LocaleRegistry()
        registry.load("zh", {"menu": {"oneterm": "堡垒机"}})
        assert registry.resolve("menu.oneterm") == "堡垒机"

    def test_explicit_locale(self, registry):
        assert registry.resolve("guacamole.connected", locale="en") == "Connected"

    def test_segments_key(self, registry):
        assert registry.resolve(("sessionTable", "disconnectSuccess")) == "断开成功"

    def test_fallback_locale_used(self):
        registry = LocaleRegistry(default_locale="zh", fallback_locale="en")
        registry.load("zh", {"log": {"time": "时间"}})
        registry.load("en", {"log": {"time": "Time", "type": "Resource Type"}})

        assert registry.resolve("log.type") == "Resource Type"

    def test_per_call_fallback(self):
        registry = LocaleRegistry(default_locale="zh", fallback_locale=None)
        registry.load("zh", {"log": {"time": "时间"}})
        registry.load("en", {"log": {"type": "Resource Type"}})

        assert registry.resolve("log.type") == "[MISSING: log.type]"
        assert registry.resolve("log.type", fallback_locale="en") == "Resource Type"

    def test_fallback_disabled_per_call(self):
        registry = LocaleRegistry()
        registry.load("zh", {})
        registry.load("en", {"log": {"type": "Resource Type"}})

        assert registry.resolve("log.type", fallback_locale=None) == "[MISSING: log.type]"

    def test_missing_everywhere_returns_placeholder(self, registry):
        result = registry.resolve("log.missing")
        assert result == "[MISSING: log.missing]"

    def test_placeholder_for_segments(self, registry):
        assert registry.resolve(("log", "missing")) == "[MISSING: log.missing]"

    @pytest.mark.parametrize("key", ["", "menu", "connect.more", "a.b.c.d"])
    def test_placeholder_never_empty(self, registry, key):
        result = registry.resolve(key)
        assert result
        assert key in result

    def test_unregistered_locale_falls_back(self, registry):
        assert registry.resolve("menu.oneterm", locale="fr") == "Bastion Host"

    @pytest.mark.parametrize("key", [None, 42, ["menu", 1], [["menu"]]])
    def test_invalid_key_type_never_raises(self, registry, key):
        result = registry.resolve(key)
        assert result.startswith("[MISSING: ")
        assert registry.render(key, sessionId="s-1").startswith("[MISSING: ")
        assert not registry.has_key(key)

    @pytest.mark.parametrize("locale", [["zh"], {"zh": 1}, 3])
    def test_invalid_locale_type_falls_back(self, registry, locale):
        assert registry.resolve("menu.oneterm", locale=locale) == "Bastion Host"
        assert not registry.has_key("menu.oneterm", locale=locale)

    def test_invalid_locale_type_without_fallback(self, registry):
        result = registry.resolve("menu.oneterm", locale=["zh"], fallback_locale=None)
        assert result == "[MISSING: menu.oneterm]"

    def test_empty_registry_never_raises(self):
        registry = LocaleRegistry()
        assert registry.resolve("menu.oneterm") == "[MISSING: menu.oneterm]"

    def test_custom_placeholder(self):
        registry = LocaleRegistry(missing_template="??{key}??")
        assert registry.resolve("log.missing") == "??log.missing??"

    def test_missing_key_is_logged(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            registry.resolve("log.missing")
        assert "log.missing" in caplog.text

    def test_has_key(self, registry):
        assert registry.has_key("menu.oneterm")
        assert not registry.has_key("menu.nope")
        assert not registry.has_key("menu.oneterm", locale="fr")

    def test_has_key_ignores_fallback(self):
        registry = LocaleRegistry()
        registry.load("zh", {})
        registry.load("en", {"connect": "Connections"})
        assert not registry.has_key("connect")
        assert registry.resolve("connect") == "Connections"


class TestRender:
    """Test resolving with template data."""

    @pytest.fixture
    def notice_registry(self):
        registry = LocaleRegistry()
        registry.load("zh", {"notice": {"sessionEnd": "会话 {{ sessionId }} 已结束"}})
        registry.load("en", {"notice": {"sessionEnd": "Session {{ sessionId }} ended"}})
        return registry

    def test_render_with_data(self, notice_registry):
        assert notice_registry.render("notice.sessionEnd", sessionId="s-1") == "会话 s-1 已结束"

    def test_render_explicit_locale(self, notice_registry):
        result = notice_registry.render("notice.sessionEnd", locale="en", sessionId="s-1")
        assert result == "Session s-1 ended"

    def test_render_missing_data_returns_raw_text(self, notice_registry):
        assert notice_registry.render("notice.sessionEnd") == "会话 {{ sessionId }} 已结束"

    def test_render_missing_key(self, notice_registry):
        assert notice_registry.render("notice.nope", sessionId="x") == "[MISSING: notice.nope]"

    def test_render_plain_text_unchanged(self, registry):
        text = registry.render("assetList.gatewaySecretkeyTip")
        assert text == registry.resolve("assetList.gatewaySecretkeyTip")


class TestNegotiate:
    """Test picking a locale for a request."""

    def test_explicit_lang_wins(self, registry):
        assert registry.negotiate(lang="en", accept_language="zh-CN,zh;q=0.9") == "en"

    def test_accept_language(self, registry):
        assert registry.negotiate(accept_language="en-US,en;q=0.9,zh;q=0.8") == "en"

    def test_region_matches_language(self, registry):
        assert registry.negotiate(lang="zh-CN") == "zh"

    def test_nothing_matches_uses_active(self, registry):
        registry.set_active_locale("en")
        assert registry.negotiate(lang="fr", accept_language="de,ja") == "en"


class TestCheckCompatibility:
    """Test key-set comparison across locales."""

    def test_console_locales_compatible(self, registry):
        diffs = registry.check_compatibility()
        assert len(diffs) == 1
        assert diffs[0].reference == "zh"
        assert diffs[0].candidate == "en"
        assert diffs[0].is_compatible

    def test_divergent_locales(self):
        registry = LocaleRegistry()
        registry.load("zh", {"log": {"time": "时间", "type": "资源类型"}})
        registry.load("en", {"log": {"time": "Time", "extra": "Extra"}})

        (diff,) = registry.check_compatibility()
        assert diff.missing == ("log.type",)
        assert diff.extra == ("log.extra",)

    def test_explicit_reference(self, registry):
        (diff,) = registry.check_compatibility("en")
        assert diff.reference == "en"
        assert diff.candidate == "zh"

    def test_unknown_reference(self, registry):
        with pytest.raises(UnknownLocale):
            registry.check_compatibility("fr")
