import pytest

from admin_panel.utils.locale import get_locale, negotiate_locale, reset_locale, set_locale
from admin_panel.utils.settings import get_settings, refresh_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.locale == "en"
    assert settings.supported_locales == ("en", "es")
    assert settings.table_per_page == 15
    assert settings.table_max_per_page == 100


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("APP_LOCALE", "ES")
    monkeypatch.setenv("APP_SUPPORTED_LOCALES", "en, fr")
    monkeypatch.setenv("DATATABLE_PER_PAGE", "30")
    monkeypatch.setenv("DATATABLE_MAX_PER_PAGE", "20")
    refresh_settings()

    settings = get_settings()
    assert settings.locale == "es"
    # the default locale is always supported
    assert settings.supported_locales == ("es", "en", "fr")
    assert settings.table_per_page == 30
    # the maximum never drops below the default page size
    assert settings.table_max_per_page == 30


@pytest.mark.parametrize("raw", ["abc", "0", "-3", " "])
def test_invalid_page_sizes_use_default(monkeypatch, raw):
    monkeypatch.setenv("DATATABLE_PER_PAGE", raw)
    refresh_settings()
    assert get_settings().table_per_page == 15


def test_settings_are_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("DATATABLE_PER_PAGE", "40")
    assert get_settings() is first
    refresh_settings()
    assert get_settings().table_per_page == 40


def test_locale_context_overrides_default():
    assert get_locale() == "en"
    token = set_locale("ES")
    try:
        assert get_locale() == "es"
    finally:
        reset_locale(token)
    assert get_locale() == "en"


def test_negotiate_locale():
    assert negotiate_locale("es", None) == "es"
    assert negotiate_locale(None, "es-MX,es;q=0.9,en;q=0.8") == "es"
    assert negotiate_locale(None, "fr-FR, en-US;q=0.5") == "en"
    assert negotiate_locale("de", "pt-BR") is None
    assert negotiate_locale(None, None) is None
