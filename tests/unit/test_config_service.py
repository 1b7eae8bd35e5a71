from admin_panel.datatable.config import ConfigService
from admin_panel.utils.locale import reset_locale, set_locale


COLUMN_MAP = {
    "id": {"sortable": True},
    "name": {"searchable": True, "sortable": "yes"},
    "email": {"searchable": 1},
    "country.name": {
        "searchable": True,
        "sortable": True,
        "search_columns": ["en_name", "es_name"],
        "sort_column": ["en_name", "es_name"],
    },
    "roles.name": {"sortable": True, "sort_column": "name"},
    "broken": "not-a-dict",
}


def test_extract_configured_fields_requires_strict_true():
    config = ConfigService()
    assert config.extract_configured_fields(COLUMN_MAP, "searchable") == ["name", "country.name"]
    assert config.extract_configured_fields(COLUMN_MAP, "sortable") == ["id", "country.name", "roles.name"]
    assert config.extract_configured_fields({}, "sortable") == []


def test_search_columns_default_to_property():
    config = ConfigService()
    assert config.get_search_columns_for_relation(COLUMN_MAP, "country.name", "name") == ["en_name", "es_name"]
    assert config.get_search_columns_for_relation(COLUMN_MAP, "roles.name", "name") == ["name"]
    assert config.get_search_columns_for_relation(COLUMN_MAP, "missing.field", "field") == ["field"]


def test_sorting_column_follows_locale():
    config = ConfigService()
    token = set_locale("es")
    try:
        assert config.get_sorting_column(COLUMN_MAP, "country.name", "name") == "es_name"
    finally:
        reset_locale(token)

    token = set_locale("en")
    try:
        assert config.get_sorting_column(COLUMN_MAP, "country.name", "name") == "en_name"
    finally:
        reset_locale(token)


def test_sorting_column_scalar_and_defaults():
    config = ConfigService()
    assert config.get_sorting_column(COLUMN_MAP, "roles.name", "fallback") == "name"
    assert config.get_sorting_column(COLUMN_MAP, "id", "id") == "id"
    assert config.get_sorting_column({"x.y": {"sort_column": []}}, "x.y", "y") == "y"
    token = set_locale("es")
    try:
        # single alternative is used for every locale
        assert config.get_sorting_column({"x.y": {"sort_column": ["only"]}}, "x.y", "y") == "only"
    finally:
        reset_locale(token)
