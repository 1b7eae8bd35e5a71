import datetime as dt
from types import SimpleNamespace

import pytest

from admin_panel.datatable.presentation import EMPTY_VALUE, PresentationService
from admin_panel.datatable.validation import ValidationService
from admin_panel.utils.locale import reset_locale, set_locale


@pytest.fixture
def presentation():
    return PresentationService(ValidationService())


@pytest.fixture
def spanish():
    token = set_locale("es")
    yield
    reset_locale(token)


def _user(**kwargs):
    defaults = {"name": "Alice", "roles": [], "country": None, "created_at": None}
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def test_direct_value_is_returned_unchanged(presentation):
    assert presentation.get_formatted_value(_user(), "name") == "Alice"
    assert presentation.compute_model_property_value(SimpleNamespace(total=7), "total") == 7


@pytest.mark.parametrize("value", [None, "", "0", 0, False, [], {}])
def test_empty_values_render_as_dash(presentation, value):
    assert presentation.compute_model_property_value(SimpleNamespace(field=value), "field") == EMPTY_VALUE


def test_missing_attribute_renders_as_dash(presentation):
    assert presentation.compute_model_property_value(SimpleNamespace(), "ghost") == EMPTY_VALUE


def test_dates_use_long_localized_format(presentation):
    created = dt.datetime(2025, 4, 19, 10, 30, tzinfo=dt.timezone.utc)
    assert presentation.get_formatted_value(_user(created_at=created), "created_at") == "April 19, 2025"
    assert presentation.compute_model_property_value(SimpleNamespace(day=dt.date(2025, 4, 19)), "day") == "April 19, 2025"


def test_dates_in_spanish(presentation, spanish):
    created = dt.datetime(2025, 4, 19, 10, 30)
    assert presentation.get_formatted_value(_user(created_at=created), "created_at") == "19 de abril de 2025"


def test_unknown_locale_falls_back_to_iso_date(presentation, caplog):
    token = set_locale("xx_invalid")
    try:
        with caplog.at_level("WARNING"):
            value = presentation.format_date_value(dt.datetime(2025, 4, 19, 8, 0))
    finally:
        reset_locale(token)
    assert value == "2025-04-19"
    assert "Could not format date" in caplog.text


def test_collection_relation_values_are_joined(presentation):
    user = _user(roles=[SimpleNamespace(name="admin"), SimpleNamespace(name=""), SimpleNamespace(name="owner")])
    assert presentation.get_formatted_value(user, "roles.name") == "admin, owner"
    assert presentation.get_formatted_value(_user(), "roles.name") == ""


def test_nested_collections_are_flattened(presentation):
    role_a = SimpleNamespace(permissions=[SimpleNamespace(name="view user"), SimpleNamespace(name="create user")])
    role_b = SimpleNamespace(permissions=[SimpleNamespace(name="delete user")])
    user = _user(roles=[role_a, role_b])
    assert presentation.get_formatted_value(user, "roles.permissions.name") == "view user, create user, delete user"


def test_single_relation_uses_property_formatting(presentation):
    country = SimpleNamespace(name="Spain", phone_code=None)
    user = _user(country=country)
    assert presentation.get_formatted_value(user, "country.name") == "Spain"
    assert presentation.get_formatted_value(user, "country.phone_code") == EMPTY_VALUE


def test_missing_relation_returns_none(presentation):
    assert presentation.get_formatted_value(_user(), "country.name") is None


def test_country_name_accessor_follows_locale(presentation, country_factory, spanish):
    country = country_factory("Germany", "Alemania")
    assert presentation.get_formatted_value(SimpleNamespace(country=country), "country.name") == "Alemania"
