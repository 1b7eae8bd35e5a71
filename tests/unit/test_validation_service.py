import pytest

from admin_panel.datatable.validation import InvalidModelError, ValidationService
from admin_panel.db import models


@pytest.fixture
def validation():
    return ValidationService()


def test_validate_model_accepts_class_name_and_dotted_path(validation):
    assert validation.validate_model(models.User) is models.User
    assert validation.validate_model("User") is models.User
    assert validation.validate_model("admin_panel.db.models.countries.Country") is models.Country


@pytest.mark.parametrize("target", ["NotAModel", "", None, dict, "admin_panel.db.models.Base", "missing.module.Thing"])
def test_validate_model_rejects_non_models(validation, target):
    with pytest.raises(InvalidModelError):
        validation.validate_model(target)


def test_validate_model_logs_error(validation, caplog):
    with caplog.at_level("ERROR"):
        with pytest.raises(InvalidModelError):
            validation.validate_model("Nope")
    assert "must be a mapped SQLAlchemy model" in caplog.text


def test_validate_model_relation_or_property(validation):
    # columns, relationships and plain properties
    assert validation.validate_model_relation_or_property(models.User, "email")
    assert validation.validate_model_relation_or_property(models.User, "roles")
    assert validation.validate_model_relation_or_property(models.User, "role_names")
    assert validation.validate_model_relation_or_property(models.Country, "name")
    assert not validation.validate_model_relation_or_property(models.User, "nickname")


def test_nested_relations_only_check_the_relation_chain(validation):
    assert validation.validate_model_relation_or_property(models.User, "roles.permissions.name")
    # trailing property is not checked
    assert validation.validate_model_relation_or_property(models.User, "country.anything")
    assert not validation.validate_model_relation_or_property(models.User, "country.region.name")
    assert not validation.validate_model_relation_or_property(models.User, "teams.name")


def test_validate_column_map_drops_unknown_fields(validation):
    column_map = {
        "name": {"searchable": True},
        "roles.name": {"sortable": True},
        "ghost": {"searchable": True},
        "ghost_relation.name": {},
    }
    assert list(validation.validate_column_map(models.User, column_map)) == ["name", "roles.name"]


def test_get_relation_instance_is_cached(validation):
    relation = validation.get_relation_instance(models.User, "country")
    assert relation is not None
    assert relation.mapper.class_ is models.Country
    assert validation._cached_relations["User::country"] is relation
    assert validation.get_relation_instance(models.User, "country") is relation
    assert validation.get_relation_instance(models.User, "email") is None


def test_table_columns_and_primary_key(validation):
    ValidationService.clear_column_cache()
    columns = validation.get_table_columns(models.Country)
    assert columns == ["id", "es_name", "en_name", "iso_code", "phone_code"]
    assert "countries" in ValidationService._cached_table_columns
    assert validation.get_primary_key_name(models.Country) == "id"


def test_validate_sort_column_falls_back_to_primary_key(validation, caplog):
    assert validation.validate_sort_column("email", models.User) == "email"
    with caplog.at_level("WARNING"):
        assert validation.validate_sort_column("role_names", models.User) == "id"
    assert "Sort column 'role_names' not found in table users" in caplog.text


def test_get_relation_parts(validation):
    assert validation.get_relation_parts("a.b.c") == ["a", "b"]
    assert validation.get_relation_parts("country.name") == ["country"]
    assert validation.get_relation_parts("name") == []
