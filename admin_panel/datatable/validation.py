"""
Model and column-map validation for dynamic tables.

Everything here is answered from the SQLAlchemy mapper: which attributes a
model exposes, which relationships it declares and which physical columns its
table has. No database round trip is made.
"""
from __future__ import annotations

import importlib
import inspect as pyinspect
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.orm import RelationshipProperty

from admin_panel.db.models import Base

logger = logging.getLogger(__name__)


class InvalidModelError(ValueError):
    """Raised when a table is configured with something that is not a mapped model."""


class ValidationService:
    """Validates models, fields and relation chains used by a table."""

    # Column listings are per table and never change while the process runs
    _cached_table_columns: Dict[str, List[str]] = {}

    def __init__(self):
        self._cached_relations: Dict[str, RelationshipProperty] = {}

    @classmethod
    def clear_column_cache(cls) -> None:
        cls._cached_table_columns.clear()

    def validate_model(self, model_class) -> type:
        """Resolve ``model_class`` to a mapped model class.

        Accepts the class itself, a class name registered on ``Base`` or a
        dotted import path.

        Raises:
            InvalidModelError: If the target is not a mapped subclass of ``Base``.
        """
        try:
            model = self._resolve_model_class(model_class)
            if model is None or not (pyinspect.isclass(model) and issubclass(model, Base) and model is not Base):
                raise InvalidModelError(
                    f"Invalid class. '{model_class}' must be a mapped SQLAlchemy model."
                )
            return model
        except InvalidModelError as e:
            logger.error(str(e))
            raise

    def _resolve_model_class(self, model_class):
        if pyinspect.isclass(model_class):
            return model_class
        if not isinstance(model_class, str) or not model_class.strip():
            return None
        name = model_class.strip()
        for mapper in Base.registry.mappers:
            cls = mapper.class_
            if name in (cls.__name__, f"{cls.__module__}.{cls.__name__}"):
                return cls
        module_name, _, attr = name.rpartition(".")
        if not module_name:
            return None
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return None
        return getattr(module, attr, None)

    def validate_column_map(self, model, column_map: Dict[str, Any]) -> Dict[str, Any]:
        """Return the column map without the fields the model cannot resolve."""
        return {
            field: config
            for field, config in column_map.items()
            if self.validate_model_relation_or_property(model, field)
        }

    def validate_model_relation_or_property(self, model, field: str) -> bool:
        """Check whether ``field`` is a property or a valid relation path of the model.

        Dotted fields (``relation.property``) are valid when every relation of
        the chain exists; the trailing property is not checked.
        """
        if "." in field:
            return self.validate_nested_relations(model, self.get_relation_parts(field))

        mapper = sa_inspect(model)
        if field in mapper.all_orm_descriptors.keys():
            return True
        if isinstance(pyinspect.getattr_static(model, field, None), property):
            return True
        return field in self.get_table_columns(model)

    def validate_nested_relations(self, model, relations: List[str]) -> bool:
        current_model = model
        for relation_name in relations:
            relation = self.get_relation_instance(current_model, relation_name)
            if relation is None:
                return False
            current_model = relation.mapper.class_
        return True

    def get_relation_instance(self, model, relation_name: str) -> Optional[RelationshipProperty]:
        """Return the relationship named ``relation_name`` on ``model`` or None (cached)."""
        cache_key = f"{model.__name__}::{relation_name}"
        cached = self._cached_relations.get(cache_key)
        if cached is not None:
            return cached

        try:
            relation = sa_inspect(model).relationships.get(relation_name)
        except (NoInspectionAvailable, SQLAlchemyError) as e:
            logger.error("Error resolving relation %s on %s: %s", relation_name, model.__name__, e)
            return None

        if relation is None:
            return None

        self._cached_relations[cache_key] = relation
        return relation

    def get_table_columns(self, model) -> List[str]:
        """Return the physical column names of the model's table (cached per table)."""
        table = sa_inspect(model).local_table
        if table.name not in self._cached_table_columns:
            self._cached_table_columns[table.name] = [column.name for column in table.columns]
        return self._cached_table_columns[table.name]

    def get_primary_key_name(self, model) -> str:
        return sa_inspect(model).primary_key[0].name

    def validate_sort_column(self, column: str, model) -> str:
        """Return ``column`` if the table has it, otherwise the primary key name."""
        if column not in self.get_table_columns(model):
            table = sa_inspect(model).local_table.name
            primary_key = self.get_primary_key_name(model)
            logger.warning(
                "Sort column '%s' not found in table %s. Using primary key '%s'.",
                column, table, primary_key,
            )
            return primary_key
        return column

    def get_relation_parts(self, field: str) -> List[str]:
        """``'relation1.relation2.property'`` -> ``['relation1', 'relation2']``."""
        if "." not in field:
            return []
        return field.split(".")[:-1]
