"""
Query construction for dynamic tables.

Builds a SQLAlchemy ``Query`` for a model from a column map: column
selection, eager loading of displayed relations, free-text search across
direct and related columns, and sorting across relation types.

Sorting strategies by the kind of the first relation of a dotted field:

- BelongsTo (many-to-one): LEFT OUTER JOIN chain, aliased ``sort_join_N``.
- HasRelation (one-to-many), ManyToMany (association table) and
  ThroughRelation (secondary is an entity table): correlated scalar subquery
  that walks the whole relation path and picks the first value in the
  requested direction.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect as sa_inspect, or_, select
from sqlalchemy.orm import Query, Session, aliased, load_only, selectinload
from sqlalchemy.orm.interfaces import MANYTOONE, ONETOMANY

from admin_panel.db.models import Base
from admin_panel.datatable.config import ConfigService
from admin_panel.datatable.validation import ValidationService

logger = logging.getLogger(__name__)

BELONGS_TO = "BelongsTo"
HAS_RELATION = "HasRelation"
MANY_TO_MANY = "ManyToMany"
THROUGH_RELATION = "ThroughRelation"
OTHER_RELATION = "Other"

SORT_DIRECTIONS = ("asc", "desc")


def _ordered(expression, direction: str):
    return expression.desc() if direction == "desc" else expression.asc()


class QueryService:

    def __init__(self, validation_service: ValidationService, config_service: ConfigService):
        self.validation_service = validation_service
        self.config_service = config_service

    def build_query(
        self,
        db: Session,
        model,
        column_map: Dict[str, Any],
        search: str,
        searchable_fields: List[str],
        sort_by: str,
        sortable_fields: List[str],
        sort_direction: str,
        like_pattern: str = "%",
    ) -> Query:
        """
        Build the main query of a dynamic table.

        Args:
            db: Database session
            model: Mapped model class
            column_map: Validated column configuration
            search: Free-text search term
            searchable_fields: Fields the term is matched against
            sort_by: Field to sort by
            sortable_fields: Fields sorting is allowed on
            sort_direction: 'asc' or 'desc'
            like_pattern: Wildcard wrapped around the term for LIKE matching

        Returns:
            Query with options, filters and ordering applied
        """
        query = db.query(model)
        table = sa_inspect(model).local_table
        direction = self.normalize_direction(sort_direction)
        primary_key = self.validation_service.get_primary_key_name(model)

        # Sorting through BelongsTo joins other tables; load every main column then
        if not self.needs_specific_columns_for_belongs_to_sort(model, sort_by, sortable_fields):
            attributes = [
                self._column_attribute(model, model, column)
                for column in self.get_required_columns(model, column_map)
            ]
            query = query.options(load_only(*attributes))

        for path in self.get_relationships_to_load(column_map):
            option = self._eager_load_option(model, path)
            if option is not None:
                query = query.options(option)

        if search and search.strip() and searchable_fields:
            query = self.apply_search_filters(query, model, search, searchable_fields, column_map, like_pattern)

        if sort_by and sort_by in sortable_fields:
            query = self.apply_sorting(query, model, column_map, sort_by, direction)
        else:
            default_sort_column = primary_key
            if "created_at" in self.validation_service.get_table_columns(model):
                default_sort_column = "created_at"
            query = query.order_by(_ordered(table.c[default_sort_column], direction))

        # Stable pages when several rows share the sort value
        return query.order_by(table.c[primary_key].asc())

    @staticmethod
    def normalize_direction(sort_direction: Optional[str]) -> str:
        direction = (sort_direction or "").strip().lower()
        return direction if direction in SORT_DIRECTIONS else "asc"

    def needs_specific_columns_for_belongs_to_sort(self, model, sort_by: str, sortable_fields: List[str]) -> bool:
        """True when sorting by a sortable dotted field whose first relation is BelongsTo."""
        if not sort_by or sort_by not in sortable_fields or "." not in sort_by:
            return False

        relation_parts = self.validation_service.get_relation_parts(sort_by)
        relation = self.validation_service.get_relation_instance(model, relation_parts[0])
        return relation is not None and self.classify_relation(relation) == BELONGS_TO

    def get_required_columns(self, model, column_map: Dict[str, Any]) -> List[str]:
        """Main table columns to load: primary key, direct fields and BelongsTo keys."""
        table_columns = self.validation_service.get_table_columns(model)

        columns = [self.validation_service.get_primary_key_name(model)]
        columns.extend(field for field in column_map if "." not in field and field in table_columns)
        columns.extend(self.get_foreign_keys_for_relations(model, column_map))

        return [column for column in dict.fromkeys(columns) if column in table_columns]

    def get_foreign_keys_for_relations(self, model, column_map: Dict[str, Any]) -> List[str]:
        """Foreign keys held by the main table for the first relation of each dotted field.

        Only BelongsTo relations keep their key on the main table; the other
        kinds store it on the related or association table.
        """
        table_columns = self.validation_service.get_table_columns(model)
        foreign_keys: List[str] = []

        for field in column_map:
            relation_parts = self.validation_service.get_relation_parts(field)
            if not relation_parts:
                continue
            relation = self.validation_service.get_relation_instance(model, relation_parts[0])
            if relation is None or self.classify_relation(relation) != BELONGS_TO:
                continue
            for column in relation.local_columns:
                if column.name in table_columns:
                    foreign_keys.append(column.name)

        return list(dict.fromkeys(foreign_keys))

    def get_relationships_to_load(self, column_map: Dict[str, Any]) -> List[str]:
        """Every relation path prefix of the dotted fields, shallowest first.

        ``{'user.country.name': ...}`` -> ``['user', 'user.country']``
        """
        paths: List[str] = []
        for field in column_map:
            if "." not in field:
                continue
            parts = self.validation_service.get_relation_parts(field)
            paths.extend(self.build_nested_relation_paths(parts))

        unique_paths = list(dict.fromkeys(paths))
        return sorted(unique_paths, key=lambda path: path.count(".") + 1)

    def build_nested_relation_paths(self, parts: List[str]) -> List[str]:
        """``['user', 'country']`` -> ``['user', 'user.country']``"""
        paths = []
        current_path = ""
        for part in parts:
            current_path = f"{current_path}.{part}" if current_path else part
            paths.append(current_path)
        return paths

    def _eager_load_option(self, model, path: str):
        option = None
        current_model = model
        for name in path.split("."):
            relation = self.validation_service.get_relation_instance(current_model, name)
            if relation is None:
                return None
            attribute = getattr(current_model, relation.key)
            option = selectinload(attribute) if option is None else option.selectinload(attribute)
            current_model = relation.mapper.class_
        return option

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def apply_search_filters(
        self,
        query: Query,
        model,
        search: str,
        searchable_fields: List[str],
        column_map: Dict[str, Any],
        like_pattern: str,
    ) -> Query:
        """OR together a case-insensitive LIKE per searchable field."""
        search_term = f"{like_pattern}{search}{like_pattern}"
        table = sa_inspect(model).local_table

        conditions = []
        for field in searchable_fields:
            if "." in field:
                condition = self.build_nested_relation_search_filter(model, field, search_term, column_map)
            elif field in table.c:
                condition = table.c[field].ilike(search_term)
            else:
                logger.warning("Searchable field '%s' is not a column of %s; skipped.", field, table.name)
                condition = None
            if condition is not None:
                conditions.append(condition)

        if not conditions:
            return query
        return query.filter(or_(*conditions))

    def build_nested_relation_search_filter(self, model, field: str, search_term: str, column_map: Dict[str, Any]):
        """EXISTS criterion matching ``search_term`` on the related table of ``field``."""
        relation_parts = self.validation_service.get_relation_parts(field)
        property_name = field.split(".")[-1]

        chain = []
        current_model = model
        for name in relation_parts:
            relation = self.validation_service.get_relation_instance(current_model, name)
            if relation is None:
                return None
            chain.append((current_model, relation))
            current_model = relation.mapper.class_

        related_table = sa_inspect(current_model).local_table
        search_columns = self.config_service.get_search_columns_for_relation(column_map, field, property_name)

        column_conditions = []
        for column in search_columns:
            if column not in related_table.c:
                logger.warning("Search column '%s' is not a column of %s; skipped.", column, related_table.name)
                continue
            column_conditions.append(related_table.c[column].ilike(search_term))
        if not column_conditions:
            return None

        condition = or_(*column_conditions)
        for owner, relation in reversed(chain):
            attribute = getattr(owner, relation.key)
            condition = attribute.any(condition) if relation.uselist else attribute.has(condition)
        return condition

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def apply_sorting(self, query: Query, model, column_map: Dict[str, Any], sort_by: str, sort_direction: str) -> Query:
        table = sa_inspect(model).local_table
        primary_key = self.validation_service.get_primary_key_name(model)

        if "." not in sort_by:
            valid_sort_by = self.validation_service.validate_sort_column(sort_by, model)
            return query.order_by(_ordered(table.c[valid_sort_by], sort_direction))

        relation_parts = self.validation_service.get_relation_parts(sort_by)
        column = sort_by.split(".")[-1]
        relation_path = ".".join(relation_parts)

        first_relation = self.validation_service.get_relation_instance(model, relation_parts[0])
        if first_relation is None:
            logger.warning(
                "Cannot sort by '%s': relation '%s' is not valid.", sort_by, relation_parts[0]
            )
            return query.order_by(table.c[primary_key].asc())

        relation_type = self.classify_relation(first_relation)
        physical_sort_column = self.config_service.get_sorting_column(column_map, sort_by, column)

        if relation_type == BELONGS_TO:
            return self.apply_sorting_for_belongs_to(query, model, relation_parts, physical_sort_column, sort_direction)
        if relation_type == HAS_RELATION:
            return self.apply_sorting_for_has_relation(query, model, relation_path, physical_sort_column, sort_direction)
        if relation_type == MANY_TO_MANY:
            return self.apply_sorting_for_many_to_many(query, model, relation_path, physical_sort_column, sort_direction)
        if relation_type == THROUGH_RELATION:
            return self.apply_sorting_for_through_relation(query, model, relation_path, physical_sort_column, sort_direction)

        logger.warning(
            "Using generic subquery sorting for '%s' (type: %s).", sort_by, relation_type
        )
        return self.apply_sorting_with_subquery(query, model, relation_path, physical_sort_column, sort_direction)

    def classify_relation(self, relation) -> str:
        """Group a relationship by the sorting strategy it needs."""
        if relation.secondary is not None:
            if self._is_entity_table(relation.secondary):
                return THROUGH_RELATION
            return MANY_TO_MANY
        if relation.direction is MANYTOONE:
            return BELONGS_TO
        if relation.direction is ONETOMANY:
            return HAS_RELATION
        return OTHER_RELATION

    @staticmethod
    def _is_entity_table(table) -> bool:
        name = getattr(table, "name", None)
        return any(mapper.local_table.name == name for mapper in Base.registry.mappers)

    def apply_sorting_for_belongs_to(
        self, query: Query, model, relation_parts: List[str], column: str, sort_direction: str
    ) -> Query:
        """LEFT JOIN each BelongsTo hop under an alias and order by the last one."""
        current_model = model
        last_entity = model

        for index, relation_name in enumerate(relation_parts):
            relation = self.validation_service.get_relation_instance(current_model, relation_name)

            if relation is None or self.classify_relation(relation) != BELONGS_TO:
                logger.warning(
                    "Sort chain link '%s' is not a BelongsTo relation; ordering by the last joined key.",
                    relation_name,
                )
                fallback_column = self.validation_service.validate_sort_column(
                    self.validation_service.get_primary_key_name(current_model), current_model
                )
                return query.order_by(
                    _ordered(self._column_attribute(last_entity, current_model, fallback_column), sort_direction)
                )

            related_model = relation.mapper.class_
            joined = aliased(related_model, name=f"sort_join_{index}")
            query = query.outerjoin(getattr(last_entity, relation.key).of_type(joined))

            current_model = related_model
            last_entity = joined

        valid_sort_column = self.validation_service.validate_sort_column(column, current_model)
        return query.order_by(
            _ordered(self._column_attribute(last_entity, current_model, valid_sort_column), sort_direction)
        )

    def apply_sorting_for_has_relation(
        self, query: Query, model, relation_path: str, column: str, sort_direction: str
    ) -> Query:
        """One-to-many / one-to-one: order by the first related value of each row."""
        return self._apply_subquery_sorting(query, model, relation_path, column, sort_direction, HAS_RELATION)

    def apply_sorting_for_many_to_many(
        self, query: Query, model, relation_path: str, column: str, sort_direction: str
    ) -> Query:
        """Association-table relations: the subquery joins through the pivot table."""
        return self._apply_subquery_sorting(query, model, relation_path, column, sort_direction, MANY_TO_MANY)

    def apply_sorting_for_through_relation(
        self, query: Query, model, relation_path: str, column: str, sort_direction: str
    ) -> Query:
        """Relations reaching a far table through an intermediate entity table."""
        return self._apply_subquery_sorting(query, model, relation_path, column, sort_direction, THROUGH_RELATION)

    def apply_sorting_with_subquery(
        self, query: Query, model, relation_path: str, column: str, sort_direction: str
    ) -> Query:
        return self._apply_subquery_sorting(query, model, relation_path, column, sort_direction, OTHER_RELATION)

    def _apply_subquery_sorting(
        self, query: Query, model, relation_path: str, column: str, sort_direction: str, relation_type: str
    ) -> Query:
        table = sa_inspect(model).local_table
        primary_key = self.validation_service.get_primary_key_name(model)

        if self.get_nested_relation_instance(model, relation_path) is None:
            logger.warning(
                "Could not resolve %s relation '%s' for sorting.", relation_type, relation_path
            )
            return query.order_by(table.c[primary_key].asc())

        sort_value = self.build_sort_subquery(model, relation_path.split("."), column, sort_direction)
        return query.order_by(_ordered(sort_value, sort_direction))

    def build_sort_subquery(self, model, relation_parts: List[str], column: str, sort_direction: str):
        """Correlated scalar subquery yielding one related value per outer row.

        The subquery starts from an alias of the main model, joins every
        relation of the path (association and through tables included) and
        is tied to the outer row by primary key. Ordering it in the requested
        direction and keeping one row picks the smallest value for ``asc``
        and the largest for ``desc``.
        """
        anchor = aliased(model, name="sort_anchor")
        current_model = model
        current_entity = anchor
        joins = []

        for index, relation_name in enumerate(relation_parts):
            relation = self.validation_service.get_relation_instance(current_model, relation_name)
            target = aliased(relation.mapper.class_, name=f"sort_sub_{index}")
            joins.append(getattr(current_entity, relation.key).of_type(target))
            current_model = relation.mapper.class_
            current_entity = target

        valid_sort_column = self.validation_service.validate_sort_column(column, current_model)
        sort_attribute = self._column_attribute(current_entity, current_model, valid_sort_column)

        primary_key = self.validation_service.get_primary_key_name(model)
        subquery = select(sort_attribute).select_from(anchor)
        for join in joins:
            subquery = subquery.join(join)
        return (
            subquery.where(
                self._column_attribute(anchor, model, primary_key)
                == self._column_attribute(model, model, primary_key)
            )
            .order_by(_ordered(sort_attribute, sort_direction))
            .limit(1)
            .correlate(model)
            .scalar_subquery()
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def get_nested_relation_instance(self, model, relation_path: str):
        """Return the last relationship of a dotted relation path, or None."""
        current_model = model
        relation = None
        for part in relation_path.split("."):
            relation = self.validation_service.get_relation_instance(current_model, part)
            if relation is None:
                return None
            current_model = relation.mapper.class_
        return relation

    @staticmethod
    def _column_attribute(entity, model, column_name: str):
        """ORM attribute of ``entity`` (class or alias of ``model``) for a physical column."""
        mapper = sa_inspect(model)
        prop = mapper.get_property_by_column(mapper.local_table.c[column_name])
        return getattr(entity, prop.key)
