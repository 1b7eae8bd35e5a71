"""Display formatting for dynamic table cells."""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Iterable, List

from babel.core import UnknownLocaleError
from babel.dates import format_date

from admin_panel.datatable.validation import ValidationService
from admin_panel.utils.locale import get_locale

logger = logging.getLogger(__name__)

EMPTY_VALUE = "-"


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value in ("", "0")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


class PresentationService:

    def __init__(self, validation_service: ValidationService):
        self.validation_service = validation_service

    def get_formatted_value(self, instance, column: str):
        """
        Return the display value of ``column`` for a row.

        Dotted columns walk the (already loaded) relations of the row. When
        the walk ends on several related objects their values are joined
        with ``", "``; a single related object is formatted like a direct
        column. A broken chain yields ``None``.
        """
        if "." not in column:
            return self.compute_model_property_value(instance, column)

        relations = self.validation_service.get_relation_parts(column)
        property_name = column.split(".")[-1]

        related = self._walk_relations(instance, relations)
        if related is None:
            return None

        if isinstance(related, list):
            values = [self._raw_value(item, property_name) for item in related]
            return ", ".join(str(value) for value in values if value)

        return self.compute_model_property_value(related, property_name)

    def _walk_relations(self, instance, relations: List[str]):
        current: Any = instance
        for relation in relations:
            if isinstance(current, list):
                current = self._flatten(getattr(item, relation, None) for item in current)
            else:
                current = getattr(current, relation, None)
                if _is_collection(current):
                    current = list(current)
            if current is None:
                return None
        return current

    @staticmethod
    def _flatten(values: Iterable[Any]) -> List[Any]:
        flattened: List[Any] = []
        for value in values:
            if value is None:
                continue
            if _is_collection(value):
                flattened.extend(value)
            else:
                flattened.append(value)
        return flattened

    @staticmethod
    def _raw_value(instance, property_name: str):
        return getattr(instance, property_name, None)

    def compute_model_property_value(self, instance, property_name: str):
        """Attribute or accessor value, with dates localized and empty values as ``-``."""
        value = getattr(instance, property_name, None)

        if isinstance(value, (dt.datetime, dt.date)):
            return self.format_date_value(value)

        if _is_empty(value):
            return EMPTY_VALUE
        return value

    def format_date_value(self, value) -> str:
        """Long localized date, e.g. ``April 19, 2025`` or ``19 de abril de 2025``."""
        locale = get_locale()
        try:
            return format_date(value, format="long", locale=locale)
        except (UnknownLocaleError, ValueError, TypeError) as e:
            logger.warning("Could not format date %r for locale '%s': %s", value, locale, e)
            as_date = value.date() if isinstance(value, dt.datetime) else value
            return as_date.isoformat()
