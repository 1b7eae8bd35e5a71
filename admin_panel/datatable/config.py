"""Per-column settings extracted from a table's column map."""
from typing import Any, Dict, List

from admin_panel.utils.locale import get_locale


class ConfigService:

    def extract_configured_fields(self, column_map: Dict[str, Any], key: str) -> List[str]:
        """Return the fields whose configuration sets ``key`` to exactly ``True``.

        Args:
            column_map: Column configuration keyed by field.
            key: Flag to look for (e.g. ``searchable``, ``sortable``).
        """
        return [
            field
            for field, config in column_map.items()
            if isinstance(config, dict) and config.get(key, False) is True
        ]

    def get_search_columns_for_relation(self, column_map: Dict[str, Any], field: str, default_column: str) -> List[str]:
        """Physical columns to search for a relation field (``relation.property``)."""
        config = column_map.get(field)
        if isinstance(config, dict) and config.get("search_columns"):
            return list(config["search_columns"])
        return [default_column]

    def get_sorting_column(self, column_map: Dict[str, Any], full_field_name: str, default_column: str) -> str:
        """Physical column to sort a field by.

        ``sort_column`` may be a single column or a list of alternatives, the
        second of which is used for the Spanish locale.
        """
        config = column_map.get(full_field_name)
        if not isinstance(config, dict) or config.get("sort_column") is None:
            return default_column

        sort_columns = config["sort_column"]
        if isinstance(sort_columns, (list, tuple)):
            if not sort_columns:
                return default_column
            if get_locale() == "es" and len(sort_columns) > 1:
                return sort_columns[1]
            return sort_columns[0]
        return sort_columns
