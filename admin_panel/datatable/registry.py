"""Data tables exposed by the admin panel."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TableDefinition:
    name: str
    model_class: str
    column_map: Dict[str, Any]
    sort_by: str = "created_at"
    sort_direction: str = "asc"
    table_actions: List[str] = field(default_factory=list)


USERS_TABLE = TableDefinition(
    name="users",
    model_class="User",
    column_map={
        "id": {"label": "ID", "sortable": True},
        "name": {"label": "Name", "searchable": True, "sortable": True},
        "email": {"label": "Email", "searchable": True, "sortable": True},
        "roles.name": {"label": "Roles", "searchable": True, "sortable": True},
        "country.name": {
            "label": "Country",
            "searchable": True,
            "sortable": True,
            "search_columns": ["en_name", "es_name"],
            "sort_column": ["en_name", "es_name"],
        },
        "created_at": {"label": "Created", "sortable": True},
    },
    sort_by="created_at",
    sort_direction="desc",
    table_actions=["view", "edit", "delete"],
)

COUNTRIES_TABLE = TableDefinition(
    name="countries",
    model_class="Country",
    column_map={
        "id": {"label": "ID", "sortable": True},
        "name": {
            "label": "Name",
            "searchable": False,
            "sortable": False,
        },
        "en_name": {"label": "English name", "searchable": True, "sortable": True},
        "es_name": {"label": "Spanish name", "searchable": True, "sortable": True},
        "iso_code": {"label": "ISO", "searchable": True, "sortable": True},
        "phone_code": {"label": "Phone code", "sortable": True},
        "users.email": {"label": "Users", "searchable": True, "sortable": True},
        "sessions.ip_address": {"label": "Session IPs", "sortable": True},
    },
    sort_by="en_name",
    sort_direction="asc",
)

TABLES: Dict[str, TableDefinition] = {
    USERS_TABLE.name: USERS_TABLE,
    COUNTRIES_TABLE.name: COUNTRIES_TABLE,
}


def get_table_definition(name: str) -> Optional[TableDefinition]:
    return TABLES.get((name or "").strip().lower())
