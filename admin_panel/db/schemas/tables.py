from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict


class TableColumn(BaseModel):
    field: str
    label: str
    sortable: bool = False
    searchable: bool = False
    model_config = ConfigDict(from_attributes=True)


class TableRow(BaseModel):
    key: Any
    cells: Dict[str, Any]
    model_config = ConfigDict(from_attributes=True)


class TablePage(BaseModel):
    columns: List[TableColumn]
    items: List[TableRow]
    search: str
    sort_by: str
    sort_direction: str
    page: int
    per_page: int
    total_items: int
    total_pages: int
    table_actions: List[str] = []
    initialization_error: str | None = None
