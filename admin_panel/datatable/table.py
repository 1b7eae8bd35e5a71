"""
Stateful dynamic table component.

``DynamicTable`` keeps the interactive state of one table (search term,
sort field and direction, page) and renders a page of formatted rows by
driving the validation, query and presentation services.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from admin_panel.datatable.config import ConfigService
from admin_panel.datatable.presentation import PresentationService
from admin_panel.datatable.query import QueryService
from admin_panel.datatable.validation import ValidationService
from admin_panel.utils.settings import get_settings

logger = logging.getLogger(__name__)

NOT_INITIALIZED_MESSAGE = "Error: table not initialized"


@dataclass(frozen=True)
class TableColumn:
    field: str
    label: str
    sortable: bool = False
    searchable: bool = False


@dataclass(frozen=True)
class TableRow:
    key: Any
    cells: Dict[str, Any]


@dataclass
class TableView:
    columns: List[TableColumn] = field(default_factory=list)
    rows: List[TableRow] = field(default_factory=list)
    search: str = ""
    sort_by: str = ""
    sort_direction: str = "asc"
    page: int = 1
    per_page: int = 15
    total_items: int = 0
    total_pages: int = 0
    table_actions: List[str] = field(default_factory=list)
    initialization_error: Optional[str] = None


class DynamicTable:
    """Search, sort and paginate a mapped model driven by a column map.

    Example column map::

        {
            "id": {"label": "ID", "sortable": True},
            "name": {"label": "Name", "searchable": True, "sortable": True},
            "roles.name": {"label": "Roles", "searchable": True, "sortable": True},
        }
    """

    def __init__(
        self,
        validation_service: Optional[ValidationService] = None,
        config_service: Optional[ConfigService] = None,
        query_service: Optional[QueryService] = None,
        presentation_service: Optional[PresentationService] = None,
    ):
        self.validation_service = validation_service or ValidationService()
        self.config_service = config_service or ConfigService()
        self.query_service = query_service or QueryService(self.validation_service, self.config_service)
        self.presentation_service = presentation_service or PresentationService(self.validation_service)

        self.model_class: Any = ""
        self.original_column_map: Dict[str, Any] = {}
        self.sort_direction = "asc"
        self.sort_by = "created_at"
        self.table_actions: List[str] = []
        self.search = ""
        self.per_page = get_settings().table_per_page
        self.page = 1

        self.model = None
        self.validated_column_map: Dict[str, Any] = {}
        self.searchable_fields: List[str] = []
        self.sortable_fields: List[str] = []

    @property
    def is_initialized(self) -> bool:
        return self.model is not None and bool(self.validated_column_map)

    def mount(
        self,
        model_class,
        column_map: Dict[str, Any],
        sort_by: str = "created_at",
        sort_direction: str = "asc",
        table_actions: Optional[List[str]] = None,
    ) -> "DynamicTable":
        """Validate the model and column map and set the initial state.

        Raises:
            InvalidModelError: If ``model_class`` is not a mapped model.
        """
        self.model_class = model_class
        self.original_column_map = dict(column_map or {})
        self.table_actions = list(table_actions or [])
        self.sort_direction = QueryService.normalize_direction(sort_direction)

        self.model = self.validation_service.validate_model(model_class)
        self.validated_column_map = self.validation_service.validate_column_map(self.model, self.original_column_map)

        self.searchable_fields = self.config_service.extract_configured_fields(self.validated_column_map, "searchable")
        self.sortable_fields = self.config_service.extract_configured_fields(self.validated_column_map, "sortable")

        if sort_by != "created_at" and sort_by not in self.sortable_fields:
            table_columns = self.validation_service.get_table_columns(self.model)
            sort_by = "created_at" if "created_at" in table_columns else self.validation_service.get_primary_key_name(self.model)
        self.sort_by = sort_by
        return self

    @classmethod
    def from_request(
        cls,
        model_class,
        column_map: Dict[str, Any],
        *,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_direction: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        default_sort_by: str = "created_at",
        default_sort_direction: str = "asc",
        table_actions: Optional[List[str]] = None,
    ) -> "DynamicTable":
        """Build a mounted table from request query parameters."""
        table = cls()
        table.mount(
            model_class,
            column_map,
            sort_by=sort_by or default_sort_by,
            sort_direction=sort_direction or default_sort_direction,
            table_actions=table_actions,
        )
        table.search = (search or "").strip()

        settings = get_settings()
        if per_page is not None:
            table.per_page = min(max(per_page, 1), settings.table_max_per_page)
        table.set_page(page or 1)
        return table

    def sort(self, field: str) -> None:
        if field not in self.sortable_fields:
            return

        if self.sort_by == field:
            self.sort_direction = "desc" if self.sort_direction == "asc" else "asc"
        else:
            self.sort_by = field
            self.sort_direction = "asc"

        self.reset_page()

    def update_search(self, search: str) -> None:
        self.search = search or ""
        self.reset_page()

    def set_page(self, page: int) -> None:
        self.page = max(int(page), 1)

    def reset_page(self) -> None:
        self.page = 1

    def get_value_for_column(self, item, column: str):
        if not self.is_initialized:
            return NOT_INITIALIZED_MESSAGE
        return self.presentation_service.get_formatted_value(item, column)

    def is_even(self, index: int) -> bool:
        # Zebra striping: odd indexes get the alternate background
        return index % 2 != 0

    def columns(self) -> List[TableColumn]:
        return [
            TableColumn(
                field=field_name,
                label=(config or {}).get("label", field_name) if isinstance(config, dict) else field_name,
                sortable=field_name in self.sortable_fields,
                searchable=field_name in self.searchable_fields,
            )
            for field_name, config in self.validated_column_map.items()
        ]

    def render(self, db: Session) -> TableView:
        """Return the current page of rows, formatted for display."""
        if not self.is_initialized:
            logger.warning(
                "Dynamic table rendered before initialization: model_class=%s column_map_keys=%s",
                self.model_class,
                list(self.original_column_map.keys()),
            )
            return TableView(
                search=self.search,
                sort_by=self.sort_by,
                sort_direction=self.sort_direction,
                page=self.page,
                per_page=self.per_page,
                table_actions=self.table_actions,
                initialization_error="The table could not be initialized correctly.",
            )

        query = self.query_service.build_query(
            db,
            self.model,
            self.validated_column_map,
            self.search,
            self.searchable_fields,
            self.sort_by,
            self.sortable_fields,
            self.sort_direction,
        )

        total_items = query.count()
        total_pages = math.ceil(total_items / self.per_page) if total_items else 0
        page = max(self.page, 1)
        items = query.offset((page - 1) * self.per_page).limit(self.per_page).all()

        mapper = sa_inspect(self.model)
        key_attribute = mapper.get_property_by_column(mapper.primary_key[0]).key
        rows = [
            TableRow(
                key=getattr(item, key_attribute),
                cells={column: self.get_value_for_column(item, column) for column in self.validated_column_map},
            )
            for item in items
        ]

        return TableView(
            columns=self.columns(),
            rows=rows,
            search=self.search,
            sort_by=self.sort_by,
            sort_direction=self.sort_direction,
            page=page,
            per_page=self.per_page,
            total_items=total_items,
            total_pages=total_pages,
            table_actions=self.table_actions,
        )

    def refresh(self, db: Session) -> TableView:
        return self.render(db)
