"""
Generic data table: validation, configuration, query building and presentation
of searchable, sortable and paginated model listings.
"""
from .validation import ValidationService, InvalidModelError
from .config import ConfigService
from .query import QueryService
from .presentation import PresentationService
from .table import DynamicTable, TableView, TableRow, TableColumn
from .registry import TableDefinition, TABLES, get_table_definition

__all__ = [
    "ValidationService",
    "InvalidModelError",
    "ConfigService",
    "QueryService",
    "PresentationService",
    "DynamicTable",
    "TableView",
    "TableRow",
    "TableColumn",
    "TableDefinition",
    "TABLES",
    "get_table_definition",
]
