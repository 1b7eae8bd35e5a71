"""
Data table API endpoints.

Renders any registered dynamic table with search, sort and pagination
query parameters.
"""
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from admin_panel.api.deps import require_admin
from admin_panel.datatable import DynamicTable, TableDefinition, TableView, get_table_definition
from admin_panel.db import models, schemas
from admin_panel.db.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tables", tags=["tables"])


def to_table_page(view: TableView) -> dict:
    return {
        "columns": [asdict(column) for column in view.columns],
        "items": [{"key": row.key, "cells": row.cells} for row in view.rows],
        "search": view.search,
        "sort_by": view.sort_by,
        "sort_direction": view.sort_direction,
        "page": view.page,
        "per_page": view.per_page,
        "total_items": view.total_items,
        "total_pages": view.total_pages,
        "table_actions": view.table_actions,
        "initialization_error": view.initialization_error,
    }


def render_table(
    db: Session,
    definition: TableDefinition,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_direction: Optional[str] = None,
    page: int = 1,
    per_page: Optional[int] = None,
) -> dict:
    table = DynamicTable.from_request(
        definition.model_class,
        definition.column_map,
        search=search,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        per_page=per_page,
        default_sort_by=definition.sort_by,
        default_sort_direction=definition.sort_direction,
        table_actions=definition.table_actions,
    )
    return to_table_page(table.render(db))


@router.get("/{table_name}", response_model=schemas.TablePage)
def get_table(
    table_name: str,
    search: Optional[str] = Query(default=None, max_length=255),
    sort_by: Optional[str] = Query(default=None),
    sort_direction: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    per_page: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    _admin: models.User = Depends(require_admin),
):
    definition = get_table_definition(table_name)
    if definition is None:
        logger.info("table_not_found: name=%s", table_name)
        raise HTTPException(status_code=404, detail="Table not found")
    return render_table(
        db,
        definition,
        search=search,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        per_page=per_page,
    )
