"""
Domain-split Pydantic schemas re-exported for `from admin_panel.db import schemas`.
"""

from .users import RoleOut, UserBase, UserCreate, UserUpdate, User
from .tables import TableColumn, TableRow, TablePage

__all__ = [
    "RoleOut",
    "UserBase",
    "UserCreate",
    "UserUpdate",
    "User",
    "TableColumn",
    "TableRow",
    "TablePage",
]
