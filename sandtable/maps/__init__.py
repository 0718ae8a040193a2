"""
Mapping helpers: THR polar coordinates to sand grid coordinates.
"""
from .table_scale import DEFAULT_MARGIN, TableScale

__all__ = [
    "DEFAULT_MARGIN",
    "TableScale",
]
