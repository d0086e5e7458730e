"""
Type aliases for the query assistant client.

Provides reusable, descriptive type aliases for result rows and columns.
"""

from typing import Dict, Tuple

from .cell_values import CellValue


# Typed result row: {column_name: CellValue}, insertion order preserved
ResultRow = Dict[str, CellValue]

# Ordered, distinct column names of a result set
ColumnSet = Tuple[str, ...]
