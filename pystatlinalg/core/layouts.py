"""
Layout, triangle and mutability string constants for pystatlinalg.

This module is the SINGLE SOURCE OF TRUTH for these strings.
Import from here, never use raw strings.

Usage:
    from pystatlinalg.core.layouts import (
        LAYOUT_ROW_MAJOR,
        TRIANGLE_UPPER,
    )

    if view.layout == LAYOUT_ROW_MAJOR:
        ...
"""

from typing import Literal

# Rows are contiguous in memory (C order)
LAYOUT_ROW_MAJOR = 'contiguous_row'

# Columns are contiguous in memory (Fortran order)
LAYOUT_COLUMN_MAJOR = 'contiguous_col'

# Unit stride down each column but with gaps between columns, e.g. the
# transpose of a row-sliced C-ordered matrix
LAYOUT_TRANSPOSED = 'transposed'

# Anything else: non-unit strides in both directions
LAYOUT_STRIDED = 'strided'

ALL_LAYOUTS = frozenset({
    LAYOUT_ROW_MAJOR,
    LAYOUT_COLUMN_MAJOR,
    LAYOUT_TRANSPOSED,
    LAYOUT_STRIDED,
})

# Which triangle of a symmetric or triangular operand holds the data
TRIANGLE_UPPER = 'upper'
TRIANGLE_LOWER = 'lower'

ALL_TRIANGLES = frozenset({TRIANGLE_UPPER, TRIANGLE_LOWER})

Triangle = Literal['upper', 'lower']

MUTABILITY_READ_ONLY = 'read_only'
MUTABILITY_READ_WRITE = 'read_write'

ELEMENT_REAL = 'real'
ELEMENT_COMPLEX = 'complex'

__all__ = [
    'LAYOUT_ROW_MAJOR',
    'LAYOUT_COLUMN_MAJOR',
    'LAYOUT_TRANSPOSED',
    'LAYOUT_STRIDED',
    'ALL_LAYOUTS',
    'TRIANGLE_UPPER',
    'TRIANGLE_LOWER',
    'ALL_TRIANGLES',
    'Triangle',
    'MUTABILITY_READ_ONLY',
    'MUTABILITY_READ_WRITE',
    'ELEMENT_REAL',
    'ELEMENT_COMPLEX',
]
