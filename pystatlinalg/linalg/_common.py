"""Shared helpers for the operation families."""

from pystatlinalg.core.exceptions import ValidationError
from pystatlinalg.core.layouts import TRIANGLE_LOWER, TRIANGLE_UPPER, Triangle
from pystatlinalg.core.validation import check_triangle
from pystatlinalg.core.view import MatrixView


def resolve_triangle(
    view: MatrixView,
    triangle: Triangle | None,
    name: str,
) -> Triangle:
    """
    Triangle to read from a symmetric or triangular operand.

    An explicit argument wins over the view's declared tag; a view without
    a tag and no argument means 'upper'. An argument that contradicts the
    tag is an error rather than a silent override.
    """
    if triangle is not None:
        check_triangle(triangle, name)
        if view.triangle is not None and view.triangle != triangle:
            raise ValidationError(
                f"{name}: triangle={triangle!r} contradicts the view's declared "
                f"triangle {view.triangle!r}"
            )
        return triangle
    if view.triangle is not None:
        return view.triangle
    return TRIANGLE_UPPER


def resolve_unit_diagonal(view: MatrixView, unit_diagonal: bool | None) -> bool:
    if unit_diagonal is None:
        return view.unit_diagonal
    return unit_diagonal


def is_lower(triangle: Triangle) -> bool:
    return triangle == TRIANGLE_LOWER
