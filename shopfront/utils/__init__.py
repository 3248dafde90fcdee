"""Utilities package"""

from .pagination import paginate, PaginationParams, pagination_meta
from .validators import ValidationResult

__all__ = [
    "paginate",
    "PaginationParams",
    "pagination_meta",
    "ValidationResult",
]
