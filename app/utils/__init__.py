"""Utility functions for the backend."""

from app.utils.classifier import classify, classify_category, derive_tags, has_mandatory_fields
from app.utils.normalizers import assemble_place, assemble_places

__all__ = [
    "classify",
    "classify_category",
    "derive_tags",
    "has_mandatory_fields",
    "assemble_place",
    "assemble_places",
]
