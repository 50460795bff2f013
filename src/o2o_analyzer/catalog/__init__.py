"""File discovery and naming-convention classification."""

from .classifier import BUCKETS, bucket, bucketize, categories, class_name, classify, matches
from .paths import PathCatalog

__all__ = [
    "BUCKETS",
    "PathCatalog",
    "bucket",
    "bucketize",
    "categories",
    "class_name",
    "classify",
    "matches",
]
