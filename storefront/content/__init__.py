"""Content store access: queries, caching and typed reads."""
from .api import CatalogAPI
from .cache import QueryKey, RequestCache
from .client import ContentStoreClient
from .errors import ContentStoreError
from .images import ImageUrlBuilder

__all__ = [
    "CatalogAPI",
    "QueryKey",
    "RequestCache",
    "ContentStoreClient",
    "ContentStoreError",
    "ImageUrlBuilder"
]
