"""Listing, search, data resources and favorites for the product catalog."""
from .controller import ListingController
from .debounce import Debouncer
from .favorites import FavoritesStore, InMemoryStorage, KeyValueStorage
from .listing import (
    ALL_CATEGORIES,
    CatalogSource,
    FilterState,
    SearchResultsSource,
    SortOption,
    ViewMode,
    build_listing,
    filter_and_sort,
    select_source,
)

__all__ = [
    "ListingController",
    "Debouncer",
    "FavoritesStore",
    "InMemoryStorage",
    "KeyValueStorage",
    "ALL_CATEGORIES",
    "CatalogSource",
    "FilterState",
    "SearchResultsSource",
    "SortOption",
    "ViewMode",
    "build_listing",
    "filter_and_sort",
    "select_source"
]
