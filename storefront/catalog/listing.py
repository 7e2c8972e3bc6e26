"""Listing pipeline: source selection, filtering and sorting of product summaries.

Everything here is a pure function of its inputs. The stateful controller and
the HTTP routes both call into it.
"""
import unicodedata
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union
from storefront.data.schemas import ProductSummary

ALL_CATEGORIES = "all"
SEARCH_MIN_LENGTH = 2

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class SortOption(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    NAME_AZ = "name-az"
    NAME_ZA = "name-za"


class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"


@dataclass(frozen=True)
class FilterState:
    """The user's current predicate set."""
    search_term: str = ""
    category: str = ALL_CATEGORIES
    in_stock_only: bool = False
    on_sale_only: bool = False
    sort: SortOption = SortOption.NEWEST
    view_mode: ViewMode = ViewMode.GRID

    def update(self, **changes) -> "FilterState":
        return replace(self, **changes)

    def has_active_filters(self, debounced_term: str = "") -> bool:
        return (
            self.category != ALL_CATEGORIES
            or self.in_stock_only
            or self.on_sale_only
            or len(debounced_term) > 0
        )


@dataclass(frozen=True)
class CatalogSource:
    """The full catalog is the working set."""
    products: Optional[Sequence[ProductSummary]]
    name: str = field(default="catalog", init=False)


@dataclass(frozen=True)
class SearchResultsSource:
    """Search results for the debounced term are the working set."""
    term: str
    products: Optional[Sequence[ProductSummary]]
    name: str = field(default="search", init=False)


ProductSource = Union[CatalogSource, SearchResultsSource]


def is_search_active(term: Optional[str], min_length: int = SEARCH_MIN_LENGTH) -> bool:
    return term is not None and len(term) >= min_length


def select_source(
    term: Optional[str],
    catalog: Optional[Sequence[ProductSummary]],
    search_results: Optional[Sequence[ProductSummary]],
    min_length: int = SEARCH_MIN_LENGTH
) -> ProductSource:
    """
    Pick the working set for the listing.

    Args:
        term: Debounced search term
        catalog: Full product set (None while loading)
        search_results: Results for term (None while loading or inactive)
        min_length: Shortest term that activates search

    Returns:
        SearchResultsSource when the term is long enough, else CatalogSource
    """
    if is_search_active(term, min_length):
        return SearchResultsSource(term=term, products=search_results)
    return CatalogSource(products=catalog)


def is_on_sale(product: ProductSummary) -> bool:
    # A populated sale price that is not below the base price does not count
    return product.has_discount


def effective_price(product: ProductSummary) -> int:
    return product.effective_price


def collation_key(text: str) -> str:
    """Accent- and case-insensitive key approximating locale-aware ordering."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _published(product: ProductSummary) -> datetime:
    published_at = product.published_at
    if published_at is None:
        return _EPOCH
    if published_at.tzinfo is None:
        return published_at.replace(tzinfo=timezone.utc)
    return published_at


def _title(product: ProductSummary) -> str:
    return collation_key(product.title)


# Sort key and direction (reverse) per option; sorted() is stable either way
SORT_KEYS: Dict[SortOption, Tuple[Callable[[ProductSummary], object], bool]] = {
    SortOption.NEWEST: (_published, True),
    SortOption.OLDEST: (_published, False),
    SortOption.PRICE_LOW: (effective_price, False),
    SortOption.PRICE_HIGH: (effective_price, True),
    SortOption.NAME_AZ: (_title, False),
    SortOption.NAME_ZA: (_title, True),
}


def apply_filters(products: Sequence[ProductSummary], filters: FilterState) -> List[ProductSummary]:
    """Apply category, stock and sale predicates in order."""
    result = list(products)

    if filters.category != ALL_CATEGORIES:
        result = [p for p in result if p.category is not None and p.category.id == filters.category]

    if filters.in_stock_only:
        result = [p for p in result if p.in_stock]

    if filters.on_sale_only:
        result = [p for p in result if is_on_sale(p)]

    return result


def sort_products(products: Sequence[ProductSummary], sort: SortOption) -> List[ProductSummary]:
    """Stable sort by the comparator for sort; equal keys keep their order."""
    key, reverse = SORT_KEYS[SortOption(sort)]
    return sorted(products, key=key, reverse=reverse)


def filter_and_sort(source: ProductSource, filters: FilterState) -> List[ProductSummary]:
    """
    Produce the ordered, filtered listing.

    Args:
        source: Selected working set
        filters: Current filter state

    Returns:
        New list of products; empty when the source is not loaded yet
    """
    if source.products is None:
        return []
    return sort_products(apply_filters(source.products, filters), filters.sort)


def build_listing(
    filters: FilterState,
    debounced_term: str,
    catalog: Optional[Sequence[ProductSummary]],
    search_results: Optional[Sequence[ProductSummary]],
    min_length: int = SEARCH_MIN_LENGTH
) -> List[ProductSummary]:
    """Source selection followed by filter and sort."""
    source = select_source(debounced_term, catalog, search_results, min_length)
    return filter_and_sort(source, filters)
